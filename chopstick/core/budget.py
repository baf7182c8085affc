import os
import shutil

import psutil

from chopstick import DEFAULT_BUFFER_CEILING, log


class DiskInfo:
    """
    Reports free space on the volume holding a path.
    """

    def available_bytes(self, path):
        total, used, free = shutil.disk_usage(path)
        return free


class MemoryInfo:
    """
    Reports (total, available) system memory in bytes.
    """

    def memory(self):
        try:
            vm = psutil.virtual_memory()
        except psutil.Error as e:
            raise OSError(f"Memory introspection failed: {e}") from e
        return vm.total, vm.available


def _existing_ancestor(path):
    path = os.path.realpath(os.path.abspath(path))
    while not os.path.exists(path):
        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent
    return path


def sufficient_space(target_path, bytes_needed, disk_info=None):
    """
    Checks whether the volume containing target_path has bytes_needed free.

    Returns:
        True or False, or None when free space could not be determined. The
        latter is logged and left to the caller; a full disk still surfaces
        later as a failed write.
    """
    disk_info = disk_info or DiskInfo()
    location = _existing_ancestor(target_path)
    try:
        free = disk_info.available_bytes(location)
    except OSError as e:
        log(f"⚠️ Unable to check free disk space at {location}: {e}. Proceeding anyway", context="BUDGET")
        return None
    return free >= bytes_needed


def memory_ceiling(memory_info=None):
    memory_info = memory_info or MemoryInfo()
    try:
        total, available = memory_info.memory()
    except OSError as e:
        log(f"Memory size unknown ({e}), buffer limited to {DEFAULT_BUFFER_CEILING} bytes", context="BUDGET")
        return DEFAULT_BUFFER_CEILING
    return min(total // 8, available // 2)


def choose_buffer_size(requested_chunk_size, memory_info=None):
    """Size of the transfer buffer for a run: the chunk size, capped by memory."""
    return max(1, min(requested_chunk_size, memory_ceiling(memory_info)))
