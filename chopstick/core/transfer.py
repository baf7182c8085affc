import os

from chopstick.core.errors import ReadFailed, WriteFailed


class TransferBuffer:
    """
    Fixed-capacity byte buffer reused for every copy in a run.

    ``length`` tracks how much of the allocation holds valid data; the
    allocation itself is never resized.
    """

    def __init__(self, capacity):
        if capacity < 1:
            raise ValueError(f"buffer capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._data = bytearray(capacity)
        self._view = memoryview(self._data)
        self.length = 0

    def fill_from(self, handle, limit):
        self.length = handle.readinto(self._view[:min(limit, self.capacity)]) or 0
        return self.length

    def filled(self):
        return self._view[:self.length]


class ChunkedTransfer:
    """Streams byte ranges out of one open file through a TransferBuffer."""

    def __init__(self, handle, buffer, path):
        self.handle = handle
        self.buffer = buffer
        self.path = path

    def seek_to(self, offset):
        try:
            self.handle.seek(offset)
        except OSError as e:
            raise ReadFailed(self.path, e) from e

    def read_up_to(self, end_offset):
        """
        Fills the buffer with at most the bytes left before end_offset.

        Returns:
            memoryview over the filled bytes, or None once end_offset is reached.
        """
        try:
            remaining = end_offset - self.handle.tell()
            if remaining <= 0:
                return None
            if self.buffer.fill_from(self.handle, remaining) == 0:
                raise ReadFailed(self.path, f"unexpected end of file {remaining} bytes before offset {end_offset}")
        except OSError as e:
            raise ReadFailed(self.path, e) from e
        return self.buffer.filled()

    def copy_to(self, dest, dest_path, start, end):
        """
        Copies bytes [start, end) of the source into dest at its current position.

        Returns:
            int: Number of bytes written.
        """
        self.seek_to(start)
        written = 0
        while True:
            chunk = self.read_up_to(end)
            if chunk is None:
                break
            try:
                dest.write(chunk)
            except OSError as e:
                raise WriteFailed(dest_path, e) from e
            written += len(chunk)
        return written


def flush_to_disk(handle, path):
    try:
        handle.flush()
        os.fsync(handle.fileno())
    except OSError as e:
        raise WriteFailed(path, e) from e
