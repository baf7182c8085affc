import os
from dataclasses import dataclass, field
from typing import List

from chopstick import log
from chopstick.core.budget import choose_buffer_size, sufficient_space
from chopstick.core.discovery import discover_parts
from chopstick.core.errors import (
    CreateFailed,
    DeleteFailed,
    InsufficientDiskSpace,
    InvalidRequest,
    OriginalFileAlreadyExists,
    OriginalUnreadable,
    PartFileAlreadyExists,
    ReadFailed,
    RenameFailed,
    TruncateFailed,
    WriteFailed,
)
from chopstick.core.sizing import PartRef, Split, parse_count, parse_size
from chopstick.core.transfer import ChunkedTransfer, TransferBuffer, flush_to_disk


@dataclass
class ChopResult:
    original: str
    split: Split
    parts: List[PartRef] = field(default_factory=list)
    retained: bool = False
    dry_run: bool = False


@dataclass
class StickResult:
    original: str
    parts: List[str] = field(default_factory=list)
    retained: bool = False
    dry_run: bool = False


# ---------------- Chop ----------------

def plan_split(file_size, part_size=None, num_parts=None):
    """Split plan for exactly one of a part size (int or e.g. "20K") or a part count."""
    if (part_size is None) == (num_parts is None):
        raise InvalidRequest()
    if part_size is not None:
        return Split.from_part_size(file_size, parse_size(part_size))
    return Split.from_num_parts(file_size, parse_count(num_parts))


def _write_part(transfer, part):
    try:
        dest = open(part.path, "xb")
    except FileExistsError as e:
        raise PartFileAlreadyExists(part.path) from e
    except OSError as e:
        raise CreateFailed(part.path, e) from e

    with dest:
        transfer.copy_to(dest, part.path, part.start, part.end)
        flush_to_disk(dest, part.path)


def _move_into_place(src_path, dest_path, already_exists):
    """
    Renames src_path to dest_path without replacing a file that appeared
    at dest_path since the preflight checks.

    A hard link fails if dest_path exists; where links are unsupported the
    destination is checked again right before a plain rename.
    """
    try:
        os.link(src_path, dest_path)
    except FileExistsError as e:
        raise already_exists(dest_path) from e
    except OSError:
        if os.path.lexists(dest_path):
            raise already_exists(dest_path)
        try:
            os.rename(src_path, dest_path)
        except OSError as e:
            raise RenameFailed(src_path, e) from e
        return

    try:
        os.unlink(src_path)
    except OSError as e:
        raise RenameFailed(src_path, e) from e


def _peel_parts(file_path, parts, buffer, verbose):
    """
    Moves every part out of file_path, last part first, shrinking the
    original as it goes. Whatever remains is part 1 and gets renamed.
    """
    try:
        src = open(file_path, "r+b")
    except OSError as e:
        raise OriginalUnreadable(file_path, e) from e

    with src:
        transfer = ChunkedTransfer(src, buffer, file_path)
        for part in reversed(parts[1:]):
            _write_part(transfer, part)
            # Only safe because every later part is already on disk
            try:
                src.truncate(part.start)
            except OSError as e:
                raise TruncateFailed(file_path, e) from e
            if verbose:
                log(f"[OK] Wrote {part.path} ({part.length} bytes)", context="CHOP")

    first = parts[0]
    _move_into_place(file_path, first.path, PartFileAlreadyExists)
    if verbose:
        log(f"[OK] Renamed {file_path} to {first.path} ({first.length} bytes)", context="CHOP")


def _copy_parts(file_path, parts, buffer, verbose):
    try:
        src = open(file_path, "rb")
    except OSError as e:
        raise OriginalUnreadable(file_path, e) from e

    with src:
        transfer = ChunkedTransfer(src, buffer, file_path)
        for part in parts:
            _write_part(transfer, part)
            if verbose:
                log(f"[OK] Wrote {part.path} ({part.length} bytes)", context="CHOP")


def chop(file_path, part_size=None, num_parts=None, retain=False, verbose=False,
         dry_run=False, disk_info=None, memory_info=None):
    """
    Splits a file into numbered parts next to it.

    The requested size or count may be lowered so that no part ends up
    empty, e.g. 986 parts of a 512000 byte file become 985 parts of 520
    bytes.

    Args:
        file_path (str): Path to the file to split.
        part_size (int | str): Requested size of each part ("20K", "1MiB", ...).
        num_parts (int | str): Requested number of parts.
        retain (bool): Keep the original file instead of consuming it.
        verbose (bool): Log a line per part written.
        dry_run (bool): Plan and check everything but touch nothing.

    Returns:
        ChopResult: The plan used and the parts produced (or that would be).
    """
    file_path = os.fspath(file_path)
    try:
        file_size = os.path.getsize(file_path)
    except OSError as e:
        raise OriginalUnreadable(file_path, e) from e

    split = plan_split(file_size, part_size=part_size, num_parts=num_parts)
    parts = split.part_refs(file_path, file_size)

    for part in parts:
        if os.path.lexists(part.path):
            raise PartFileAlreadyExists(part.path)

    # Truncating as we go means at most one extra part is ever on disk
    needed = file_size if retain else split.part_size
    if sufficient_space(file_path, needed, disk_info) is False:
        raise InsufficientDiskSpace(file_path, needed)

    buffer_size = choose_buffer_size(split.part_size, memory_info)
    result = ChopResult(original=file_path, split=split, parts=parts, retained=retain, dry_run=dry_run)

    if verbose or dry_run:
        log(
            f"Chopping {file_path} ({file_size} bytes) into {split.num_parts} parts "
            f"of {split.part_size} bytes, buffer {buffer_size} bytes",
            context="CHOP",
        )
    if dry_run:
        for part in parts:
            log(f"[DRY RUN] Would write {part.path} ({part.length} bytes)", context="CHOP")
        return result

    buffer = TransferBuffer(buffer_size)
    if retain:
        _copy_parts(file_path, parts, buffer, verbose)
    else:
        _peel_parts(file_path, parts, buffer, verbose)
    return result


# ---------------- Stick ----------------

def _append_part(dest, dest_path, part_path, size, buffer):
    try:
        src = open(part_path, "rb")
    except OSError as e:
        raise ReadFailed(part_path, e) from e

    with src:
        ChunkedTransfer(src, buffer, part_path).copy_to(dest, dest_path, 0, size)


def _rebuild_consuming(original, parts, sizes, buffer, verbose):
    _move_into_place(parts[0], original, OriginalFileAlreadyExists)
    if verbose:
        log(f"[OK] Renamed {parts[0]} to {original}", context="STICK")

    try:
        dest = open(original, "ab")
    except OSError as e:
        raise WriteFailed(original, e) from e

    with dest:
        for part_path, size in zip(parts[1:], sizes[1:]):
            _append_part(dest, original, part_path, size, buffer)
            flush_to_disk(dest, original)
            try:
                os.remove(part_path)
            except OSError as e:
                raise DeleteFailed(part_path, e) from e
            if verbose:
                log(f"[OK] Appended and deleted {part_path} ({size} bytes)", context="STICK")


def _rebuild_retaining(original, parts, sizes, buffer, verbose):
    try:
        dest = open(original, "xb")
    except FileExistsError as e:
        raise OriginalFileAlreadyExists(original) from e
    except OSError as e:
        raise CreateFailed(original, e) from e

    with dest:
        for part_path, size in zip(parts, sizes):
            _append_part(dest, original, part_path, size, buffer)
            if verbose:
                log(f"[OK] Appended {part_path} ({size} bytes)", context="STICK")
        flush_to_disk(dest, original)


def stick(file_path, retain=False, verbose=False, dry_run=False, disk_info=None, memory_info=None):
    """
    Reconstructs a file from its parts.

    Args:
        file_path (str): The original file name or any one of its parts.
        retain (bool): Keep the part files instead of consuming them.
        verbose (bool): Log a line per part processed.
        dry_run (bool): Discover and check everything but touch nothing.

    Returns:
        StickResult: The rebuilt file and the parts it was made from.
    """
    found = discover_parts(file_path)
    original, parts = found.original, found.parts

    if os.path.lexists(original):
        raise OriginalFileAlreadyExists(original)

    sizes = []
    for part_path in parts:
        try:
            sizes.append(os.path.getsize(part_path))
        except OSError as e:
            raise ReadFailed(part_path, e) from e

    # Part 1 is renamed into place, later parts are freed right after copying
    needed = sum(sizes) if retain else max(sizes[1:], default=0)
    if sufficient_space(original, needed, disk_info) is False:
        raise InsufficientDiskSpace(original, needed)

    buffer_size = choose_buffer_size(max(sizes), memory_info)
    result = StickResult(original=original, parts=parts, retained=retain, dry_run=dry_run)

    if verbose or dry_run:
        log(f"Sticking {len(parts)} parts ({sum(sizes)} bytes) into {original}, buffer {buffer_size} bytes", context="STICK")
    if dry_run:
        for part_path, size in zip(parts, sizes):
            log(f"[DRY RUN] Would append {part_path} ({size} bytes)", context="STICK")
        return result

    buffer = TransferBuffer(buffer_size)
    if retain:
        _rebuild_retaining(original, parts, sizes, buffer, verbose)
    else:
        _rebuild_consuming(original, parts, sizes, buffer, verbose)
    return result
