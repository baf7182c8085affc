import os
from dataclasses import dataclass, field
from typing import List

from chopstick import log
from chopstick.core.errors import BadParent, IncompleteParts, NoParts, NotRecognised
from chopstick.core.naming import ordinal_of, strip_suffix


@dataclass
class Discovery:
    original: str
    parts: List[str] = field(default_factory=list)


def _search_dir(path):
    parent = os.path.dirname(path)
    if parent:
        return parent
    try:
        return os.getcwd()
    except OSError as e:
        raise BadParent(e) from e


def _candidates(search_dir, stem):
    """Yields names of regular files in search_dir that are parts of stem."""
    try:
        with os.scandir(search_dir) as it:
            entries = list(it)
    except OSError as e:
        raise BadParent(e) from e

    for entry in entries:
        if ordinal_of(entry.name) is None or strip_suffix(entry.name) != stem:
            continue
        try:
            if not entry.is_file():
                continue
        except OSError as e:
            log(f"⚠️ Failed to read {entry.path}: {e}", context="DISCOVERY")
            continue
        yield entry.name


def verify_sequence(names):
    """True if the sorted names carry ordinals 1, 2, ... len(names) with no gaps."""
    return all(ordinal_of(name) == i for i, name in enumerate(names, start=1))


def discover_parts(path):
    """
    Finds the complete, ordered set of parts that path belongs to.

    Args:
        path (str): The original file name, or any one of its parts.

    Returns:
        Discovery: The original file to rebuild and its part paths, in order.
    """
    path = os.fspath(path)
    stem = strip_suffix(os.path.basename(path))
    if not stem:
        raise NotRecognised(path)

    search_dir = _search_dir(path)

    # Zero padding means name order is ordinal order
    names = sorted(_candidates(search_dir, stem))
    if not names:
        raise NoParts()
    if not verify_sequence(names):
        raise IncompleteParts(names)

    return Discovery(
        original=os.path.join(search_dir, stem),
        parts=[os.path.join(search_dir, name) for name in names],
    )
