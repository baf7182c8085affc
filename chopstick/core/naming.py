import os
import re

EXTENSION_PREFIX = "p"

# Only the final dot-separated component of a file name can be a part suffix
PART_RE = re.compile(r"^(?P<stem>.+)\.%s(?P<ordinal>\d+)\Z" % re.escape(EXTENSION_PREFIX), re.DOTALL)


def name_for(original_path, ordinal, width):
    """Path of part ``ordinal`` of ``original_path``, zero padded to ``width`` digits."""
    return f"{os.fspath(original_path)}.{EXTENSION_PREFIX}{ordinal:0{width}d}"


def _match(name):
    return PART_RE.match(os.path.basename(os.fspath(name)))


def is_part_name(name):
    return _match(name) is not None


def ordinal_of(name):
    """Ordinal encoded in a part name (leading zeros ignored), or None."""
    match = _match(name)
    return int(match.group("ordinal")) if match else None


def strip_suffix(name):
    """
    Removes a trailing ``.p<digits>`` from the last path segment of ``name``.
    Names without a genuine part suffix are returned unchanged.
    """
    name = os.fspath(name)
    match = _match(name)
    if not match:
        return name
    head = name[:len(name) - len(os.path.basename(name))]
    return head + match.group("stem")
