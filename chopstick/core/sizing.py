import re
from dataclasses import dataclass

from chopstick.core.errors import (
    InvalidNumParts,
    InvalidPartSize,
    NumPartsTooLarge,
    PartSizeTooLarge,
)
from chopstick.core.naming import name_for

SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)\s*$", re.ASCII)

UNITS = {
    "": 1,
    "B": 1,
    "K": 1000, "KB": 1000, "KI": 1024, "KIB": 1024,
    "M": 1000 ** 2, "MB": 1000 ** 2, "MI": 1024 ** 2, "MIB": 1024 ** 2,
    "G": 1000 ** 3, "GB": 1000 ** 3, "GI": 1024 ** 3, "GIB": 1024 ** 3,
    "T": 1000 ** 4, "TB": 1000 ** 4, "TI": 1024 ** 4, "TIB": 1024 ** 4,
    "P": 1000 ** 5, "PB": 1000 ** 5, "PI": 1024 ** 5, "PIB": 1024 ** 5,
}


def round_up_div(a, b):
    """Integer division that rounds towards positive infinity."""
    if b <= 0:
        raise ValueError(f"divisor must be positive, got {b}")
    return (a + b - 1) // b


def digit_width(n):
    """Number of decimal digits in n, never less than 1."""
    return len(str(n)) if n > 0 else 1


def closest_factors_to(target, divisor):
    """
    Reconciles a requested divisor with the size it has to divide.

    ``factor_two`` is the complementary quantity (a count if ``divisor``
    was a size, a size if it was a count). ``factor_one`` is ``divisor``,
    lowered only as far as needed so the final part is not empty.

    Args:
        target (int): Total number of bytes to be divided.
        divisor (int): The requested part size or part count.

    Returns:
        Tuple[int, int]: ``(factor_one, factor_two)``.
    """
    factor_two = round_up_div(target, divisor)
    factor_one = divisor - max(0, (divisor - 1) - target // factor_two)
    return factor_one, factor_two


def parse_size(text):
    """
    Converts a human-readable size such as ``20K``, ``1GB`` or ``128MiB``
    into bytes. Decimal units are powers of 1000, ``Ki``/``KiB`` style units
    powers of 1024.
    """
    if isinstance(text, int):
        return text
    match = SIZE_RE.match(str(text))
    if not match:
        raise InvalidPartSize(text)
    number, unit = match.groups()
    multiplier = UNITS.get(unit.upper())
    if multiplier is None:
        raise InvalidPartSize(text)
    if "." in number:
        whole, fraction = number.split(".")
        size = int(whole) * multiplier + int(fraction) * multiplier // 10 ** len(fraction)
    else:
        size = int(number) * multiplier
    # Report what was typed, not what it floored to
    if size < 1:
        raise InvalidPartSize(text)
    return size


def parse_count(text):
    if isinstance(text, int):
        return text
    text = str(text).strip()
    if not text.isdecimal():
        raise InvalidNumParts(text)
    try:
        return int(text)
    except ValueError as e:
        raise InvalidNumParts(text) from e


@dataclass(frozen=True)
class PartRef:
    path: str
    ordinal: int
    start: int
    end: int

    @property
    def length(self):
        return self.end - self.start


@dataclass(frozen=True)
class Split:
    part_size: int
    num_parts: int

    @classmethod
    def from_part_size(cls, file_size, part_size):
        if part_size < 1:
            raise InvalidPartSize(str(part_size))
        if part_size >= file_size:
            raise PartSizeTooLarge()
        part_size, num_parts = closest_factors_to(file_size, part_size)
        return cls(part_size=part_size, num_parts=num_parts)

    @classmethod
    def from_num_parts(cls, file_size, num_parts):
        if num_parts < 1:
            raise InvalidNumParts(str(num_parts))
        if num_parts >= file_size:
            raise NumPartsTooLarge()
        num_parts, part_size = closest_factors_to(file_size, num_parts)
        # An evenly divisible file can still leave one empty trailing part
        num_parts = min(num_parts, round_up_div(file_size, part_size))
        return cls(part_size=part_size, num_parts=num_parts)

    @property
    def width(self):
        return digit_width(self.num_parts)

    def part_refs(self, original_path, file_size):
        """Expands the plan into one PartRef per part, in ascending order."""
        refs = []
        for ordinal in range(1, self.num_parts + 1):
            start = (ordinal - 1) * self.part_size
            end = min(start + self.part_size, file_size)
            refs.append(PartRef(
                path=name_for(original_path, ordinal, self.width),
                ordinal=ordinal,
                start=start,
                end=end,
            ))
        return refs
