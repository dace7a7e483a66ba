from __future__ import annotations

from bisect import bisect_right
from typing import List


class Utf16OffsetMapper:
    """
    Converts between UTF-16 code unit offsets and Python string indices.

    Model responses report offsets in UTF-16 code units while Python strings
    index by code point; the two differ only after characters outside the
    Basic Multilingual Plane.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        # units[i] = UTF-16 offset of code point i; the last entry is the total length.
        units: List[int] = [0]
        for char in text:
            units.append(units[-1] + (2 if ord(char) > 0xFFFF else 1))
        self._units = units

    @property
    def utf16_length(self) -> int:
        return self._units[-1]

    @property
    def is_identity(self) -> bool:
        return self.utf16_length == len(self.text)

    def to_code_point(self, offset: int) -> int:
        """Map a UTF-16 offset to a code point index, clamped to the text.

        An offset inside a surrogate pair maps to the code point containing it.
        """
        if offset <= 0:
            return 0
        if offset >= self.utf16_length:
            return len(self.text)
        return bisect_right(self._units, offset) - 1

    def to_utf16(self, index: int) -> int:
        if index <= 0:
            return 0
        if index >= len(self.text):
            return self.utf16_length
        return self._units[index]
