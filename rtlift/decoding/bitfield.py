"""Bit-span extraction for fixed-width instruction words.

Fields use LSB numbering. ``be_field`` converts the MSB numbering used by
some processor manuals (bit 0 is the most significant bit of the word).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

WORD_BITS = 32


class DecoderConfigurationError(ValueError):
    """Raised while building decoder tables from inconsistent definitions."""


def mask(bits: int) -> int:
    return (1 << bits) - 1


def sign_extend(value: int, bits: int) -> int:
    if bits <= 0:
        return 0
    sign = 1 << (bits - 1)
    value &= mask(bits)
    return (value ^ sign) - sign


@dataclass(frozen=True, slots=True)
class Bitfield:
    position: int
    length: int
    word_bits: int = WORD_BITS

    def __post_init__(self) -> None:
        if self.position < 0 or self.length < 0:
            raise DecoderConfigurationError(f"Negative bitfield {self.position}:{self.length}")
        if self.position + self.length > self.word_bits:
            raise DecoderConfigurationError(
                f"Bitfield {self.position}:{self.length} exceeds {self.word_bits}-bit word"
            )

    @property
    def mask(self) -> int:
        return mask(self.length)

    def read(self, word: int) -> int:
        return (word >> self.position) & self.mask

    def read_signed(self, word: int) -> int:
        return sign_extend(self.read(word), self.length)

    def __str__(self) -> str:
        return f"{self.position}:{self.length}"


def be_field(pos: int, length: int, word_bits: int = WORD_BITS) -> Bitfield:
    """Field starting at MSB-numbered bit ``pos``."""
    return Bitfield(word_bits - (pos + length), length, word_bits)


def be_fields(*spans: Tuple[int, int]) -> Tuple[Bitfield, ...]:
    return tuple(be_field(pos, length) for pos, length in spans)


def fields_length(fields: Sequence[Bitfield]) -> int:
    return sum(f.length for f in fields)


def read_fields(fields: Sequence[Bitfield], word: int) -> int:
    # Earlier fields land in higher-order bits.
    value = 0
    for f in fields:
        value = (value << f.length) | f.read(word)
    return value


def read_signed_fields(fields: Sequence[Bitfield], word: int) -> int:
    return sign_extend(read_fields(fields, word), fields_length(fields))


def dump_masked(word: int, fields: Sequence[Bitfield], word_bits: int = WORD_BITS) -> str:
    """Render ``word`` MSB-first; bits outside ``fields`` show as ``:`` (set) or ``.``."""
    covered = 0
    for f in fields:
        covered |= f.mask << f.position
    out = []
    for bit in range(word_bits - 1, -1, -1):
        if covered & (1 << bit):
            out.append("1" if word & (1 << bit) else "0")
        else:
            out.append(":" if word & (1 << bit) else ".")
        if bit and bit % 8 == 0:
            out.append(" ")
    return "".join(out)


__all__ = [
    "Bitfield",
    "DecoderConfigurationError",
    "be_field",
    "be_fields",
    "dump_masked",
    "fields_length",
    "mask",
    "read_fields",
    "read_signed_fields",
    "sign_extend",
]
