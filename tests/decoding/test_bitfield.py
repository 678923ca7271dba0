import pytest

from rtlift.decoding.bitfield import (
    Bitfield,
    DecoderConfigurationError,
    be_field,
    be_fields,
    dump_masked,
    fields_length,
    read_fields,
    read_signed_fields,
    sign_extend,
)


def test_read_unsigned_and_signed() -> None:
    field = Bitfield(4, 4)
    assert field.read(0x000000F0) == 0xF
    assert field.read_signed(0x000000F0) == -1
    assert field.read_signed(0x00000080) == -8
    assert field.read_signed(0x00000070) == 7


def test_zero_length_field_reads_zero() -> None:
    field = Bitfield(7, 0)
    assert field.read(0xFFFFFFFF) == 0
    assert field.read_signed(0xFFFFFFFF) == 0


def test_big_endian_numbering() -> None:
    # bits 0..5 in the manual's numbering are the top six bits of the word
    opcode = be_field(0, 6)
    assert opcode.position == 26
    assert opcode.read(0x37DE0080) == 0x0D
    assert be_field(31, 1).position == 0


def test_multi_field_concatenation() -> None:
    fields = be_fields((0, 4), (28, 4))
    assert fields_length(fields) == 8
    assert read_fields(fields, 0xA000000B) == 0xAB
    assert read_signed_fields(fields, 0xA000000B) == 0xAB - 0x100


def test_sign_extend_masks_first() -> None:
    assert sign_extend(0x1FF, 8) == -1
    assert sign_extend(0x17F, 8) == 0x7F
    assert sign_extend(5, 0) == 0


@pytest.mark.parametrize(
    "position,length",
    [(-1, 4), (0, -1), (30, 4)],
)
def test_bad_bitfields_are_rejected(position: int, length: int) -> None:
    with pytest.raises(DecoderConfigurationError):
        Bitfield(position, length)


def test_sixteen_bit_words() -> None:
    field = Bitfield(12, 4, 16)
    assert field.read(0x5470) == 5
    with pytest.raises(DecoderConfigurationError):
        Bitfield(14, 4, 16)


def test_dump_masked_marks_uncovered_bits() -> None:
    dump = dump_masked(0x80000001, (Bitfield(28, 4),))
    assert dump.startswith("1000.... ")
    assert dump.endswith(":")
