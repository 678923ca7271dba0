import pytest

from rtlift.coding import BufferTooShort, ImageReader


def test_endian_reads() -> None:
    reader = ImageReader(bytes([0x12, 0x34, 0x56, 0x78]), base_address=0x1000)
    assert reader.read_be_u16() == 0x1234
    assert reader.address == 0x1002
    assert reader.read_le_u16() == 0x7856

    reader = ImageReader(bytes([0x12, 0x34, 0x56, 0x78]))
    assert reader.read_le_u32() == 0x78563412
    reader.offset = 0
    assert reader.read_be_u32() == 0x12345678


def test_short_read_does_not_advance() -> None:
    reader = ImageReader(bytes([0xAA, 0xBB, 0xCC]))
    with pytest.raises(BufferTooShort):
        reader.read_be_u32()
    assert reader.offset == 0
    assert reader.read_u8() == 0xAA
    with pytest.raises(BufferTooShort):
        reader.peek(2)
    assert reader.peek(1) == 0xCC


def test_clone_is_independent() -> None:
    reader = ImageReader(b"\x01\x02\x03\x04", base_address=0x20)
    reader.read_u8()
    copy = reader.clone()
    assert copy.address == 0x21
    copy.read_bytes(2)
    assert reader.offset == 1
    assert reader.remaining() == 3
    assert copy.remaining() == 1
