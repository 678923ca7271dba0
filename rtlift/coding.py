# based on https://github.com/whitequark/binja-avnera/blob/main/mc/coding.py
"""Byte-stream reader shared by all disassemblers."""

from __future__ import annotations

import struct


class BufferTooShort(Exception):
    """Raised when attempting to read past the end of the buffer."""


class ImageReader:
    """Cursor over a loaded image segment.

    ``base_address`` is the address of ``data[0]``; ``offset`` is the cursor
    position inside ``data``. Failed reads never advance the cursor.
    """

    def __init__(self, data: bytes, base_address: int = 0, offset: int = 0) -> None:
        self.data = bytes(data)
        self.base_address = base_address
        self.offset = offset

    @property
    def address(self) -> int:
        return self.base_address + self.offset

    def remaining(self) -> int:
        return max(len(self.data) - self.offset, 0)

    def is_valid_offset(self, offset: int) -> bool:
        return 0 <= offset < len(self.data)

    def clone(self) -> "ImageReader":
        return ImageReader(self.data, self.base_address, self.offset)

    def seek(self, delta: int) -> None:
        self.offset += delta

    def peek(self, offset: int) -> int:
        if len(self.data) - self.offset <= offset:
            raise BufferTooShort
        return self.data[self.offset + offset]

    def _unpack(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        if len(self.data) - self.offset < size:
            raise BufferTooShort
        fmt = "<" + fmt if fmt[0] != ">" else fmt
        items = struct.unpack_from(fmt, self.data, self.offset)
        self.offset += size
        if len(items) == 1:
            return items[0]  # type: ignore
        raise ValueError("Unpacking more than one item is not supported")

    def read_bytes(self, count: int) -> bytes:
        if len(self.data) - self.offset < count:
            raise BufferTooShort
        chunk = self.data[self.offset : self.offset + count]
        self.offset += count
        return chunk

    def read_u8(self) -> int:
        return self._unpack("B")

    def read_le_u16(self) -> int:
        return self._unpack("H")

    def read_be_u16(self) -> int:
        return self._unpack(">H")

    def read_le_u32(self) -> int:
        return self._unpack("I")

    def read_be_u32(self) -> int:
        return self._unpack(">I")


__all__ = ["BufferTooShort", "ImageReader"]
