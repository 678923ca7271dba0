"""Architecture-neutral machine instruction model.

Operands and instructions are frozen values; disassemblers build them through
their decode context and stamp address and length afterwards.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from binja_test_mocks.tokens import (  # type: ignore
    MemType,
    TBegMem,
    TEndMem,
    TInstr,
    TInt,
    TReg,
    TSep,
    TText,
    Token,
    asm_str,
)


class InstrClass(enum.IntFlag):
    LINEAR = 1
    TRANSFER = 2
    CONDITIONAL = 4
    CALL = 8
    DELAY = 16
    ANNUL = 32
    INVALID = 64
    ZERO = 128
    PRIVILEGED = 256
    CONDITIONAL_TRANSFER = CONDITIONAL | TRANSFER


def class_code(iclass: InstrClass) -> str:
    """Three-letter summary used in RTL listings, e.g. ``TD-``."""
    if iclass & InstrClass.INVALID:
        return "---"
    if iclass & InstrClass.CALL:
        kind = "C"
    elif iclass & InstrClass.TRANSFER:
        kind = "T"
    elif iclass & InstrClass.LINEAR:
        kind = "L"
    else:
        kind = "-"
    delay = "D" if iclass & InstrClass.DELAY else "-"
    annul = "A" if iclass & InstrClass.ANNUL else "-"
    return kind + delay + annul


def _hex(value: int) -> str:
    if value < 0:
        return f"-0x{-value:X}"
    return f"0x{value:X}"


@dataclass(frozen=True, slots=True)
class RegisterStorage:
    name: str
    number: int
    size: int  # bits
    bank: str = "gpr"

    def __str__(self) -> str:
        return self.name


class Operand:
    width: int

    def render(self) -> List[Token]:
        raise NotImplementedError(f"render() not implemented for {type(self)}")

    def __str__(self) -> str:
        return asm_str(self.render())


@dataclass(frozen=True, slots=True)
class RegisterOperand(Operand):
    reg: RegisterStorage

    @property
    def width(self) -> int:
        return self.reg.size

    def render(self) -> List[Token]:
        return [TReg(self.reg.name)]


@dataclass(frozen=True, slots=True)
class ImmediateOperand(Operand):
    value: int
    width: int = 32

    def render(self) -> List[Token]:
        if -10 < self.value < 10:
            return [TInt(str(self.value))]
        return [TInt(_hex(self.value))]


@dataclass(frozen=True, slots=True)
class LeftImmediateOperand(Operand):
    """An immediate already shifted into the upper part of a word (``L%``)."""

    value: int
    width: int = 32

    def render(self) -> List[Token]:
        return [TText("L%"), TInt(_hex(self.value))]


@dataclass(frozen=True, slots=True)
class AddressOperand(Operand):
    address: int
    width: int = 32

    def render(self) -> List[Token]:
        return [TInt(f"0x{self.address:0{self.width // 4}X}")]


@dataclass(frozen=True, slots=True)
class MemoryOperand(Operand):
    """``offset(space,base)``: base register plus a signed displacement."""

    width: int
    base: RegisterStorage
    offset: int = 0
    space: Optional[RegisterStorage] = None

    def render(self) -> List[Token]:
        parts: List[Token] = []
        if self.offset:
            parts.append(TInt(_hex(self.offset)))
        parts.append(TBegMem(MemType.INTERNAL))
        if self.space is not None:
            parts.extend([TReg(self.space.name), TSep(",")])
        parts.extend([TReg(self.base.name), TEndMem(MemType.INTERNAL)])
        return parts


@dataclass(frozen=True, slots=True)
class IndexedOperand(Operand):
    """``index(space,base)``: base register plus an index register."""

    width: int
    base: RegisterStorage
    index: RegisterStorage
    space: Optional[RegisterStorage] = None

    def render(self) -> List[Token]:
        parts: List[Token] = [TReg(self.index.name), TBegMem(MemType.INTERNAL)]
        if self.space is not None:
            parts.extend([TReg(self.space.name), TSep(",")])
        parts.extend([TReg(self.base.name), TEndMem(MemType.INTERNAL)])
        return parts


AnyOperand = Union[
    RegisterOperand,
    ImmediateOperand,
    LeftImmediateOperand,
    AddressOperand,
    MemoryOperand,
    IndexedOperand,
]


@dataclass(frozen=True)
class MachineInstruction:
    opcode: Any
    iclass: InstrClass
    operands: Tuple[AnyOperand, ...] = ()
    address: int = 0
    length: int = 0

    def mnemonic(self) -> str:
        return str(getattr(self.opcode, "value", self.opcode))

    def operand_separator(self) -> str:
        return ","

    def render(self) -> List[Token]:
        parts: List[Token] = [TInstr(self.mnemonic())]
        for i, op in enumerate(self.operands):
            parts.append(TSep(" " if i == 0 else self.operand_separator()))
            parts.extend(op.render())
        return parts

    def __str__(self) -> str:
        return asm_str(self.render())

    @property
    def is_invalid(self) -> bool:
        return bool(self.iclass & InstrClass.INVALID)


__all__ = [
    "AddressOperand",
    "AnyOperand",
    "ImmediateOperand",
    "IndexedOperand",
    "InstrClass",
    "LeftImmediateOperand",
    "MachineInstruction",
    "MemoryOperand",
    "Operand",
    "RegisterOperand",
    "RegisterStorage",
    "class_code",
]
