from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Tuple, Union

from ..machine import InstrClass

UnaryOp = Literal["neg", "not", "lnot", "sext", "zext", "conv", "fneg", "cond"]
BinaryOp = Literal[
    "add",
    "sub",
    "mul",
    "smul",
    "umul",
    "sdiv",
    "udiv",
    "smod",
    "umod",
    "and",
    "or",
    "xor",
    "shl",
    "shr",
    "sar",
    "eq",
    "ne",
    "lt",
    "le",
    "gt",
    "ge",
    "ult",
    "ule",
    "ugt",
    "uge",
    "fadd",
    "fsub",
    "fmul",
    "fdiv",
    "feq",
    "flt",
    "fle",
]
CondKind = Literal[
    "EQ",
    "NE",
    "LT",
    "LE",
    "GT",
    "GE",
    "ULT",
    "ULE",
    "UGT",
    "UGE",
    "OV",
    "NO",
    "SV",
    "NSV",
    "UV",
    "NUV",
    "ZNV",
    "VNZ",
    "PE",
    "PO",
    "MI",
    "PL",
]

COMPARISONS = frozenset(
    {"eq", "ne", "lt", "le", "gt", "ge", "ult", "ule", "ugt", "uge", "feq", "flt", "fle"}
)


def _as_tuple(items: Sequence["Stmt"]) -> Tuple["Stmt", ...]:
    return tuple(items) if not isinstance(items, tuple) else items


@dataclass(frozen=True, slots=True)
class Const:
    value: int
    size: int  # bits

    @property
    def is_zero(self) -> bool:
        return self.value == 0


@dataclass(frozen=True, slots=True)
class Addr:
    value: int
    size: int = 32


@dataclass(frozen=True, slots=True)
class Reg:
    name: str
    size: int
    bank: str = "gpr"


@dataclass(frozen=True, slots=True)
class FlagGroup:
    reg: str
    bits: str
    size: int = 1


@dataclass(frozen=True, slots=True)
class Mem:
    addr: "Expr"
    size: int
    seg: Optional["Expr"] = None


@dataclass(frozen=True, slots=True)
class UnOp:
    op: UnaryOp
    a: "Expr"
    out_size: int


@dataclass(frozen=True, slots=True)
class BinOp:
    op: BinaryOp
    a: "Expr"
    b: "Expr"
    out_size: int


@dataclass(frozen=True, slots=True)
class Slice:
    a: "Expr"
    offset: int
    out_size: int


@dataclass(frozen=True, slots=True)
class CondCode:
    kind: CondKind
    a: "Expr"


@dataclass(frozen=True, slots=True)
class Intrinsic:
    name: str
    args: Tuple["Expr", ...]
    out_size: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))


Expr = Union[Const, Addr, Reg, FlagGroup, Mem, UnOp, BinOp, Slice, CondCode, Intrinsic]
Target = Union[Reg, FlagGroup]


@dataclass(frozen=True, slots=True)
class Assign:
    dst: Target
    value: Expr


@dataclass(frozen=True, slots=True)
class Store:
    dst: Mem
    value: Expr


@dataclass(frozen=True, slots=True)
class Branch:
    cond: Expr
    target: Expr


@dataclass(frozen=True, slots=True)
class Goto:
    target: Expr


@dataclass(frozen=True, slots=True)
class Call:
    target: Expr
    ret_size: int = 0


@dataclass(frozen=True, slots=True)
class Return:
    pass


@dataclass(frozen=True, slots=True)
class If:
    cond: Expr
    then_ops: Sequence["Stmt"]

    def __post_init__(self) -> None:
        object.__setattr__(self, "then_ops", _as_tuple(self.then_ops))


@dataclass(frozen=True, slots=True)
class SideEffect:
    expr: Expr


@dataclass(frozen=True, slots=True)
class Nop:
    pass


@dataclass(frozen=True, slots=True)
class Invalid:
    pass


Stmt = Union[Assign, Store, Branch, Goto, Call, Return, If, SideEffect, Nop, Invalid]


@dataclass(frozen=True, slots=True)
class RtlCluster:
    address: int
    length: int
    iclass: InstrClass
    instructions: Sequence[Stmt]

    def __post_init__(self) -> None:
        object.__setattr__(self, "instructions", _as_tuple(self.instructions))

    @property
    def is_invalid(self) -> bool:
        return len(self.instructions) == 1 and isinstance(self.instructions[0], Invalid)
