"""Condition completers and the per-field lookup tables.

A ``None`` slot marks a reserved encoding; the owning instruction decodes as
invalid. ``NEVER`` entries are legal but leave the instruction without a
condition.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class ConditionType(enum.Enum):
    NEVER = "never"
    TR = "tr"
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    GE = "ge"
    LE = "le"
    GT = "gt"
    ULT = "ult"
    UGE = "uge"
    ULE = "ule"
    UGT = "ugt"
    SV = "sv"
    NSV = "nsv"
    ODD = "odd"
    EVEN = "even"
    NUV = "nuv"
    UV = "uv"
    ZNV = "znv"
    VNZ = "vnz"
    FP = "fp"


@dataclass(frozen=True, slots=True)
class Condition:
    kind: ConditionType
    display: str
    wide: bool = False
    fp_index: int = -1

    def __str__(self) -> str:
        return self.display


def _c(kind: ConditionType, display: str) -> Condition:
    return Condition(kind, display)


def _w(kind: ConditionType, display: str) -> Condition:
    return Condition(kind, "*" + display, wide=True)


T = ConditionType

NEVER = _c(T.NEVER, "")
TR = _c(T.TR, "tr")
EQ = _c(T.EQ, "=")
NE = _c(T.NE, "<>")
LT = _c(T.LT, "<")
GE = _c(T.GE, ">=")
LE = _c(T.LE, "<=")
GT = _c(T.GT, ">")
ULT = _c(T.ULT, "<<")
UGE = _c(T.UGE, ">>=")
ULE = _c(T.ULE, "<<=")
UGT = _c(T.UGT, ">>")
SV = _c(T.SV, "sv")
NSV = _c(T.NSV, "nsv")
ODD = _c(T.ODD, "od")
EVEN = _c(T.EVEN, "ev")
NUV = _c(T.NUV, "nuv")
UV = _c(T.UV, "uv")
ZNV = _c(T.ZNV, "znv")
VNZ = _c(T.VNZ, "vnz")

NEVER64 = _w(T.NEVER, "")
TR64 = _w(T.TR, "tr")
EQ64 = _w(T.EQ, "=")
NE64 = _w(T.NE, "<>")
LT64 = _w(T.LT, "<")
GE64 = _w(T.GE, ">=")
LE64 = _w(T.LE, "<=")
GT64 = _w(T.GT, ">")
SV64 = _w(T.SV, "sv")
NSV64 = _w(T.NSV, "nsv")
ODD64 = _w(T.ODD, "od")
EVEN64 = _w(T.EVEN, "ev")
NUV64 = _w(T.NUV, "nuv")
UV64 = _w(T.UV, "uv")
ZNV64 = _w(T.ZNV, "znv")
VNZ64 = _w(T.VNZ, "vnz")

ConditionTable = Tuple[Optional[Condition], ...]

CMPSUB: ConditionTable = (
    NEVER, TR, EQ, NE,
    LT, GE, LE, GT,
    ULT, UGE, ULE, UGT,
    SV, NSV, ODD, EVEN,
)
ADD: ConditionTable = (
    NEVER, TR, EQ, NE,
    LT, GE, LE, GT,
    NUV, UV, ZNV, VNZ,
    SV, NSV, ODD, EVEN,
)
ADD64: ConditionTable = (
    NEVER64, TR64, EQ64, NE64,
    LT64, GE64, LE64, GT64,
    NUV64, UV64, ZNV64, VNZ64,
    SV64, NSV64, ODD64, EVEN64,
)
LOGICAL: ConditionTable = (
    NEVER, TR, EQ, NE,
    LT, GE, LE, GT,
    None, None, None, None,
    None, None, ODD, EVEN,
)
CMP32_TRUE: ConditionTable = (NEVER, EQ, LT, LE, ULT, ULE, SV, ODD)
CMP32_FALSE: ConditionTable = (TR, NE, GE, GT, UGE, UGT, NSV, EVEN)
SHIFT_EXTRACT: ConditionTable = (NEVER, EQ, LT, ODD, TR, NE, GE, EVEN)
ADD3: ConditionTable = (NEVER, EQ, LT, LE, NUV, ZNV, SV, ODD)
ADD3_NEG: ConditionTable = (TR, NE, GE, GT, UV, VNZ, NSV, EVEN)
ADD3_64: ConditionTable = (NEVER, EQ, LT, LE, NUV, EQ64, LT64, LE64)
ADD3_NEG_64: ConditionTable = (TR, NE, GE, GT, UV, NE64, GE64, GT64)

_FP_DISPLAY = (
    "false?", "false", "?", "!<=>",
    "=", "=T", "?=", "!<>",
    "!?>=", "<", "?<", "!>=",
    "!?>", "<=", "?<=", "!>",
    "!?<=", ">", "?>", "!<=",
    "!?<", ">=", "?>=", "!<",
    "!?=", "<>", "!=", "!=T",
    "!?", "<=>", "true?", "true",
)
FP_COMPARE: ConditionTable = tuple(
    Condition(T.FP, display, fp_index=i) for i, display in enumerate(_FP_DISPLAY)
)
