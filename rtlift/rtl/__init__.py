"""
Register-transfer language (RTL) emitted by the rewriters.

One ``RtlCluster`` describes the complete side effects of one machine
instruction. Clusters are plain frozen values; ``validate`` checks their
structural invariants, ``text`` renders listings and ``serde`` converts them
to JSON. ``backend_llil`` lowers a cluster into Binary Ninja LLIL and is
imported on demand.
"""

from .ast import (  # noqa: F401
    Addr,
    Assign,
    BinOp,
    Branch,
    Call,
    CondCode,
    Const,
    Expr,
    FlagGroup,
    Goto,
    If,
    Intrinsic,
    Invalid,
    Mem,
    Nop,
    Reg,
    Return,
    RtlCluster,
    SideEffect,
    Slice,
    Stmt,
    Store,
    UnOp,
)
from . import validate  # noqa: F401
from . import serde  # noqa: F401
from . import text  # noqa: F401

__all__ = [
    "RtlCluster",
    "Stmt",
    "Expr",
    "Const",
    "Addr",
    "Reg",
    "FlagGroup",
    "Mem",
    "UnOp",
    "BinOp",
    "Slice",
    "CondCode",
    "Intrinsic",
    "Assign",
    "Store",
    "Branch",
    "Goto",
    "Call",
    "Return",
    "If",
    "SideEffect",
    "Nop",
    "Invalid",
    "validate",
    "serde",
    "text",
]
