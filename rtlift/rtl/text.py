"""Human-readable RTL listings, one line per statement."""

from __future__ import annotations

from typing import List

from ..machine import class_code
from . import ast

_BIN_SYMBOLS = {
    "add": "+",
    "sub": "-",
    "mul": "*",
    "smul": "*s",
    "umul": "*u",
    "sdiv": "/",
    "udiv": "/u",
    "smod": "%",
    "umod": "%u",
    "and": "&",
    "or": "|",
    "xor": "^",
    "shl": "<<",
    "shr": ">>u",
    "sar": ">>",
    "eq": "==",
    "ne": "!=",
    "lt": "<",
    "le": "<=",
    "gt": ">",
    "ge": ">=",
    "ult": "<u",
    "ule": "<=u",
    "ugt": ">u",
    "uge": ">=u",
    "fadd": "+f",
    "fsub": "-f",
    "fmul": "*f",
    "fdiv": "/f",
    "feq": "==f",
    "flt": "<f",
    "fle": "<=f",
}

_UN_SYMBOLS = {"neg": "-", "not": "~", "lnot": "!", "fneg": "-f"}


def format_expr(expr: ast.Expr) -> str:
    if isinstance(expr, ast.Const):
        return f"0x{expr.value:X}"
    if isinstance(expr, ast.Addr):
        return f"{expr.value:0{expr.size // 4}X}"
    if isinstance(expr, ast.Reg):
        return expr.name
    if isinstance(expr, ast.FlagGroup):
        return f"{expr.reg}.{expr.bits}"
    if isinstance(expr, ast.Mem):
        seg = f"{format_expr(expr.seg)}:" if expr.seg is not None else ""
        return f"Mem{expr.size}[{seg}{format_expr(expr.addr)}]"
    if isinstance(expr, ast.UnOp):
        if expr.op in _UN_SYMBOLS:
            return f"{_UN_SYMBOLS[expr.op]}{_wrap(expr.a)}"
        return f"{expr.op}{expr.out_size}({format_expr(expr.a)})"
    if isinstance(expr, ast.BinOp):
        return f"{_wrap(expr.a)} {_BIN_SYMBOLS[expr.op]} {_wrap(expr.b)}"
    if isinstance(expr, ast.Slice):
        return f"slice({format_expr(expr.a)}, {expr.offset}, {expr.out_size})"
    if isinstance(expr, ast.CondCode):
        return f"Test({expr.kind},{format_expr(expr.a)})"
    if isinstance(expr, ast.Intrinsic):
        args = ", ".join(format_expr(arg) for arg in expr.args)
        return f"{expr.name}({args})"
    raise TypeError(f"Unsupported expression: {expr!r}")


def _wrap(expr: ast.Expr) -> str:
    if isinstance(expr, ast.BinOp):
        return f"({format_expr(expr)})"
    return format_expr(expr)


def format_stmt(stmt: ast.Stmt) -> str:
    if isinstance(stmt, ast.Assign):
        return f"{format_expr(stmt.dst)} = {format_expr(stmt.value)}"
    if isinstance(stmt, ast.Store):
        return f"{format_expr(stmt.dst)} = {format_expr(stmt.value)}"
    if isinstance(stmt, ast.Branch):
        return f"if ({format_expr(stmt.cond)}) branch {format_expr(stmt.target)}"
    if isinstance(stmt, ast.Goto):
        return f"goto {format_expr(stmt.target)}"
    if isinstance(stmt, ast.Call):
        return f"call {format_expr(stmt.target)} ({stmt.ret_size})"
    if isinstance(stmt, ast.Return):
        return "return"
    if isinstance(stmt, ast.If):
        inner = "; ".join(format_stmt(op) for op in stmt.then_ops)
        return f"if ({format_expr(stmt.cond)}) {inner}"
    if isinstance(stmt, ast.SideEffect):
        return format_expr(stmt.expr)
    if isinstance(stmt, ast.Nop):
        return "nop"
    if isinstance(stmt, ast.Invalid):
        return "<invalid>"
    raise TypeError(f"Unsupported statement: {stmt!r}")


def format_cluster(cluster: ast.RtlCluster) -> List[str]:
    """``0|L--|00100000(4): 1 instructions`` followed by numbered statements."""
    code = class_code(cluster.iclass)
    lines = [
        f"0|{code}|{cluster.address:08X}({cluster.length}): "
        f"{len(cluster.instructions)} instructions"
    ]
    for i, stmt in enumerate(cluster.instructions, start=1):
        lines.append(f"{i}|{code}|{format_stmt(stmt)}")
    return lines


__all__ = ["format_cluster", "format_expr", "format_stmt"]
