from __future__ import annotations

from typing import Collection, Iterable, List

from ..machine import InstrClass
from . import ast


def bits_to_bytes(bits: int) -> int:
    return (bits + 7) // 8


def expr_size(expr: ast.Expr) -> int:
    if isinstance(expr, ast.Const):
        return expr.size
    if isinstance(expr, ast.Addr):
        return expr.size
    if isinstance(expr, ast.Reg):
        return expr.size
    if isinstance(expr, ast.FlagGroup):
        return expr.size
    if isinstance(expr, ast.Mem):
        return expr.size
    if isinstance(expr, (ast.UnOp, ast.BinOp, ast.Slice, ast.Intrinsic)):
        return expr.out_size
    if isinstance(expr, ast.CondCode):
        return 1
    raise TypeError(f"Unsupported expression: {expr!r}")


def _iter_expr_children(expr: ast.Expr) -> Iterable[ast.Expr]:
    if isinstance(expr, ast.Mem):
        yield expr.addr
        if expr.seg is not None:
            yield expr.seg
    elif isinstance(expr, (ast.UnOp, ast.Slice, ast.CondCode)):
        yield expr.a
    elif isinstance(expr, ast.BinOp):
        yield expr.a
        yield expr.b
    elif isinstance(expr, ast.Intrinsic):
        yield from expr.args


def iter_stmts(stmts: Iterable[ast.Stmt]) -> Iterable[ast.Stmt]:
    for stmt in stmts:
        yield stmt
        if isinstance(stmt, ast.If):
            yield from iter_stmts(stmt.then_ops)


def assigned_registers(cluster: ast.RtlCluster) -> List[str]:
    return [
        stmt.dst.name
        for stmt in iter_stmts(cluster.instructions)
        if isinstance(stmt, ast.Assign) and isinstance(stmt.dst, ast.Reg)
    ]


def _check_expr(expr: ast.Expr, errors: List[str]) -> None:
    if isinstance(expr, ast.BinOp) and expr.op in ast.COMPARISONS and expr.out_size != 1:
        errors.append(f"comparison {expr.op} must produce 1 bit, got {expr.out_size}")
    if isinstance(expr, ast.Slice) and expr.offset + expr.out_size > expr_size(expr.a):
        errors.append(f"slice {expr.offset}:{expr.out_size} exceeds operand")
    for child in _iter_expr_children(expr):
        _check_expr(child, errors)


def _check_stmt(stmt: ast.Stmt, zero_registers: Collection[str], errors: List[str]) -> None:
    if isinstance(stmt, ast.Assign):
        if isinstance(stmt.dst, ast.Reg) and stmt.dst.name in zero_registers:
            errors.append(f"assignment to hard-wired zero register {stmt.dst.name}")
        if expr_size(stmt.dst) != expr_size(stmt.value):
            errors.append(
                f"assign width mismatch for {stmt.dst}: "
                f"{expr_size(stmt.dst)} != {expr_size(stmt.value)}"
            )
        _check_expr(stmt.value, errors)
    elif isinstance(stmt, ast.Store):
        if stmt.dst.size != expr_size(stmt.value):
            errors.append(f"store width mismatch: {stmt.dst.size} != {expr_size(stmt.value)}")
        _check_expr(stmt.dst, errors)
        _check_expr(stmt.value, errors)
    elif isinstance(stmt, ast.Branch):
        if expr_size(stmt.cond) != 1:
            errors.append("branch condition must be 1 bit")
        _check_expr(stmt.cond, errors)
    elif isinstance(stmt, ast.If):
        if expr_size(stmt.cond) != 1:
            errors.append("if condition must be 1 bit")
        _check_expr(stmt.cond, errors)
        for inner in stmt.then_ops:
            _check_stmt(inner, zero_registers, errors)
    elif isinstance(stmt, (ast.Goto, ast.Call)):
        _check_expr(stmt.target, errors)
    elif isinstance(stmt, ast.SideEffect):
        _check_expr(stmt.expr, errors)


def validate_cluster(cluster: ast.RtlCluster, zero_registers: Collection[str] = ()) -> List[str]:
    errors: List[str] = []
    if not cluster.instructions:
        errors.append("cluster has no instructions")
    if cluster.iclass & InstrClass.DELAY and not cluster.iclass & InstrClass.TRANSFER:
        errors.append("delay slot without a transfer class")
    if cluster.is_invalid and not cluster.iclass & InstrClass.INVALID:
        errors.append("invalid cluster must carry the invalid class")
    for stmt in cluster.instructions:
        _check_stmt(stmt, zero_registers, errors)
    return errors


__all__ = [
    "assigned_registers",
    "bits_to_bytes",
    "expr_size",
    "iter_stmts",
    "validate_cluster",
]
