"""Statement collector and expression builders used by the rewriters."""

from __future__ import annotations

from typing import List, Sequence

from ..machine import InstrClass
from . import ast
from .validate import expr_size


def const(value: int, size: int) -> ast.Const:
    return ast.Const(value & ((1 << size) - 1), size)


def _bin(op: ast.BinaryOp, a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return ast.BinOp(op, a, b, expr_size(a))


def _cmp(op: ast.BinaryOp, a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return ast.BinOp(op, a, b, 1)


def iadd(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("add", a, b)


def isub(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("sub", a, b)


def imul(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("mul", a, b)


def smul(a: ast.Expr, b: ast.Expr, out_size: int) -> ast.BinOp:
    return ast.BinOp("smul", a, b, out_size)


def umul(a: ast.Expr, b: ast.Expr, out_size: int) -> ast.BinOp:
    return ast.BinOp("umul", a, b, out_size)


def sdiv(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("sdiv", a, b)


def udiv(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("udiv", a, b)


def smod(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("smod", a, b)


def umod(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("umod", a, b)


def and_(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("and", a, b)


def or_(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("or", a, b)


def xor(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("xor", a, b)


def shl(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("shl", a, b)


def shr(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("shr", a, b)


def sar(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _bin("sar", a, b)


def eq(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("eq", a, b)


def ne(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("ne", a, b)


def lt(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("lt", a, b)


def le(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("le", a, b)


def gt(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("gt", a, b)


def ge(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("ge", a, b)


def ult(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("ult", a, b)


def ule(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("ule", a, b)


def ugt(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("ugt", a, b)


def uge(a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    return _cmp("uge", a, b)


def fbin(op: ast.BinaryOp, a: ast.Expr, b: ast.Expr) -> ast.BinOp:
    if op in ast.COMPARISONS:
        return _cmp(op, a, b)
    return _bin(op, a, b)


def neg(a: ast.Expr) -> ast.UnOp:
    return ast.UnOp("neg", a, expr_size(a))


def fneg(a: ast.Expr) -> ast.UnOp:
    return ast.UnOp("fneg", a, expr_size(a))


def comp(a: ast.Expr) -> ast.UnOp:
    return ast.UnOp("not", a, expr_size(a))


def lnot(a: ast.Expr) -> ast.UnOp:
    return ast.UnOp("lnot", a, 1)


def sext(a: ast.Expr, size: int) -> ast.Expr:
    if expr_size(a) == size:
        return a
    return ast.UnOp("sext", a, size)


def zext(a: ast.Expr, size: int) -> ast.Expr:
    if expr_size(a) == size:
        return a
    return ast.UnOp("zext", a, size)


def conv(a: ast.Expr, size: int) -> ast.UnOp:
    return ast.UnOp("conv", a, size)


def cond(a: ast.Expr, size: int) -> ast.UnOp:
    """Flag bits computed from the result ``a``."""
    return ast.UnOp("cond", a, size)


def slice_(a: ast.Expr, offset: int, size: int) -> ast.Expr:
    if offset == 0 and expr_size(a) == size:
        return a
    return ast.Slice(a, offset, size)


def cond_code(kind: ast.CondKind, a: ast.Expr) -> ast.CondCode:
    return ast.CondCode(kind, a)


def intrinsic(name: str, out_size: int, *args: ast.Expr) -> ast.Intrinsic:
    return ast.Intrinsic(name, tuple(args), out_size)


def mem(addr: ast.Expr, size: int) -> ast.Mem:
    return ast.Mem(addr, size)


class RtlEmitter:
    """Collects the statements of one instruction."""

    def __init__(self) -> None:
        self.instructions: List[ast.Stmt] = []

    def emit(self, stmt: ast.Stmt) -> None:
        self.instructions.append(stmt)

    def assign(self, dst: ast.Target, value: ast.Expr) -> None:
        self.emit(ast.Assign(dst, value))

    def store(self, dst: ast.Mem, value: ast.Expr) -> None:
        self.emit(ast.Store(dst, value))

    def branch(self, condition: ast.Expr, target: ast.Expr) -> None:
        self.emit(ast.Branch(condition, target))

    def goto(self, target: ast.Expr) -> None:
        self.emit(ast.Goto(target))

    def call(self, target: ast.Expr, ret_size: int = 0) -> None:
        self.emit(ast.Call(target, ret_size))

    def ret(self) -> None:
        self.emit(ast.Return())

    def if_(self, condition: ast.Expr, then_ops: Sequence[ast.Stmt]) -> None:
        self.emit(ast.If(condition, tuple(then_ops)))

    def side_effect(self, expr: ast.Expr) -> None:
        self.emit(ast.SideEffect(expr))

    def nop(self) -> None:
        self.emit(ast.Nop())

    def invalid(self) -> None:
        self.emit(ast.Invalid())

    def make_cluster(self, address: int, length: int, iclass: InstrClass) -> ast.RtlCluster:
        return ast.RtlCluster(address, length, iclass, tuple(self.instructions))
