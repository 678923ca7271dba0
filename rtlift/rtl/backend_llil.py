"""Lower RTL clusters into Binary Ninja low-level IL."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from binja_test_mocks import binja_api  # noqa: F401  # pyright: ignore
from binaryninja import FlagName, RegisterName  # type: ignore
from binaryninja.lowlevelil import LowLevelILFunction, LowLevelILLabel  # type: ignore

from . import ast
from .validate import bits_to_bytes, expr_size

_BINARY: Dict[str, str] = {
    "add": "add",
    "sub": "sub",
    "mul": "mult",
    "smul": "mult_double_prec_signed",
    "umul": "mult_double_prec_unsigned",
    "sdiv": "div_signed",
    "udiv": "div_unsigned",
    "smod": "mod_signed",
    "umod": "mod_unsigned",
    "and": "and_expr",
    "or": "or_expr",
    "xor": "xor_expr",
    "shl": "shift_left",
    "shr": "logical_shift_right",
    "sar": "arith_shift_right",
    "fadd": "float_add",
    "fsub": "float_sub",
    "fmul": "float_mult",
    "fdiv": "float_div",
}

_COMPARE: Dict[str, str] = {
    "eq": "compare_equal",
    "ne": "compare_not_equal",
    "lt": "compare_signed_less_than",
    "le": "compare_signed_less_equal",
    "gt": "compare_signed_greater_than",
    "ge": "compare_signed_greater_equal",
    "ult": "compare_unsigned_less_than",
    "ule": "compare_unsigned_less_equal",
    "ugt": "compare_unsigned_greater_than",
    "uge": "compare_unsigned_greater_equal",
    "feq": "float_compare_equal",
    "flt": "float_compare_less_than",
    "fle": "float_compare_less_equal",
}

# Condition codes on a plain result compare it against zero.
_RESULT_TESTS: Dict[str, str] = {
    "EQ": "eq",
    "NE": "ne",
    "LT": "lt",
    "LE": "le",
    "GT": "gt",
    "GE": "ge",
    "MI": "lt",
    "PL": "ge",
}


@dataclass
class _Env:
    il: LowLevelILFunction
    return_register: Optional[str]
    address_bytes: int


def _const(env: _Env, size: int, value: int) -> int:
    return env.il.const(bits_to_bytes(size), value)


def _flag(env: _Env, name: str) -> int:
    return env.il.flag(FlagName(name))


def _not(env: _Env, expr: int) -> int:
    return env.il.compare_equal(1, expr, env.il.const(1, 0))


def _xor_flags(env: _Env, a: str, b: str) -> int:
    return env.il.xor_expr(1, _flag(env, a), _flag(env, b))


def _flag_condition(env: _Env, kind: str, group: ast.FlagGroup) -> Optional[int]:
    """NZVC-style flag tests, or ``None`` when ``kind`` has no such form."""
    builders: Dict[str, Callable[[], int]] = {
        "EQ": lambda: _flag(env, "Z"),
        "NE": lambda: _not(env, _flag(env, "Z")),
        "MI": lambda: _flag(env, "N"),
        "PL": lambda: _not(env, _flag(env, "N")),
        "OV": lambda: _flag(env, "V"),
        "NO": lambda: _not(env, _flag(env, "V")),
        "ULT": lambda: _flag(env, "C"),
        "UGE": lambda: _not(env, _flag(env, "C")),
        "ULE": lambda: env.il.or_expr(1, _flag(env, "C"), _flag(env, "Z")),
        "UGT": lambda: _not(env, env.il.or_expr(1, _flag(env, "C"), _flag(env, "Z"))),
        "LT": lambda: _xor_flags(env, "N", "V"),
        "GE": lambda: _not(env, _xor_flags(env, "N", "V")),
        "LE": lambda: env.il.or_expr(1, _flag(env, "Z"), _xor_flags(env, "N", "V")),
        "GT": lambda: _not(env, env.il.or_expr(1, _flag(env, "Z"), _xor_flags(env, "N", "V"))),
    }
    builder = builders.get(kind)
    if builder is None:
        return None
    needed = {"EQ": "Z", "NE": "Z", "MI": "N", "PL": "N", "OV": "V", "NO": "V"}.get(kind)
    if needed is not None and needed not in group.bits:
        return None
    return builder()


def _emit_cond_code(expr: ast.CondCode, env: _Env) -> int:
    if isinstance(expr.a, ast.FlagGroup):
        lowered = _flag_condition(env, expr.kind, expr.a)
        if lowered is not None:
            return lowered
        return env.il.unimplemented()
    test = _RESULT_TESTS.get(expr.kind)
    if test is None:
        return env.il.unimplemented()
    size = expr_size(expr.a)
    method = getattr(env.il, _COMPARE[test])
    return method(bits_to_bytes(size), _emit_expr(expr.a, env), _const(env, size, 0))


def _emit_binop(expr: ast.BinOp, env: _Env, flags: Optional[str] = None) -> int:
    a = _emit_expr(expr.a, env)
    b = _emit_expr(expr.b, env)
    if expr.op in _COMPARE:
        method = getattr(env.il, _COMPARE[expr.op])
        return method(bits_to_bytes(expr_size(expr.a)), a, b)
    method = getattr(env.il, _BINARY[expr.op])
    if flags is not None:
        return method(bits_to_bytes(expr.out_size), a, b, flags=flags)
    return method(bits_to_bytes(expr.out_size), a, b)


def _emit_unop(expr: ast.UnOp, env: _Env) -> int:
    width = bits_to_bytes(expr.out_size)
    if expr.op == "cond":
        # flag results only make sense as the source of a flag-group assignment
        return env.il.unimplemented()
    a = _emit_expr(expr.a, env)
    if expr.op == "neg":
        return env.il.neg_expr(width, a)
    if expr.op == "not":
        return env.il.not_expr(width, a)
    if expr.op == "lnot":
        return env.il.compare_equal(bits_to_bytes(expr_size(expr.a)), a, _const(env, expr_size(expr.a), 0))
    if expr.op == "sext":
        return env.il.sign_extend(width, a)
    if expr.op == "zext":
        return env.il.zero_extend(width, a)
    if expr.op == "conv":
        return env.il.float_convert(width, a)
    if expr.op == "fneg":
        return env.il.float_neg(width, a)
    raise NotImplementedError(f"Unsupported unary op: {expr.op}")


def _split_sequence(reg: ast.Reg) -> tuple[str, str]:
    hi, _, lo = reg.name.partition("_")
    return hi, lo


def _emit_expr(expr: ast.Expr, env: _Env) -> int:
    il = env.il
    if isinstance(expr, ast.Const):
        return _const(env, expr.size, expr.value)
    if isinstance(expr, ast.Addr):
        return il.const_pointer(bits_to_bytes(expr.size), expr.value)
    if isinstance(expr, ast.Reg):
        if expr.bank == "seq":
            hi, lo = _split_sequence(expr)
            return il.reg_split(bits_to_bytes(expr.size), RegisterName(hi), RegisterName(lo))
        return il.reg(bits_to_bytes(expr.size), RegisterName(expr.name))
    if isinstance(expr, ast.FlagGroup):
        if len(expr.bits) == 1:
            return _flag(env, expr.bits)
        return il.unimplemented()
    if isinstance(expr, ast.Mem):
        return il.load(bits_to_bytes(expr.size), _emit_expr(expr.addr, env))
    if isinstance(expr, ast.UnOp):
        return _emit_unop(expr, env)
    if isinstance(expr, ast.BinOp):
        return _emit_binop(expr, env)
    if isinstance(expr, ast.Slice):
        value = _emit_expr(expr.a, env)
        if expr.offset:
            value = il.logical_shift_right(
                bits_to_bytes(expr_size(expr.a)), value, _const(env, 8, expr.offset)
            )
        return il.low_part(bits_to_bytes(expr.out_size), value)
    if isinstance(expr, ast.CondCode):
        return _emit_cond_code(expr, env)
    if isinstance(expr, ast.Intrinsic):
        # intrinsics are statements in LLIL
        return il.unimplemented()
    raise NotImplementedError(f"Unsupported expression: {expr!r}")


def _emit_intrinsic(outputs: list, expr: ast.Intrinsic, env: _Env) -> None:
    params = [_emit_expr(arg, env) for arg in expr.args]
    env.il.append(env.il.intrinsic(outputs, expr.name, params))


def _emit_assign(stmt: ast.Assign, env: _Env) -> None:
    il = env.il
    dst, value = stmt.dst, stmt.value
    if isinstance(dst, ast.FlagGroup):
        if isinstance(value, ast.UnOp) and value.op == "cond":
            group = dst.bits.lower()
            if isinstance(value.a, ast.BinOp) and value.a.op in _BINARY:
                il.append(_emit_binop(value.a, env, flags=group))
            else:
                # flags from a plain value: test it against zero
                size = expr_size(value.a)
                il.append(
                    il.sub(bits_to_bytes(size), _emit_expr(value.a, env), _const(env, size, 0), flags=group)
                )
            return
        if len(dst.bits) == 1:
            il.append(il.set_flag(FlagName(dst.bits), _emit_expr(value, env)))
            return
        il.append(il.unimplemented())
        return
    if isinstance(value, ast.Intrinsic):
        _emit_intrinsic([RegisterName(dst.name)], value, env)
        return
    if dst.bank == "seq":
        hi, lo = _split_sequence(dst)
        il.append(
            il.set_reg_split(
                bits_to_bytes(dst.size), RegisterName(hi), RegisterName(lo), _emit_expr(value, env)
            )
        )
        return
    il.append(il.set_reg(bits_to_bytes(dst.size), RegisterName(dst.name), _emit_expr(value, env)))


def _emit_return(env: _Env) -> None:
    il = env.il
    if env.return_register is None:
        il.append(il.ret(il.pop(env.address_bytes)))
    else:
        il.append(il.ret(il.reg(env.address_bytes, RegisterName(env.return_register))))


def _emit_guarded(cond: ast.Expr, env: _Env, body: Callable[[], None]) -> None:
    true_label = LowLevelILLabel()
    false_label = LowLevelILLabel()
    env.il.append(env.il.if_expr(_emit_expr(cond, env), true_label, false_label))
    env.il.mark_label(true_label)
    body()
    env.il.mark_label(false_label)


def _emit_stmt(stmt: ast.Stmt, env: _Env) -> None:
    il = env.il
    if isinstance(stmt, ast.Assign):
        _emit_assign(stmt, env)
    elif isinstance(stmt, ast.Store):
        il.append(
            il.store(
                bits_to_bytes(stmt.dst.size),
                _emit_expr(stmt.dst.addr, env),
                _emit_expr(stmt.value, env),
            )
        )
    elif isinstance(stmt, ast.Branch):
        target = stmt.target
        _emit_guarded(stmt.cond, env, lambda: il.append(il.jump(_emit_expr(target, env))))
    elif isinstance(stmt, ast.Goto):
        il.append(il.jump(_emit_expr(stmt.target, env)))
    elif isinstance(stmt, ast.Call):
        il.append(il.call(_emit_expr(stmt.target, env)))
    elif isinstance(stmt, ast.Return):
        _emit_return(env)
    elif isinstance(stmt, ast.If):
        then_ops = stmt.then_ops

        def body() -> None:
            for inner in then_ops:
                _emit_stmt(inner, env)

        _emit_guarded(stmt.cond, env, body)
    elif isinstance(stmt, ast.SideEffect):
        if isinstance(stmt.expr, ast.Intrinsic):
            _emit_intrinsic([], stmt.expr, env)
        else:
            il.append(il.unimplemented())
    elif isinstance(stmt, ast.Nop):
        il.append(il.nop())
    elif isinstance(stmt, ast.Invalid):
        il.append(il.undefined())
    else:
        raise NotImplementedError(f"Unsupported statement: {stmt!r}")


def emit_llil(
    il: LowLevelILFunction,
    cluster: ast.RtlCluster,
    return_register: Optional[str] = None,
    address_bits: int = 32,
) -> None:
    """Append the LLIL for ``cluster`` to ``il``.

    ``return_register`` holds the return address for ``Return``; without one
    the address is popped from the stack.
    """
    env = _Env(il, return_register, bits_to_bytes(address_bits))
    for stmt in cluster.instructions:
        _emit_stmt(stmt, env)


__all__ = ["emit_llil"]
