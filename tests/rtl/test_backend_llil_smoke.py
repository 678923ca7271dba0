from binja_test_mocks.mock_llil import MockLowLevelILFunction, mreg  # type: ignore

from rtlift.machine import InstrClass
from rtlift.rtl import ast
from rtlift.rtl.backend_llil import emit_llil
from rtlift.rtl.emitter import RtlEmitter, cond, cond_code, const, eq, iadd, intrinsic


def _emit(*stmts: ast.Stmt, return_register: str | None = None) -> list:
    il = MockLowLevelILFunction()
    cluster = ast.RtlCluster(0x1000, 4, InstrClass.LINEAR, stmts)
    emit_llil(il, cluster, return_register=return_register)
    return il.ils


def _ops(ils: list) -> list[str]:
    return [item.bare_op() for item in ils]


def test_assign_emits_set_reg() -> None:
    ils = _emit(ast.Assign(ast.Reg("r1", 32), const(0x20000000, 32)))
    assert _ops(ils) == ["SET_REG"]
    assert ils[0].ops[0] == mreg("r1")
    assert ils[0].ops[1].bare_op() == "CONST"


def test_branch_emits_if_and_labels() -> None:
    r1 = ast.Reg("r1", 32)
    ils = _emit(ast.Branch(eq(r1, const(0, 32)), ast.Addr(0x1008)))
    assert _ops(ils) == ["IF", "LABEL", "JUMP", "LABEL"]
    assert ils[0].cond.bare_op() == "CMP_E"


def test_guarded_block_wraps_body() -> None:
    r1 = ast.Reg("r1", 32)
    body = [ast.Assign(r1, const(1, 32)), ast.Nop()]
    ils = _emit(ast.If(cond_code("EQ", r1), body))
    assert _ops(ils) == ["IF", "LABEL", "SET_REG", "NOP", "LABEL"]


def test_return_uses_link_register_or_stack() -> None:
    ils = _emit(ast.Return(), return_register="r2")
    assert _ops(ils) == ["RET"]
    assert ils[0].ops[0].bare_op() == "REG"
    ils = _emit(ast.Return())
    assert ils[0].ops[0].bare_op() == "POP"


def test_flag_group_update_attaches_flags_to_operation() -> None:
    r0l = ast.Reg("r0l", 8)
    group = ast.FlagGroup("ccr", "NZVC", 8)
    ils = _emit(ast.Assign(group, cond(iadd(r0l, const(0x12, 8)), 8)))
    assert _ops(ils) == ["ADD"]
    assert ils[0].flags() == "nzvc"


def test_intrinsics_and_placeholders() -> None:
    ils = _emit(
        ast.SideEffect(intrinsic("__syscall", 0)),
        ast.Assign(ast.Reg("r4", 32), intrinsic("__mfctl", 32, const(11, 32))),
        ast.Nop(),
        ast.Invalid(),
    )
    assert _ops(ils) == ["INTRINSIC", "INTRINSIC", "NOP", "UNDEF"]
    assert ils[0].name == "__syscall"
    assert ils[0].outputs == []
    assert ils[1].name == "__mfctl"
    assert len(ils[1].params) == 1


def test_sequence_register_uses_split_form() -> None:
    pair = ast.Reg("hi_lo", 64, "seq")
    ils = _emit(ast.Assign(pair, ast.Mem(ast.Reg("r29", 32), 64)))
    assert _ops(ils) == ["SET_REG_SPLIT"]
    assert ils[0].ops[2].bare_op() == "LOAD"


def test_emitter_cluster_round_trip_through_llil() -> None:
    m = RtlEmitter()
    m.call(ast.Addr(0x2000))
    il = MockLowLevelILFunction()
    emit_llil(il, m.make_cluster(0x1000, 4, InstrClass.CALL | InstrClass.TRANSFER))
    assert _ops(il.ils) == ["CALL"]
