from rtlift.machine import InstrClass
from rtlift.rtl import ast
from rtlift.rtl.emitter import RtlEmitter, const, eq, iadd
from rtlift.rtl.validate import assigned_registers, expr_size, validate_cluster

R1 = ast.Reg("r1", 32)
R0 = ast.Reg("r0", 32)


def _cluster(*stmts: ast.Stmt, iclass: InstrClass = InstrClass.LINEAR) -> ast.RtlCluster:
    return ast.RtlCluster(0x1000, 4, iclass, stmts)


def test_well_formed_cluster_validates_cleanly() -> None:
    m = RtlEmitter()
    m.assign(R1, iadd(R1, const(4, 32)))
    m.branch(eq(R1, const(0, 32)), ast.Addr(0x1008))
    cluster = m.make_cluster(0x1000, 4, InstrClass.CONDITIONAL_TRANSFER)
    assert validate_cluster(cluster, ("r0",)) == []


def test_width_mismatch_is_reported() -> None:
    errors = validate_cluster(_cluster(ast.Assign(R1, ast.Const(0, 16))))
    assert any("width mismatch" in msg for msg in errors)


def test_zero_register_assignment_is_reported() -> None:
    errors = validate_cluster(_cluster(ast.Assign(R0, ast.Const(0, 32))), ("r0",))
    assert any("zero register" in msg for msg in errors)


def test_nested_if_is_checked() -> None:
    inner = ast.If(eq(R1, const(0, 32)), [ast.Assign(R0, const(1, 32))])
    assert validate_cluster(_cluster(inner), ("r0",))
    assert isinstance(inner.then_ops, tuple)


def test_structural_rules() -> None:
    assert "cluster has no instructions" in validate_cluster(_cluster())
    delayed = _cluster(ast.Nop(), iclass=InstrClass.LINEAR | InstrClass.DELAY)
    assert any("delay" in msg for msg in validate_cluster(delayed))
    invalid = _cluster(ast.Invalid())
    assert any("invalid" in msg for msg in validate_cluster(invalid))
    assert validate_cluster(_cluster(ast.Invalid(), iclass=InstrClass.INVALID)) == []


def test_comparisons_are_one_bit() -> None:
    assert expr_size(eq(R1, R1)) == 1
    bad = ast.Branch(ast.BinOp("eq", R1, R1, 32), ast.Addr(0))
    assert validate_cluster(_cluster(bad, iclass=InstrClass.CONDITIONAL_TRANSFER))


def test_assigned_registers_includes_guarded_writes() -> None:
    cluster = _cluster(
        ast.Assign(R1, const(0, 32)),
        ast.If(eq(R1, const(0, 32)), [ast.Assign(ast.Reg("r2", 32), const(1, 32))]),
    )
    assert assigned_registers(cluster) == ["r1", "r2"]
