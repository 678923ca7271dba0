from rtlift.machine import InstrClass
from rtlift.rtl import ast
from rtlift.rtl.emitter import RtlEmitter, cond_code, const, iadd, isub
from rtlift.rtl.text import format_cluster, format_expr


def test_listing_format() -> None:
    m = RtlEmitter()
    r3 = ast.Reg("r3", 32)
    m.assign(r3, iadd(ast.Reg("r1", 32), ast.Reg("r2", 32)))
    m.store(ast.Mem(isub(ast.Reg("r30", 32), const(0x14, 32)), 32), ast.Reg("r2", 32))
    m.goto(ast.Addr(0x1008))
    assert format_cluster(m.make_cluster(0x1000, 4, InstrClass.TRANSFER | InstrClass.DELAY)) == [
        "0|TD-|00001000(4): 3 instructions",
        "1|TD-|r3 = r1 + r2",
        "2|TD-|Mem32[r30 - 0x14] = r2",
        "3|TD-|goto 00001008",
    ]


def test_invalid_cluster_listing() -> None:
    m = RtlEmitter()
    m.invalid()
    assert format_cluster(m.make_cluster(0, 4, InstrClass.INVALID)) == [
        "0|---|00000000(4): 1 instructions",
        "1|---|<invalid>",
    ]


def test_expression_forms() -> None:
    assert format_expr(ast.FlagGroup("ccr", "NZVC", 8)) == "ccr.NZVC"
    assert format_expr(cond_code("NE", ast.FlagGroup("ccr", "Z"))) == "Test(NE,ccr.Z)"
    assert format_expr(ast.UnOp("sext", ast.Reg("b", 8), 32)) == "sext32(b)"
    assert format_expr(ast.UnOp("neg", ast.Reg("a", 32), 32)) == "-a"
