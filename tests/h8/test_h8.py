from typing import List

import pytest
from binja_test_mocks.mock_llil import MockLowLevelILFunction  # type: ignore

from rtlift.arch import get_architecture
from rtlift.arch.h8.instruction import Opcode
from rtlift.config import LiftConfig
from rtlift.machine import InstrClass
from rtlift.rtl import ast
from rtlift.rtl.text import format_cluster
from rtlift.rtl.validate import validate_cluster
from rtlift.services import LoggingHost

ARCH = get_architecture("h8", LiftConfig(diagnostics=False, trace=False))


def rtl(hexstr: str, address: int = 0x100) -> List[str]:
    (cluster,) = ARCH.lift(bytes.fromhex(hexstr), address)
    assert validate_cluster(cluster) == []
    return format_cluster(cluster)


@pytest.mark.parametrize(
    "hexstr, text",
    [
        ("0000", "nop"),
        ("0C01", "mov.b r0h,r1h"),
        ("0901", "add.w r0,r1"),
        ("8812", "add.b 0x12,r0l"),
        ("1C01", "cmp.b r0h,r1h"),
        ("46FE", "bne 0x0100"),
        ("5470", "rts"),
        ("5500", "bsr 0x0102"),
    ],
)
def test_disassembly(hexstr: str, text: str) -> None:
    (instr,) = ARCH.disassemble(bytes.fromhex(hexstr), 0x100)
    assert str(instr) == text
    assert instr.length == 2


def test_zero_word() -> None:
    (instr,) = ARCH.disassemble(bytes.fromhex("0000"))
    assert instr.opcode is Opcode.nop
    assert instr.iclass == InstrClass.LINEAR | InstrClass.ZERO


def test_rts_with_bad_low_byte_is_invalid() -> None:
    (instr,) = ARCH.disassemble(bytes.fromhex("5471"))
    assert instr.is_invalid


def test_odd_trailing_byte_is_dropped() -> None:
    assert len(list(ARCH.disassemble(bytes.fromhex("000000")))) == 1


def test_mov_sets_flags() -> None:
    assert rtl("0C01") == [
        "0|L--|00000100(2): 2 instructions",
        "1|L--|r1h = r0h",
        "2|L--|ccr.NZV = cond8(r1h)",
    ]


def test_add_immediate() -> None:
    assert rtl("8812")[1:] == ["1|L--|r0l = r0l + 0x12", "2|L--|ccr.NZVC = cond8(r0l)"]


def test_compare_only_sets_flags() -> None:
    assert rtl("1C01")[1:] == ["1|L--|ccr.NZVC = cond8(r1h - r0h)"]


def test_conditional_branch_tests_flag_group() -> None:
    (cluster,) = ARCH.lift(bytes.fromhex("46FE"), 0x100)
    assert cluster.instructions == (
        ast.Branch(ast.CondCode("NE", ast.FlagGroup("ccr", "Z", 1)), ast.Addr(0x100, 16)),
    )
    assert format_cluster(cluster) == [
        "0|T--|00000100(2): 1 instructions",
        "1|T--|if (Test(NE,ccr.Z)) branch 0100",
    ]


def test_unconditional_and_never_branches() -> None:
    assert rtl("4000")[1:] == ["1|T--|goto 0102"]
    assert rtl("4100") == ["0|L--|00000100(2): 1 instructions", "1|L--|nop"]


def test_call_and_return() -> None:
    assert rtl("5500")[1:] == ["1|C--|call 0102 (2)"]
    assert rtl("5470")[1:] == ["1|T--|return"]


def test_unimplemented_reports_to_host() -> None:
    host = LoggingHost()
    (cluster,) = ARCH.lift(bytes.fromhex("0180"), 0x100, host=host)
    assert cluster.is_invalid
    assert host.errors == [(0x100, "H8 instruction 'sleep' is not supported yet.")]


def test_return_lowers_to_stack_pop() -> None:
    (cluster,) = ARCH.lift(bytes.fromhex("5470"))
    il = MockLowLevelILFunction()
    ARCH.emit_llil(il, cluster)
    (ret,) = il.ils
    assert ret.bare_op() == "RET"
    assert ret.ops[0].bare_op() == "POP"
