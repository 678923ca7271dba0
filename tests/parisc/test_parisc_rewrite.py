from typing import List, Optional

import pytest

from rtlift.arch import get_architecture
from rtlift.config import LiftConfig
from rtlift.machine import ImmediateOperand, RegisterOperand
from rtlift.rtl import ast
from rtlift.rtl.text import format_cluster
from rtlift.rtl.validate import validate_cluster
from rtlift.services import LoggingHost


def rtl(
    hexstr: str,
    address: int = 0x1000,
    host: Optional[LoggingHost] = None,
    arch_name: str = "parisc",
) -> List[str]:
    arch = get_architecture(arch_name, LiftConfig(diagnostics=False, trace=False))
    (cluster,) = arch.lift(bytes.fromhex(hexstr), address, host=host)
    assert validate_cluster(cluster, arch.zero_registers) == []
    return format_cluster(cluster)


def test_add() -> None:
    assert rtl("08410603") == [
        "0|L--|00001000(4): 2 instructions",
        "1|L--|r3 = r1 + r2",
        "2|L--|psw.C = cond1(r3)",
    ]


def test_add_with_skip_condition() -> None:
    assert rtl("08412603") == [
        "0|T--|00001000(4): 3 instructions",
        "1|T--|r3 = r1 + r2",
        "2|T--|psw.C = cond1(r3)",
        "3|T--|if (r3 == 0x0) branch 00001008",
    ]


def test_addi_to_zero_register_only_updates_carry() -> None:
    assert rtl("B42007FF") == [
        "0|L--|00001000(4): 1 instructions",
        "1|L--|psw.C = cond1(r1 + 0xFFFFFFFF)",
    ]


def test_ldo() -> None:
    assert rtl("37DE0080") == [
        "0|L--|00001000(4): 1 instructions",
        "1|L--|r30 = r30 + 0x40",
    ]


def test_ldil() -> None:
    assert rtl("20200400") == [
        "0|L--|00001000(4): 1 instructions",
        "1|L--|r1 = 0x20000000",
    ]


def test_loads_and_stores() -> None:
    assert rtl("48640010")[1:] == ["1|L--|r4 = Mem32[r3 + 0x8]"]
    assert rtl("4BC43FF9")[1:] == ["1|L--|r4 = Mem32[r30 - 0x4]"]
    assert rtl("6BC23FD9")[1:] == ["1|L--|Mem32[r30 - 0x14] = r2"]


def test_load_modify_after() -> None:
    assert rtl("4C640010")[1:] == [
        "1|L--|r4 = Mem32[r3]",
        "2|L--|r3 = r3 + 0x8",
    ]


def test_extract() -> None:
    assert rtl("D0641BF8")[1:] == ["1|L--|r4 = r3 & 0xFF"]


def test_return_and_annulled_return() -> None:
    assert rtl("E840C000") == ["0|TD-|00001000(4): 1 instructions", "1|TD-|return"]
    assert rtl("E840C002")[1] == "1|TDA|return"


def test_branch_and_link() -> None:
    assert rtl("E8400000") == [
        "0|CD-|00001000(4): 2 instructions",
        "1|CD-|r2 = 00001008",
        "2|CD-|call 00001008 (0)",
    ]
    assert rtl("E8000000")[1:] == ["1|TD-|goto 00001008"]


def test_compare_and_branch() -> None:
    assert rtl("80412000")[1:] == ["1|TD-|if (r1 == r2) branch 00001008"]
    assert rtl("80410000") == ["0|L--|00001000(4): 1 instructions", "1|L--|nop"]


def test_break_is_side_effect() -> None:
    assert rtl("00000000")[1:] == ["1|C--|__break(0x0, 0x0)"]


def test_unimplemented_instruction_reports_once() -> None:
    host = LoggingHost()
    arch = get_architecture("parisc", LiftConfig(diagnostics=False, trace=False))
    clusters = list(arch.lift(bytes.fromhex("0B200000" "0B200000"), 0x1000, host=host))
    assert [c.address for c in clusters] == [0x1000, 0x1004]
    assert all(c.is_invalid for c in clusters)
    assert clusters[0].instructions == (ast.Invalid(),)
    assert host.errors == [(0x1000, "PA-RISC instruction 'andcm' is not supported yet.")]


@pytest.mark.parametrize("arch_name", ["parisc", "parisc64"])
def test_subtract_from_immediate(arch_name: str) -> None:
    assert rtl("9464000A", arch_name=arch_name) == [
        "0|L--|00001000(4): 2 instructions",
        "1|L--|r4 = 0x5 - r3",
        "2|L--|psw.C = cond1(r4)",
    ]


@pytest.mark.parametrize("arch_name", ["parisc", "parisc64"])
def test_subtract_from_immediate_traps_on_overflow(arch_name: str) -> None:
    assert rtl("9464080A", arch_name=arch_name) == [
        "0|L--|00001000(4): 3 instructions",
        "1|L--|r4 = 0x5 - r3",
        "2|L--|psw.C = cond1(r4)",
        "3|L--|if (Test(SV,r4)) __trap()",
    ]


@pytest.mark.parametrize("arch_name", ["parisc", "parisc64"])
def test_add_immediate(arch_name: str) -> None:
    assert rtl("B464000A", arch_name=arch_name)[1:] == [
        "1|L--|r4 = r3 + 0x5",
        "2|L--|psw.C = cond1(r4)",
    ]


@pytest.mark.parametrize("arch_name", ["parisc", "parisc64"])
def test_compare_immediate_and_branch(arch_name: str) -> None:
    assert rtl("84652000", arch_name=arch_name) == [
        "0|TD-|00001000(4): 1 instructions",
        "1|TD-|if (0x5 == r3) branch 00001008",
    ]


@pytest.mark.parametrize("arch_name", ["parisc", "parisc64"])
def test_move_immediate_and_branch_always(arch_name: str) -> None:
    # movib,tr 4,r13 with a backward displacement
    assert rtl("CDA88C91", 0x10000, arch_name=arch_name) == [
        "0|TD-|00010000(4): 2 instructions",
        "1|TD-|r13 = 0x4",
        "2|TD-|goto 0000E650",
    ]


@pytest.mark.parametrize("hexstr", ["975B54A3", "94C9C950", "CF1822FF", "CDA88C91"])
def test_wide_mode_immediates_match_register_width(hexstr: str) -> None:
    arch = get_architecture("parisc64", LiftConfig(diagnostics=False, trace=False))
    (instr,) = arch.disassemble(bytes.fromhex(hexstr), 0x1000)
    widths = {op.width for op in instr.operands if isinstance(op, (ImmediateOperand, RegisterOperand))}
    assert widths == {32}
    assert rtl(hexstr, arch_name="parisc64")[0].startswith("0|")


@pytest.mark.parametrize(
    "hexstr, mnemonic",
    [("10000000", "spop"), ("3C000000", "pspec"), ("B0000000", "addi,tc")],
)
def test_stub_host_error_names_the_instruction(hexstr: str, mnemonic: str) -> None:
    host = LoggingHost()
    rtl(hexstr, host=host)
    assert host.errors == [(0x1000, f"PA-RISC instruction '{mnemonic}' is not supported yet.")]
