from typing import List

import pytest

from rtlift.arch import get_architecture
from rtlift.arch.mips.instruction import Opcode
from rtlift.config import LiftConfig
from rtlift.rtl import ast
from rtlift.rtl.text import format_cluster
from rtlift.rtl.validate import validate_cluster
from rtlift.services import LoggingHost

QUIET = LiftConfig(diagnostics=False, trace=False)


def lift_one(hexstr: str, arch_name: str = "mips64", address: int = 0x1000) -> ast.RtlCluster:
    arch = get_architecture(arch_name, QUIET)
    (cluster,) = arch.lift(bytes.fromhex(hexstr), address)
    assert validate_cluster(cluster, arch.zero_registers) == []
    return cluster


def rtl(hexstr: str, arch_name: str = "mips64") -> List[str]:
    return format_cluster(lift_one(hexstr, arch_name))[1:]


def decode(hexstr: str, arch_name: str = "mips64"):
    (instr,) = get_architecture(arch_name, QUIET).disassemble(bytes.fromhex(hexstr), 0x1000)
    return instr


def test_registers_are_64_bits() -> None:
    instr = decode("67BDFFE0")
    assert str(instr) == "daddiu r29,r29,-0x20"
    assert instr.operands[0].width == 64


@pytest.mark.parametrize(
    "hexstr, text",
    [
        ("0085102D", "daddu r2,r4,r5"),
        ("000410FC", "dsll32 r2,r4,3"),
        ("0085001E", "ddiv r4,r5"),
        ("DFBF001C", "ld r31,0x1C(r29)"),
        ("FFBF001C", "sd r31,0x1C(r29)"),
        ("9FBF001C", "lwu r31,0x1C(r29)"),
        ("00811001", "movt r2,r4,0"),
        ("4C231020", "madd.s f0,f1,f2,f3"),
        ("46201009", "trunc.l.d f0,f2"),
        ("46A01021", "cvt.d.l f0,f2"),
    ],
)
def test_disassembly(hexstr: str, text: str) -> None:
    assert str(decode(hexstr)) == text


@pytest.mark.parametrize("hexstr", ["67BDFFE0", "0085102D", "000410F8", "DFBF001C", "FFBF001C", "D0A40000"])
def test_doubleword_encodings_are_reserved_in_32_bit_mode(hexstr: str) -> None:
    instr = decode(hexstr, "mips")
    assert instr.opcode is Opcode.illegal
    assert lift_one(hexstr, "mips").is_invalid


def test_doubleword_arithmetic() -> None:
    assert rtl("67BDFFE0") == ["1|L--|r29 = r29 + 0xFFFFFFFFFFFFFFE0"]
    assert rtl("0085102D") == ["1|L--|r2 = r4 + r5"]
    assert rtl("0085102C") == ["1|L--|r2 = r4 + r5"]


def test_word_arithmetic_sign_extends_the_low_word() -> None:
    assert rtl("27BDFFE0") == ["1|L--|r29 = sext64(slice(r29, 0, 32) + 0xFFFFFFE0)"]


def test_lui_sign_extends() -> None:
    assert rtl("3C048000") == ["1|L--|r4 = 0xFFFFFFFF80000000"]
    assert rtl("3C048000", "mips") == ["1|L--|r4 = 0x80000000"]


@pytest.mark.parametrize(
    "hexstr, stmt",
    [
        ("000410F8", "r2 = r4 << 0x3"),
        ("000410FC", "r2 = r4 << 0x23"),
        ("000410FA", "r2 = r4 >>u 0x3"),
        ("000410FB", "r2 = r4 >> 0x3"),
        ("00A41017", "r2 = r4 >> (r5 & 0x3F)"),
    ],
)
def test_doubleword_shifts(hexstr: str, stmt: str) -> None:
    assert rtl(hexstr) == [f"1|L--|{stmt}"]


def test_doubleword_multiply_and_divide() -> None:
    cluster = lift_one("0085001C")
    (stmt,) = cluster.instructions
    assert isinstance(stmt, ast.Assign)
    assert stmt.dst == ast.Reg("hi_lo", 128, "seq")
    assert format_cluster(cluster)[1:] == ["1|L--|hi_lo = r4 *s r5"]
    assert rtl("0085001E") == ["1|L--|lo = r4 / r5", "2|L--|hi = r4 % r5"]


def test_word_multiply_fills_both_halves() -> None:
    (stmt,) = lift_one("00850018").instructions
    assert isinstance(stmt, ast.Assign)
    assert stmt.dst.size == 128


def test_loads_and_stores() -> None:
    assert rtl("DFBF001C") == ["1|L--|r31 = Mem64[r29 + 0x1C]"]
    assert rtl("FFBF001C") == ["1|L--|Mem64[r29 + 0x1C] = r31"]
    assert rtl("8FBF001C") == ["1|L--|r31 = sext64(Mem32[r29 + 0x1C])"]
    assert rtl("9FBF001C") == ["1|L--|r31 = zext64(Mem32[r29 + 0x1C])"]
    assert rtl("AFBF001C") == ["1|L--|Mem32[r29 + 0x1C] = slice(r31, 0, 32)"]


def test_unaligned_and_linked_doublewords() -> None:
    assert rtl("68A40000") == ["1|L--|r4 = __ldl(r4, Mem64[r5])"]
    assert rtl("6CA40000") == ["1|L--|r4 = __ldr(r4, Mem64[r5])"]
    assert rtl("D0A40000") == ["1|L--|r4 = __load_linked_64(Mem64[r5])"]
    assert rtl("F0A40000") == ["1|L--|r4 = __store_conditional_64(Mem64[r5], r4)"]


def test_jump_targets_are_64_bit_addresses() -> None:
    assert rtl("0C000400") == ["1|CD-|call 0000000000001000 (0)"]


@pytest.mark.parametrize("arch_name", ["mips", "mips64"])
def test_move_on_fp_condition(arch_name: str) -> None:
    assert rtl("00811001", arch_name) == ["1|L--|if (fcsr.C) r2 = r4"]
    assert rtl("00801001", arch_name) == ["1|L--|if (!fcsr.C) r2 = r4"]
    assert rtl("00841001", arch_name) == ["1|L--|if (!__fp_condition(0x1)) r2 = r4"]


def test_fused_multiply_add() -> None:
    assert rtl("4C231020") == ["1|L--|f0 = (f2 *f f3) +f f1"]
    assert rtl("4C231028") == ["1|L--|f0 = (f2 *f f3) -f f1"]
    assert rtl("4C231030") == ["1|L--|f0 = -f((f2 *f f3) +f f1)"]
    assert rtl("4C231038") == ["1|L--|f0 = -f((f2 *f f3) -f f1)"]
    assert rtl("4C462021") == ["1|L--|f1_f0 = (f5_f4 *f f7_f6) +f f3_f2"]


def test_long_conversions() -> None:
    assert rtl("46201009") == ["1|L--|f1_f0 = conv64(__ftrunc(f3_f2))"]
    assert rtl("46A01021") == ["1|L--|f1_f0 = conv64(f3_f2)"]


def test_host_error_names_the_64_bit_architecture() -> None:
    host = LoggingHost()
    arch = get_architecture("mips64", QUIET)
    (cluster,) = arch.lift(bytes.fromhex("7C0000A0"), 0x1000, host=host)
    assert cluster.is_invalid
    assert host.errors == [(0x1000, "MIPS64 instruction 'wsbh' is not supported yet.")]


@pytest.mark.parametrize(
    "arch_name, label",
    [("mips", "MIPS"), ("mips64", "MIPS64")],
)
@pytest.mark.parametrize("hexstr, mnemonic", [("48000000", "cop2"), ("46C00000", "cop1.ps")])
def test_stub_host_error_names_the_instruction(arch_name: str, label: str, hexstr: str, mnemonic: str) -> None:
    host = LoggingHost()
    (cluster,) = get_architecture(arch_name, QUIET).lift(bytes.fromhex(hexstr), 0x1000, host=host)
    assert cluster.is_invalid
    assert host.errors == [(0x1000, f"{label} instruction '{mnemonic}' is not supported yet.")]
