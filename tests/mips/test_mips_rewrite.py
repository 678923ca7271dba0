from typing import List, Optional

from rtlift.arch import get_architecture
from rtlift.config import LiftConfig
from rtlift.rtl import ast
from rtlift.rtl.text import format_cluster
from rtlift.rtl.validate import validate_cluster
from rtlift.services import LoggingHost


def lift_one(hexstr: str, address: int = 0x1000, host: Optional[LoggingHost] = None) -> ast.RtlCluster:
    arch = get_architecture("mips", LiftConfig(diagnostics=False, trace=False))
    (cluster,) = arch.lift(bytes.fromhex(hexstr), address, host=host)
    assert validate_cluster(cluster, arch.zero_registers) == []
    return cluster


def rtl(hexstr: str, address: int = 0x1000) -> List[str]:
    return format_cluster(lift_one(hexstr, address))


def test_addiu() -> None:
    assert rtl("27BDFFE0") == [
        "0|L--|00001000(4): 1 instructions",
        "1|L--|r29 = r29 + 0xFFFFFFE0",
    ]


def test_jr_ra_is_return() -> None:
    assert rtl("03E00008") == ["0|TD-|00001000(4): 1 instructions", "1|TD-|return"]


def test_load_and_store_word() -> None:
    assert rtl("8FBF001C")[1:] == ["1|L--|r31 = Mem32[r29 + 0x1C]"]
    assert rtl("AFBF001C")[1:] == ["1|L--|Mem32[r29 + 0x1C] = r31"]


def test_zero_word_and_zero_destination_are_nops() -> None:
    assert rtl("00000000") == ["0|L--|00001000(4): 1 instructions", "1|L--|nop"]
    assert rtl("00850021")[1:] == ["1|L--|nop"]


def test_lui() -> None:
    assert rtl("3C041234")[1:] == ["1|L--|r4 = 0x12340000"]


def test_branches() -> None:
    assert rtl("10000001") == ["0|TD-|00001000(4): 1 instructions", "1|TD-|goto 00001008"]
    assert rtl("14850003")[1:] == ["1|TD-|if (r4 != r5) branch 00001010"]
    assert rtl("54850003")[1:] == ["1|TDA|if (r4 != r5) branch 00001010"]


def test_jal_is_call() -> None:
    assert rtl("0C000400")[1:] == ["1|CD-|call 00001000 (0)"]


def test_mult_writes_hi_lo_pair() -> None:
    cluster = lift_one("00850018")
    (stmt,) = cluster.instructions
    assert isinstance(stmt, ast.Assign)
    assert stmt.dst == ast.Reg("hi_lo", 64, "seq")
    assert format_cluster(cluster)[1:] == ["1|L--|hi_lo = r4 *s r5"]


def test_div_writes_lo_then_hi() -> None:
    # div r4,r5
    assert rtl("0085001A")[1:] == ["1|L--|lo = r4 / r5", "2|L--|hi = r4 % r5"]


def test_ldc1_uses_register_pair() -> None:
    assert rtl("D7A20008")[1:] == ["1|L--|f3_f2 = Mem64[r29 + 0x8]"]


def test_odd_pair_is_invalid_without_host_error() -> None:
    host = LoggingHost()
    cluster = lift_one("D7A30008", host=host)
    assert cluster.is_invalid
    assert host.errors == []


def test_unimplemented_reports_to_host() -> None:
    host = LoggingHost()
    cluster = lift_one("7C0000A0", host=host)
    assert cluster.is_invalid
    assert host.errors == [(0x1000, "MIPS instruction 'wsbh' is not supported yet.")]


def test_syscall() -> None:
    assert rtl("0000000C")[1:] == ["1|C--|__syscall(0x0)"]
