import pytest

from rtlift import ARCHITECTURES, disassemble, get_architecture, lift
from rtlift.config import LiftConfig
from rtlift.services import RecordingDiagnostics


def test_known_architectures() -> None:
    assert ARCHITECTURES == ("h8", "mips", "mips-le", "mips64", "parisc", "parisc64")
    assert get_architecture("MIPS").name == "mips"
    assert get_architecture("parisc").zero_registers == ("r0",)
    assert get_architecture("h8").zero_registers == ()


def test_unknown_architecture() -> None:
    with pytest.raises(ValueError, match="Unknown architecture 'z80'"):
        get_architecture("z80")


def test_environment_enables_diagnostics(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RTLIFT_DIAGNOSTICS", "1")
    assert isinstance(get_architecture("mips").diagnostics, RecordingDiagnostics)


def test_decoder_stub_is_recorded_through_architecture() -> None:
    arch = get_architecture("parisc", LiftConfig(diagnostics=True, trace=False))
    clusters = list(arch.lift(bytes.fromhex("0B200000"), 0x1000))
    assert len(clusters) == 1
    assert clusters[0].is_invalid
    kinds = [case.kind for case in arch.diagnostics.cases]
    assert kinds == ["decoder", "rewriter"]


def test_module_level_helpers() -> None:
    (instr,) = disassemble("mips", bytes.fromhex("27BDFFE0"))
    assert str(instr) == "addiu r29,r29,-0x20"
    (cluster,) = lift("mips-le", bytes.fromhex("E0FFBD27"))
    assert cluster.length == 4


def test_trailing_bytes_are_ignored() -> None:
    instrs = list(disassemble("parisc", bytes.fromhex("37DE0080" "0000")))
    assert len(instrs) == 1
