"""Collaborators the disassemblers and rewriters talk to.

* ``StorageBinder`` hands out stable RTL handles for registers.
* ``RewriterHost`` receives lifting errors.
* ``DiagnosticSink`` receives missing-decoder / missing-rewriter samples and
  turns them into pytest stubs that can be pasted into the test suite.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Protocol, Set, Tuple

from .config import LiftConfig
from .machine import MachineInstruction, RegisterStorage
from .rtl import ast

logger = logging.getLogger(__name__)


class StorageBinder:
    """Returns the same ``ast.Reg`` for the same register within one pass."""

    def __init__(self) -> None:
        self._storages: Dict[Tuple[str, str], Any] = {}

    def ensure_register(self, reg: RegisterStorage) -> ast.Reg:
        key = ("reg", reg.name)
        if key not in self._storages:
            self._storages[key] = ast.Reg(reg.name, reg.size, reg.bank)
        return self._storages[key]

    def ensure_flag_group(self, reg: RegisterStorage, bits: str) -> ast.FlagGroup:
        key = ("flags", f"{reg.name}.{bits}")
        if key not in self._storages:
            self._storages[key] = ast.FlagGroup(reg.name, bits, 1 if len(bits) == 1 else reg.size)
        return self._storages[key]

    def ensure_sequence(self, hi: RegisterStorage, lo: RegisterStorage) -> ast.Reg:
        name = f"{hi.name}_{lo.name}"
        key = ("seq", name)
        if key not in self._storages:
            self._storages[key] = ast.Reg(name, hi.size + lo.size, "seq")
        return self._storages[key]

    def __len__(self) -> int:
        return len(self._storages)


class RewriterHost(Protocol):
    def error(self, address: int, message: str) -> None:
        ...


class LoggingHost:
    """Default host: keeps every report and logs it."""

    def __init__(self) -> None:
        self.errors: List[Tuple[int, str]] = []

    def error(self, address: int, message: str) -> None:
        logger.warning("%08X: %s", address, message)
        self.errors.append((address, message))


class DiagnosticSink(Protocol):
    def report_missing_decoder(self, arch: str, address: int, word: int, message: str) -> None:
        ...

    def report_missing_rewriter(
        self, arch: str, instr: MachineInstruction, raw: bytes, message: str
    ) -> None:
        ...


class NullDiagnostics:
    def report_missing_decoder(self, arch: str, address: int, word: int, message: str) -> None:
        return None

    def report_missing_rewriter(
        self, arch: str, instr: MachineInstruction, raw: bytes, message: str
    ) -> None:
        return None


@dataclass(frozen=True)
class MissingCase:
    kind: Literal["decoder", "rewriter"]
    arch: str
    address: int
    hex_bytes: str
    message: str
    stub: str


def _identifier(text: str) -> str:
    return re.sub(r"[^0-9A-Za-z_]+", "_", text).strip("_").lower()


def _decoder_stub(arch: str, hex_bytes: str, message: str) -> str:
    return (
        f"def test_{_identifier(arch)}_dis_{hex_bytes}() -> None:\n"
        f"    # {message}\n"
        f'    assert_disassembly("{hex_bytes}", "@@@")\n'
    )


def _rewriter_stub(arch: str, mnemonic: str, hex_bytes: str, text: str) -> str:
    return (
        f"def test_{_identifier(arch)}_rw_{_identifier(mnemonic)}() -> None:\n"
        f"    # {text}\n"
        f'    assert_rtl("{hex_bytes}", ["0|L--|@@@"])\n'
    )


@dataclass
class RecordingDiagnostics:
    """Keeps the first sample of every missing decoder / rewriter."""

    cases: List[MissingCase] = field(default_factory=list)
    _seen: Set[Tuple[str, str, str]] = field(default_factory=set, init=False)

    def _record(self, key: Tuple[str, str, str], case: MissingCase) -> None:
        if key in self._seen:
            return
        self._seen.add(key)
        self.cases.append(case)
        logger.info("missing %s for %s:\n%s", case.kind, case.arch, case.stub)

    def report_missing_decoder(self, arch: str, address: int, word: int, message: str) -> None:
        hex_bytes = f"{word:08X}"
        self._record(
            ("decoder", arch, message),
            MissingCase("decoder", arch, address, hex_bytes, message, _decoder_stub(arch, hex_bytes, message)),
        )

    def report_missing_rewriter(
        self, arch: str, instr: MachineInstruction, raw: bytes, message: str
    ) -> None:
        hex_bytes = raw.hex().upper()
        mnemonic = instr.mnemonic()
        self._record(
            ("rewriter", arch, str(instr.opcode)),
            MissingCase(
                "rewriter",
                arch,
                instr.address,
                hex_bytes,
                message,
                _rewriter_stub(arch, mnemonic, hex_bytes, str(instr)),
            ),
        )


def make_diagnostics(config: LiftConfig) -> DiagnosticSink:
    if config.diagnostics:
        return RecordingDiagnostics()
    return NullDiagnostics()


__all__ = [
    "DiagnosticSink",
    "LoggingHost",
    "MissingCase",
    "NullDiagnostics",
    "RecordingDiagnostics",
    "RewriterHost",
    "StorageBinder",
    "make_diagnostics",
]
