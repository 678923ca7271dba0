"""Registry of the shipped architectures.

``get_architecture("mips-le")`` returns a small composition root that knows
how to build readers, disassemblers and rewriters for one processor and wires
them to the configured diagnostic sink.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from ..coding import ImageReader
from ..config import LiftConfig, load_lift_config
from ..decoding.disassembler import Disassembler
from ..machine import MachineInstruction
from ..rewriter import Rewriter
from ..rtl import ast
from ..services import DiagnosticSink, RewriterHost, StorageBinder, make_diagnostics
from .h8.disassembler import H8Disassembler
from .h8.rewriter import H8Rewriter
from .mips.disassembler import MipsDisassembler
from .mips.rewriter import Mips64Rewriter, MipsRewriter
from .parisc.disassembler import PaRiscDisassembler
from .parisc.rewriter import PaRiscRewriter

DisassemblerFactory = Callable[[ImageReader, DiagnosticSink, bool], Disassembler[Any]]


@dataclass
class Architecture:
    name: str
    word_bytes: int
    big_endian: bool
    make_disassembler: DisassemblerFactory
    rewriter_class: type[Rewriter[Any]]
    return_register: Optional[str] = None
    address_bits: int = 32
    config: LiftConfig = field(default_factory=load_lift_config)
    diagnostics: DiagnosticSink = field(init=False)

    def __post_init__(self) -> None:
        self.diagnostics = make_diagnostics(self.config)

    @property
    def zero_registers(self) -> tuple[str, ...]:
        if self.rewriter_class.zero_register is None:
            return ()
        return (f"r{self.rewriter_class.zero_register}",)

    def create_reader(self, data: bytes, base_address: int = 0) -> ImageReader:
        return ImageReader(data, base_address)

    def create_disassembler(self, reader: ImageReader) -> Disassembler[Any]:
        return self.make_disassembler(reader, self.diagnostics, self.config.trace)

    def create_rewriter(
        self,
        reader: ImageReader,
        binder: Optional[StorageBinder] = None,
        host: Optional[RewriterHost] = None,
        instrs: Optional[Iterable[MachineInstruction]] = None,
    ) -> Rewriter[Any]:
        """Rewriter over ``instrs``, or over a fresh disassembly of ``reader``."""
        if instrs is None:
            instrs = self.create_disassembler(reader.clone())
        return self.rewriter_class(
            instrs,
            binder=binder,
            host=host,
            diagnostics=self.diagnostics,
            reader=reader,
        )

    def disassemble(self, data: bytes, base_address: int = 0) -> Iterator[MachineInstruction]:
        return iter(self.create_disassembler(self.create_reader(data, base_address)))

    def lift(
        self,
        data: bytes,
        base_address: int = 0,
        host: Optional[RewriterHost] = None,
    ) -> Iterator[ast.RtlCluster]:
        return iter(self.create_rewriter(self.create_reader(data, base_address), host=host))

    def emit_llil(self, il: Any, cluster: ast.RtlCluster) -> None:
        """Lower ``cluster`` into a Binary Ninja ``LowLevelILFunction``."""
        from ..rtl.backend_llil import emit_llil

        emit_llil(il, cluster, self.return_register, self.address_bits)


_FACTORIES: Dict[str, Callable[[LiftConfig], Architecture]] = {
    "parisc": lambda config: Architecture(
        "parisc",
        4,
        True,
        lambda reader, diagnostics, trace: PaRiscDisassembler(reader, diagnostics=diagnostics, trace=trace),
        PaRiscRewriter,
        "r2",
        32,
        config,
    ),
    "parisc64": lambda config: Architecture(
        "parisc64",
        4,
        True,
        lambda reader, diagnostics, trace: PaRiscDisassembler(
            reader, is64bit=True, diagnostics=diagnostics, trace=trace
        ),
        PaRiscRewriter,
        "r2",
        32,
        config,
    ),
    "mips": lambda config: Architecture(
        "mips",
        4,
        True,
        lambda reader, diagnostics, trace: MipsDisassembler(reader, diagnostics=diagnostics, trace=trace),
        MipsRewriter,
        "r31",
        32,
        config,
    ),
    "mips-le": lambda config: Architecture(
        "mips-le",
        4,
        False,
        lambda reader, diagnostics, trace: MipsDisassembler(
            reader, big_endian=False, diagnostics=diagnostics, trace=trace
        ),
        MipsRewriter,
        "r31",
        32,
        config,
    ),
    "mips64": lambda config: Architecture(
        "mips64",
        4,
        True,
        lambda reader, diagnostics, trace: MipsDisassembler(
            reader, is64bit=True, diagnostics=diagnostics, trace=trace
        ),
        Mips64Rewriter,
        "r31",
        64,
        config,
    ),
    "h8": lambda config: Architecture(
        "h8",
        2,
        True,
        lambda reader, diagnostics, trace: H8Disassembler(reader, diagnostics=diagnostics, trace=trace),
        H8Rewriter,
        None,
        16,
        config,
    ),
}

ARCHITECTURES = tuple(sorted(_FACTORIES))


def get_architecture(name: str, config: Optional[LiftConfig] = None) -> Architecture:
    try:
        factory = _FACTORIES[name.casefold()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown architecture {name!r}; expected one of {', '.join(ARCHITECTURES)}"
        ) from exc
    return factory(config if config is not None else load_lift_config())


__all__ = ["ARCHITECTURES", "Architecture", "get_architecture"]
