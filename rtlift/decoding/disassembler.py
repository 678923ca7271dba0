from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, Iterator, List, Optional, TypeVar

from ..coding import BufferTooShort, ImageReader
from ..machine import AnyOperand, InstrClass, MachineInstruction
from ..services import DiagnosticSink, NullDiagnostics
from .tree import Decoder

logger = logging.getLogger(__name__)

InstrT = TypeVar("InstrT", bound=MachineInstruction)


@dataclass
class DecodeContext:
    """Per-instruction decode state shared by the mutators of one tree.

    Architectures subclass this to add completer flags; ``reset`` must restore
    every field to its initial value.
    """

    arch_name: ClassVar[str] = ""
    invalid_opcode: ClassVar[Any] = "invalid"

    diagnostics: DiagnosticSink = field(default_factory=NullDiagnostics)
    address: int = 0
    ops: List[AnyOperand] = field(default_factory=list)

    def reset(self, address: int) -> None:
        self.address = address
        self.ops = []

    def make_instruction(self, iclass: InstrClass, opcode: Any) -> MachineInstruction:
        return MachineInstruction(opcode, iclass, tuple(self.ops), self.address)

    def make_invalid(self) -> MachineInstruction:
        self.reset(self.address)
        return self.make_instruction(InstrClass.INVALID, self.invalid_opcode)

    def make_stub(self, opcode: Any, message: str, word: int) -> MachineInstruction:
        self.diagnostics.report_missing_decoder(
            self.arch_name, self.address, word, message or str(getattr(opcode, "value", opcode))
        )
        self.reset(self.address)
        return self.make_instruction(InstrClass(0), opcode)


class Disassembler(Generic[InstrT]):
    """Pull-based decoder over an ``ImageReader``.

    Subclasses provide the decoder tree, the context and how one word is read.
    """

    root: ClassVar[Decoder]

    def __init__(self, reader: ImageReader, ctx: DecodeContext, trace: bool = False) -> None:
        self.reader = reader
        self.ctx = ctx
        self.trace = trace

    def read_word(self) -> int:
        raise NotImplementedError("read_word() not implemented for {}".format(type(self)))

    def disassemble_instruction(self) -> Optional[InstrT]:
        address = self.reader.address
        start = self.reader.offset
        try:
            word = self.read_word()
        except BufferTooShort:
            return None
        self.ctx.reset(address)
        decoded = self.root.decode(word, self.ctx)
        iclass = decoded.iclass
        if word == 0:
            iclass |= InstrClass.ZERO
        result = dataclasses.replace(
            decoded,
            address=address,
            length=self.reader.offset - start,
            iclass=iclass,
        )
        if self.trace:
            logger.debug("%08X: %0*X %s", address, 2 * result.length, word, result)
        return result  # type: ignore[return-value]

    def __iter__(self) -> Iterator[InstrT]:
        while True:
            instr = self.disassemble_instruction()
            if instr is None:
                return
            yield instr


__all__ = ["DecodeContext", "Disassembler"]
