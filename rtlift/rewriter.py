"""Instruction-at-a-time lifting from machine instructions to RTL clusters."""

from __future__ import annotations

import logging
from typing import (
    Any,
    Callable,
    ClassVar,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    TypeVar,
)

from .coding import BufferTooShort, ImageReader
from .machine import (
    AddressOperand,
    ImmediateOperand,
    IndexedOperand,
    InstrClass,
    LeftImmediateOperand,
    MachineInstruction,
    MemoryOperand,
    Operand,
    RegisterOperand,
    RegisterStorage,
)
from .rtl import ast
from .rtl.emitter import RtlEmitter, const, iadd, isub
from .services import (
    DiagnosticSink,
    LoggingHost,
    NullDiagnostics,
    RewriterHost,
    StorageBinder,
)

logger = logging.getLogger(__name__)

InstrT = TypeVar("InstrT", bound=MachineInstruction)
Routine = Callable[[Any, Any], None]


class Rewriter(Generic[InstrT]):
    """Base class for the per-architecture rewriters.

    ``routines`` maps an opcode to ``routine(rewriter, instr)``; opcodes
    without an entry go through ``rewrite_missing``. Each routine appends to
    ``self.m`` and may adjust ``self.iclass``.
    """

    arch_name: ClassVar[str] = ""
    routines: ClassVar[Mapping[Any, Routine]] = {}
    invalid_opcode: ClassVar[Any] = "invalid"
    zero_register: ClassVar[Optional[int]] = None
    address_bits: ClassVar[int] = 32

    def __init__(
        self,
        instrs: Iterable[InstrT],
        binder: Optional[StorageBinder] = None,
        host: Optional[RewriterHost] = None,
        diagnostics: Optional[DiagnosticSink] = None,
        reader: Optional[ImageReader] = None,
    ) -> None:
        self.instrs = instrs
        self.binder = binder if binder is not None else StorageBinder()
        self.host = host if host is not None else LoggingHost()
        self.diagnostics = diagnostics if diagnostics is not None else NullDiagnostics()
        self.reader = reader
        self.m = RtlEmitter()
        self.iclass = InstrClass.LINEAR
        self._reported: Set[Any] = set()

    @classmethod
    def unsupported_opcodes(cls, opcodes: Iterable[Any]) -> List[Any]:
        return [op for op in opcodes if op not in cls.routines and op != cls.invalid_opcode]

    def __iter__(self) -> Iterator[ast.RtlCluster]:
        for instr in self.instrs:
            yield self.rewrite(instr)

    def rewrite(self, instr: InstrT) -> ast.RtlCluster:
        self.m = RtlEmitter()
        self.iclass = instr.iclass & ~InstrClass.ZERO or InstrClass.LINEAR
        if not instr.iclass & ~InstrClass.ZERO:
            # decoder stub: recognised encoding without operands
            self.rewrite_missing(instr)
        elif instr.opcode == self.invalid_opcode or instr.iclass & InstrClass.INVALID:
            self.rewrite_invalid(instr)
        else:
            routine = self.routines.get(instr.opcode)
            if routine is None:
                self.rewrite_missing(instr)
            else:
                routine(self, instr)
                if not self.m.instructions:
                    self.m.nop()
        return self.m.make_cluster(instr.address, instr.length, self.iclass)

    def rewrite_invalid(self, instr: InstrT) -> None:
        self.iclass = InstrClass.INVALID
        self.m = RtlEmitter()
        self.m.invalid()

    def rewrite_missing(self, instr: InstrT) -> None:
        if instr.opcode not in self._reported:
            self._reported.add(instr.opcode)
            self.host.error(
                instr.address,
                f"{self.arch_name} instruction '{instr}' is not supported yet.",
            )
        self.diagnostics.report_missing_rewriter(
            self.arch_name, instr, self._raw_bytes(instr), f"Rewriting of {instr.mnemonic()}"
        )
        self.rewrite_invalid(instr)

    def _raw_bytes(self, instr: InstrT) -> bytes:
        if self.reader is None:
            return b""
        rdr = self.reader.clone()
        rdr.offset = instr.address - rdr.base_address
        try:
            return rdr.read_bytes(instr.length)
        except BufferTooShort:
            logger.debug("cannot re-read %d bytes at %08X", instr.length, instr.address)
            return b""

    # Operand helpers

    def is_zero_register(self, reg: RegisterStorage) -> bool:
        return self.zero_register is not None and reg.bank == "gpr" and reg.number == self.zero_register

    def reg(self, reg: RegisterStorage) -> ast.Expr:
        if self.is_zero_register(reg):
            return ast.Const(0, reg.size)
        return self.binder.ensure_register(reg)

    def rewrite_operand(self, op: Operand) -> ast.Expr:
        """Value of a source operand; the zero register reads as a constant."""
        if isinstance(op, RegisterOperand):
            return self.reg(op.reg)
        return self._rewrite_value(op)

    def _rewrite_value(self, op: Operand) -> ast.Expr:
        if isinstance(op, ImmediateOperand):
            return const(op.value, op.width)
        if isinstance(op, LeftImmediateOperand):
            return const(op.value, op.width)
        if isinstance(op, AddressOperand):
            return ast.Addr(op.address, op.width)
        if isinstance(op, (MemoryOperand, IndexedOperand)):
            return ast.Mem(self.effective_address(op), op.width)
        raise NotImplementedError(f"Unsupported operand: {op!r}")

    def effective_address(self, op: Operand) -> ast.Expr:
        if isinstance(op, MemoryOperand):
            if self.is_zero_register(op.base):
                return const(op.offset, self.address_bits)
            base = self.binder.ensure_register(op.base)
            if op.offset == 0:
                return base
            if op.offset > 0:
                return iadd(base, const(op.offset, self.address_bits))
            return isub(base, const(-op.offset, self.address_bits))
        if isinstance(op, IndexedOperand):
            base = self.reg(op.base)
            index = self.reg(op.index)
            if isinstance(index, ast.Const) and index.is_zero:
                return base
            if isinstance(base, ast.Const) and base.is_zero:
                return index
            return iadd(base, index)
        raise NotImplementedError(f"Not a memory operand: {op!r}")

    def target(self, op: Operand) -> ast.Expr:
        if isinstance(op, AddressOperand):
            return ast.Addr(op.address, op.width)
        return self.rewrite_operand(op)

    def assign(self, op: Operand, value: ast.Expr) -> bool:
        """Assign to a register operand; writes to the zero register are dropped."""
        if not isinstance(op, RegisterOperand):
            raise NotImplementedError(f"Cannot assign to {op!r}")
        if self.is_zero_register(op.reg):
            return False
        self.m.assign(self.binder.ensure_register(op.reg), value)
        return True


__all__ = ["Rewriter", "Routine"]
