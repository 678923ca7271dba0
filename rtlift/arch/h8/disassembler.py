"""H8/300 decoder for the register, immediate and branch forms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

from ...coding import ImageReader
from ...decoding.bitfield import Bitfield
from ...decoding.disassembler import DecodeContext, Disassembler
from ...decoding.tree import Decoder, Mutator, Predicate, instr, mask_field, nyi, select, sparse
from ...machine import (
    AddressOperand,
    ImmediateOperand,
    InstrClass,
    MachineInstruction,
    RegisterOperand,
    RegisterStorage,
)
from ...services import DiagnosticSink, NullDiagnostics
from .instruction import BRANCHES, Opcode
from .registers import BYTE_REGS, WORD_REGS

WORD_BITS = 16

HIGH_NIBBLE = Bitfield(12, 4, WORD_BITS)
OP_NIBBLE = Bitfield(8, 4, WORD_BITS)
LOW_BYTE = Bitfield(0, 8, WORD_BITS)
RS_FIELD = Bitfield(4, 4, WORD_BITS)
RD_FIELD = Bitfield(0, 4, WORD_BITS)
WORD = Bitfield(0, 16, WORD_BITS)


@dataclass
class H8Context(DecodeContext):
    arch_name: ClassVar[str] = "H8"
    invalid_opcode: ClassVar[Opcode] = Opcode.invalid


def _reg(field: Bitfield, bank: Tuple[RegisterStorage, ...]) -> Mutator:
    def m(word: int, ctx: DecodeContext) -> bool:
        ctx.ops.append(RegisterOperand(bank[field.read(word)]))
        return True

    return m


def imm8(word: int, ctx: DecodeContext) -> bool:
    ctx.ops.append(ImmediateOperand(LOW_BYTE.read(word), 8))
    return True


def disp8(word: int, ctx: DecodeContext) -> bool:
    target = ctx.address + 2 + LOW_BYTE.read_signed(word)
    ctx.ops.append(AddressOperand(target & 0xFFFF, 16))
    return True


rs8 = _reg(RS_FIELD, BYTE_REGS)
rd8 = _reg(RD_FIELD, BYTE_REGS)
rs16 = _reg(RS_FIELD, WORD_REGS)
rd16 = _reg(RD_FIELD, WORD_REGS)
# Immediate forms keep the destination in the operation nibble.
rn8 = _reg(OP_NIBBLE, BYTE_REGS)


def _is(value: int) -> Predicate:
    def predicate(field_value: int) -> bool:
        return field_value == value

    return predicate


def _build_root() -> Decoder:
    invalid = instr(Opcode.invalid, iclass=InstrClass.INVALID)

    group0 = sparse(OP_NIBBLE, nyi(Opcode.invalid, "group 0"), {
        0x0: select(WORD, _is(0), instr(Opcode.nop), invalid),
        0x1: nyi(Opcode.sleep),
        0x2: nyi(Opcode.stc),
        0x3: nyi(Opcode.ldc),
        0x8: instr(Opcode.add_b, rs8, rd8),
        0x9: instr(Opcode.add_w, rs16, rd16),
        0xA: nyi(Opcode.inc),
        0xB: nyi(Opcode.adds),
        0xC: instr(Opcode.mov_b, rs8, rd8),
        0xD: instr(Opcode.mov_w, rs16, rd16),
        0xE: nyi(Opcode.addx),
        0xF: nyi(Opcode.daa),
    }, tag="group0")

    group1 = sparse(OP_NIBBLE, nyi(Opcode.invalid, "group 1"), {
        0x0: nyi(Opcode.shal),
        0x2: nyi(Opcode.rotl),
        0x4: instr(Opcode.or_b, rs8, rd8),
        0x5: instr(Opcode.xor_b, rs8, rd8),
        0x6: instr(Opcode.and_b, rs8, rd8),
        0x7: nyi(Opcode.not_),
        0x8: instr(Opcode.sub_b, rs8, rd8),
        0x9: instr(Opcode.sub_w, rs16, rd16),
        0xA: nyi(Opcode.dec),
        0xB: nyi(Opcode.subs),
        0xC: instr(Opcode.cmp_b, rs8, rd8),
        0xD: instr(Opcode.cmp_w, rs16, rd16),
        0xE: nyi(Opcode.subx),
        0xF: nyi(Opcode.das),
    }, tag="group1")

    branches = mask_field(OP_NIBBLE, [
        instr(
            opcode,
            disp8,
            iclass=(
                InstrClass.TRANSFER if opcode is Opcode.bra
                else InstrClass.LINEAR if opcode is Opcode.brn
                else InstrClass.CONDITIONAL_TRANSFER
            ),
        )
        for opcode in BRANCHES
    ], tag="bcc")

    group5 = sparse(OP_NIBBLE, nyi(Opcode.invalid, "group 5"), {
        0x0: nyi(Opcode.mulxu),
        0x1: nyi(Opcode.divxu),
        0x4: select(LOW_BYTE, _is(0x70), instr(Opcode.rts, iclass=InstrClass.TRANSFER), invalid),
        0x5: instr(Opcode.bsr, disp8, iclass=InstrClass.CALL | InstrClass.TRANSFER),
        0x6: select(LOW_BYTE, _is(0x70), instr(Opcode.rte, iclass=InstrClass.TRANSFER | InstrClass.PRIVILEGED), invalid),
        0x9: nyi(Opcode.jmp),
        0xA: nyi(Opcode.jmp),
        0xD: nyi(Opcode.jsr),
        0xE: nyi(Opcode.jsr),
    }, tag="group5")

    return mask_field(HIGH_NIBBLE, [
        group0,
        group1,
        nyi(Opcode.mov_b, "@aa:8,rd"),
        nyi(Opcode.mov_b, "rs,@aa:8"),
        branches,
        group5,
        nyi(Opcode.invalid, "group 6"),
        nyi(Opcode.invalid, "group 7"),
        instr(Opcode.add_b, imm8, rn8),
        nyi(Opcode.addx, "addx #imm"),
        instr(Opcode.cmp_b, imm8, rn8),
        nyi(Opcode.subx, "subx #imm"),
        instr(Opcode.or_b, imm8, rn8),
        instr(Opcode.xor_b, imm8, rn8),
        instr(Opcode.and_b, imm8, rn8),
        instr(Opcode.mov_b, imm8, rn8),
    ], tag="root")


ROOT: Decoder = _build_root()


class H8Disassembler(Disassembler[MachineInstruction]):
    root = ROOT

    def __init__(
        self,
        reader: ImageReader,
        diagnostics: Optional[DiagnosticSink] = None,
        trace: bool = False,
    ) -> None:
        ctx = H8Context(diagnostics=diagnostics if diagnostics is not None else NullDiagnostics())
        super().__init__(reader, ctx, trace)

    def read_word(self) -> int:
        return self.reader.read_be_u16()
