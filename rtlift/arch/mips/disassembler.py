"""MIPS32 and MIPS64 decoder tables (release 2 integer, FPU and privileged subset)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Tuple, cast

from ...coding import ImageReader
from ...decoding.bitfield import Bitfield
from ...decoding.disassembler import DecodeContext, Disassembler
from ...decoding.tree import Decoder, Mutator, instr, nyi, select, sparse
from ...machine import (
    AddressOperand,
    ImmediateOperand,
    InstrClass,
    MachineInstruction,
    MemoryOperand,
    RegisterOperand,
    RegisterStorage,
)
from ...services import DiagnosticSink, NullDiagnostics
from .instruction import Opcode
from .registers import CP0_REGS, FCR_REGS, FP_REGS, GP_REGS, GP_REGS64

TD = InstrClass.TRANSFER | InstrClass.DELAY
CTD = InstrClass.CONDITIONAL_TRANSFER | InstrClass.DELAY
LIKELY = CTD | InstrClass.ANNUL
CALL_TD = InstrClass.CALL | TD
CALL_CTD = InstrClass.CALL | CTD
SYSTEM = InstrClass.CALL | InstrClass.TRANSFER
PRIV = InstrClass.LINEAR | InstrClass.PRIVILEGED

OPCODE = Bitfield(26, 6)
RS = Bitfield(21, 5)
RT = Bitfield(16, 5)
RD = Bitfield(11, 5)
SA = Bitfield(6, 5)
FUNCT = Bitfield(0, 6)
IMM16 = Bitfield(0, 16)
TARGET26 = Bitfield(0, 26)
WORD = Bitfield(0, 32)
FP_CC = Bitfield(18, 3)


@dataclass
class MipsContext(DecodeContext):
    arch_name: ClassVar[str] = "MIPS"
    invalid_opcode: ClassVar[Opcode] = Opcode.illegal

    is64bit: bool = False

    @property
    def word_bits(self) -> int:
        return 64 if self.is64bit else 32

    @property
    def gprs(self) -> Tuple[RegisterStorage, ...]:
        return GP_REGS64 if self.is64bit else GP_REGS


def _reg(field: Bitfield, bank: tuple) -> Mutator:
    def m(word: int, ctx: DecodeContext) -> bool:
        ctx.ops.append(RegisterOperand(bank[field.read(word)]))
        return True

    return m


def _gpr(field: Bitfield) -> Mutator:
    def m(word: int, ctx: DecodeContext) -> bool:
        ctx.ops.append(RegisterOperand(cast(MipsContext, ctx).gprs[field.read(word)]))
        return True

    return m


def fpair(field: Bitfield) -> Mutator:
    """Even-numbered FPU register holding a double; odd numbers are reserved."""

    def m(word: int, ctx: DecodeContext) -> bool:
        n = field.read(word)
        if n & 1:
            return False
        ctx.ops.append(RegisterOperand(FP_REGS[n]))
        return True

    return m


def uimm(field: Bitfield, width: int = 32) -> Mutator:
    def m(word: int, ctx: DecodeContext) -> bool:
        ctx.ops.append(ImmediateOperand(field.read(word), width))
        return True

    return m


def uimm_word(field: Bitfield) -> Mutator:
    """Zero-extended immediate as wide as a general register."""

    def m(word: int, ctx: DecodeContext) -> bool:
        ctx.ops.append(ImmediateOperand(field.read(word), cast(MipsContext, ctx).word_bits))
        return True

    return m


def simm(field: Bitfield) -> Mutator:
    def m(word: int, ctx: DecodeContext) -> bool:
        ctx.ops.append(ImmediateOperand(field.read_signed(word), cast(MipsContext, ctx).word_bits))
        return True

    return m


def mem(width: int) -> Mutator:
    def m(word: int, ctx: DecodeContext) -> bool:
        base = cast(MipsContext, ctx).gprs[RS.read(word)]
        ctx.ops.append(MemoryOperand(width, base, IMM16.read_signed(word)))
        return True

    return m


def pcrel(word: int, ctx: DecodeContext) -> bool:
    bits = cast(MipsContext, ctx).word_bits
    target = ctx.address + 4 + (IMM16.read_signed(word) << 2)
    ctx.ops.append(AddressOperand(target & ((1 << bits) - 1), bits))
    return True


def jtarget(word: int, ctx: DecodeContext) -> bool:
    bits = cast(MipsContext, ctx).word_bits
    region = (ctx.address + 4) & ((1 << bits) - 1) & ~0x0FFFFFFF
    ctx.ops.append(AddressOperand(region | (TARGET26.read(word) << 2), bits))
    return True


def mips64(word: int, ctx: DecodeContext) -> bool:
    """Doubleword encodings are reserved in 32-bit mode."""
    return cast(MipsContext, ctx).is64bit


def fp_cc(word: int, ctx: DecodeContext) -> bool:
    if word & (1 << 17):
        return False
    ctx.ops.append(ImmediateOperand(FP_CC.read(word), 8))
    return True


def ext_size(word: int, ctx: DecodeContext) -> bool:
    ctx.ops.append(ImmediateOperand(RD.read(word) + 1, 8))
    return True


def ins_size(word: int, ctx: DecodeContext) -> bool:
    size = RD.read(word) - SA.read(word) + 1
    if size <= 0:
        return False
    ctx.ops.append(ImmediateOperand(size, 8))
    return True


rs = _gpr(RS)
rt = _gpr(RT)
rd = _gpr(RD)
fs = _reg(RD, FP_REGS)
ft = _reg(RT, FP_REGS)
fd = _reg(SA, FP_REGS)
ds = fpair(RD)
dt = fpair(RT)
dd = fpair(SA)
fr = _reg(RS, FP_REGS)
dr = fpair(RS)
cp0 = _reg(RD, CP0_REGS)
fcr = _reg(RD, FCR_REGS)
sa = uimm(SA, 8)
hint = uimm(RT, 8)
simm16 = simm(IMM16)
uimm16 = uimm_word(IMM16)
code20 = uimm(Bitfield(6, 20))
hwr = uimm(RD, 8)


def _eq0(value: int) -> bool:
    return value == 0


def _build_root() -> Decoder:
    invalid = instr(Opcode.illegal, iclass=InstrClass.INVALID)

    special = sparse(FUNCT, invalid, {
        0x00: select(WORD, _eq0, instr(Opcode.nop), instr(Opcode.sll, rd, rt, sa)),
        0x01: select(Bitfield(16, 1), _eq0,
                     instr(Opcode.movf, rd, rs, fp_cc),
                     instr(Opcode.movt, rd, rs, fp_cc)),
        0x02: instr(Opcode.srl, rd, rt, sa),
        0x03: instr(Opcode.sra, rd, rt, sa),
        0x04: instr(Opcode.sllv, rd, rt, rs),
        0x06: instr(Opcode.srlv, rd, rt, rs),
        0x07: instr(Opcode.srav, rd, rt, rs),
        0x08: instr(Opcode.jr, rs, iclass=TD),
        0x09: instr(Opcode.jalr, rd, rs, iclass=CALL_TD),
        0x0A: instr(Opcode.movz, rd, rs, rt),
        0x0B: instr(Opcode.movn, rd, rs, rt),
        0x0C: instr(Opcode.syscall, code20, iclass=SYSTEM),
        0x0D: instr(Opcode.break_, code20, iclass=SYSTEM),
        0x0F: instr(Opcode.sync, sa),
        0x10: instr(Opcode.mfhi, rd),
        0x11: instr(Opcode.mthi, rs),
        0x12: instr(Opcode.mflo, rd),
        0x13: instr(Opcode.mtlo, rs),
        0x14: instr(Opcode.dsllv, mips64, rd, rt, rs),
        0x16: instr(Opcode.dsrlv, mips64, rd, rt, rs),
        0x17: instr(Opcode.dsrav, mips64, rd, rt, rs),
        0x18: instr(Opcode.mult, rs, rt),
        0x19: instr(Opcode.multu, rs, rt),
        0x1A: instr(Opcode.div, rs, rt),
        0x1B: instr(Opcode.divu, rs, rt),
        0x1C: instr(Opcode.dmult, mips64, rs, rt),
        0x1D: instr(Opcode.dmultu, mips64, rs, rt),
        0x1E: instr(Opcode.ddiv, mips64, rs, rt),
        0x1F: instr(Opcode.ddivu, mips64, rs, rt),
        0x20: instr(Opcode.add, rd, rs, rt),
        0x21: instr(Opcode.addu, rd, rs, rt),
        0x22: instr(Opcode.sub, rd, rs, rt),
        0x23: instr(Opcode.subu, rd, rs, rt),
        0x24: instr(Opcode.and_, rd, rs, rt),
        0x25: instr(Opcode.or_, rd, rs, rt),
        0x26: instr(Opcode.xor, rd, rs, rt),
        0x27: instr(Opcode.nor, rd, rs, rt),
        0x2A: instr(Opcode.slt, rd, rs, rt),
        0x2B: instr(Opcode.sltu, rd, rs, rt),
        0x2C: instr(Opcode.dadd, mips64, rd, rs, rt),
        0x2D: instr(Opcode.daddu, mips64, rd, rs, rt),
        0x2E: instr(Opcode.dsub, mips64, rd, rs, rt),
        0x2F: instr(Opcode.dsubu, mips64, rd, rs, rt),
        0x30: instr(Opcode.tge, rs, rt),
        0x31: instr(Opcode.tgeu, rs, rt),
        0x32: instr(Opcode.tlt, rs, rt),
        0x33: instr(Opcode.tltu, rs, rt),
        0x34: instr(Opcode.teq, rs, rt),
        0x36: instr(Opcode.tne, rs, rt),
        0x38: instr(Opcode.dsll, mips64, rd, rt, sa),
        0x3A: instr(Opcode.dsrl, mips64, rd, rt, sa),
        0x3B: instr(Opcode.dsra, mips64, rd, rt, sa),
        0x3C: instr(Opcode.dsll32, mips64, rd, rt, sa),
        0x3E: instr(Opcode.dsrl32, mips64, rd, rt, sa),
        0x3F: instr(Opcode.dsra32, mips64, rd, rt, sa),
    }, tag="special")

    regimm = sparse(RT, invalid, {
        0x00: instr(Opcode.bltz, rs, pcrel, iclass=CTD),
        0x01: instr(Opcode.bgez, rs, pcrel, iclass=CTD),
        0x02: instr(Opcode.bltzl, rs, pcrel, iclass=LIKELY),
        0x03: instr(Opcode.bgezl, rs, pcrel, iclass=LIKELY),
        0x08: instr(Opcode.tgei, rs, simm16),
        0x09: instr(Opcode.tgeiu, rs, simm16),
        0x0A: instr(Opcode.tlti, rs, simm16),
        0x0B: instr(Opcode.tltiu, rs, simm16),
        0x0C: instr(Opcode.teqi, rs, simm16),
        0x0E: instr(Opcode.tnei, rs, simm16),
        0x10: instr(Opcode.bltzal, rs, pcrel, iclass=CALL_CTD),
        0x11: select(RS, _eq0,
                     instr(Opcode.bgezal, rs, pcrel, iclass=CALL_TD),
                     instr(Opcode.bgezal, rs, pcrel, iclass=CALL_CTD)),
        0x12: instr(Opcode.bltzall, rs, pcrel, iclass=CALL_CTD | InstrClass.ANNUL),
        0x13: instr(Opcode.bgezall, rs, pcrel, iclass=CALL_CTD | InstrClass.ANNUL),
    }, tag="regimm")

    special2 = sparse(FUNCT, invalid, {
        0x00: instr(Opcode.madd, rs, rt),
        0x01: instr(Opcode.maddu, rs, rt),
        0x02: instr(Opcode.mul, rd, rs, rt),
        0x04: instr(Opcode.msub, rs, rt),
        0x05: instr(Opcode.msubu, rs, rt),
        0x20: instr(Opcode.clz, rd, rs),
        0x21: instr(Opcode.clo, rd, rs),
        0x3F: instr(Opcode.sdbbp, code20, iclass=SYSTEM),
    }, tag="special2")

    bshfl = sparse(SA, invalid, {
        0x02: nyi(Opcode.wsbh),
        0x10: instr(Opcode.seb, rd, rt),
        0x18: instr(Opcode.seh, rd, rt),
    }, tag="bshfl")

    special3 = sparse(FUNCT, invalid, {
        0x00: instr(Opcode.ext, rt, rs, sa, ext_size),
        0x04: instr(Opcode.ins, rt, rs, sa, ins_size),
        0x20: bshfl,
        0x3B: instr(Opcode.rdhwr, rt, hwr),
    }, tag="special3")

    cop0_co = sparse(FUNCT, invalid, {
        0x01: nyi(Opcode.tlbr),
        0x02: nyi(Opcode.tlbwi),
        0x06: nyi(Opcode.tlbwr),
        0x08: nyi(Opcode.tlbp),
        0x18: instr(Opcode.eret, iclass=InstrClass.TRANSFER | InstrClass.PRIVILEGED),
        0x20: nyi(Opcode.wait),
    }, tag="cop0.co")
    cop0_overrides: Dict[int, Decoder] = {
        0x00: instr(Opcode.mfc0, rt, cp0, iclass=PRIV),
        0x04: instr(Opcode.mtc0, rt, cp0, iclass=PRIV),
    }
    cop0_overrides.update({value: cop0_co for value in range(0x10, 0x20)})
    cop0 = sparse(RS, invalid, cop0_overrides, tag="cop0")

    fmt_s = sparse(FUNCT, invalid, {
        0x00: instr(Opcode.add_s, fd, fs, ft),
        0x01: instr(Opcode.sub_s, fd, fs, ft),
        0x02: instr(Opcode.mul_s, fd, fs, ft),
        0x03: instr(Opcode.div_s, fd, fs, ft),
        0x06: instr(Opcode.mov_s, fd, fs),
        0x21: instr(Opcode.cvt_d_s, dd, fs),
        0x32: instr(Opcode.c_eq_s, fs, ft),
        0x3C: instr(Opcode.c_lt_s, fs, ft),
        0x3E: instr(Opcode.c_le_s, fs, ft),
    }, tag="fmt.s")
    fmt_d = sparse(FUNCT, invalid, {
        0x00: instr(Opcode.add_d, dd, ds, dt),
        0x01: instr(Opcode.sub_d, dd, ds, dt),
        0x02: instr(Opcode.mul_d, dd, ds, dt),
        0x03: instr(Opcode.div_d, dd, ds, dt),
        0x06: instr(Opcode.mov_d, dd, ds),
        0x09: instr(Opcode.trunc_l_d, dd, ds),
        0x20: instr(Opcode.cvt_s_d, fd, ds),
        0x24: instr(Opcode.cvt_w_d, fd, ds),
        0x32: instr(Opcode.c_eq_d, ds, dt),
        0x3C: instr(Opcode.c_lt_d, ds, dt),
        0x3E: instr(Opcode.c_le_d, ds, dt),
    }, tag="fmt.d")
    fmt_w = sparse(FUNCT, invalid, {
        0x21: instr(Opcode.cvt_d_w, dd, fs),
    }, tag="fmt.w")
    fmt_l = sparse(FUNCT, invalid, {
        0x21: instr(Opcode.cvt_d_l, dd, ds),
    }, tag="fmt.l")
    cop1x = sparse(FUNCT, invalid, {
        0x00: nyi(Opcode.lwxc1),
        0x01: nyi(Opcode.ldxc1),
        0x08: nyi(Opcode.swxc1),
        0x09: nyi(Opcode.sdxc1),
        0x0F: nyi(Opcode.prefx),
        0x20: instr(Opcode.madd_s, fd, fr, fs, ft),
        0x21: instr(Opcode.madd_d, dd, dr, ds, dt),
        0x28: instr(Opcode.msub_s, fd, fr, fs, ft),
        0x29: instr(Opcode.msub_d, dd, dr, ds, dt),
        0x30: instr(Opcode.nmadd_s, fd, fr, fs, ft),
        0x31: instr(Opcode.nmadd_d, dd, dr, ds, dt),
        0x38: instr(Opcode.nmsub_s, fd, fr, fs, ft),
        0x39: instr(Opcode.nmsub_d, dd, dr, ds, dt),
    }, tag="cop1x")
    bc1 = sparse(Bitfield(16, 2), invalid, {
        0: instr(Opcode.bc1f, pcrel, iclass=CTD),
        1: instr(Opcode.bc1t, pcrel, iclass=CTD),
        2: instr(Opcode.bc1fl, pcrel, iclass=LIKELY),
        3: instr(Opcode.bc1tl, pcrel, iclass=LIKELY),
    }, tag="bc1")
    cop1 = sparse(RS, invalid, {
        0x00: instr(Opcode.mfc1, rt, fs),
        0x02: instr(Opcode.cfc1, rt, fcr),
        0x04: instr(Opcode.mtc1, rt, fs),
        0x06: instr(Opcode.ctc1, rt, fcr),
        0x08: bc1,
        0x10: fmt_s,
        0x11: fmt_d,
        0x14: fmt_w,
        0x15: fmt_l,
        0x16: nyi(Opcode.cop1_ps, "paired single"),
    }, tag="cop1")

    return sparse(OPCODE, invalid, {
        0x00: special,
        0x01: regimm,
        0x02: instr(Opcode.j, jtarget, iclass=TD),
        0x03: instr(Opcode.jal, jtarget, iclass=CALL_TD),
        0x04: instr(Opcode.beq, rs, rt, pcrel, iclass=CTD),
        0x05: instr(Opcode.bne, rs, rt, pcrel, iclass=CTD),
        0x06: instr(Opcode.blez, rs, pcrel, iclass=CTD),
        0x07: instr(Opcode.bgtz, rs, pcrel, iclass=CTD),
        0x08: instr(Opcode.addi, rt, rs, simm16),
        0x09: instr(Opcode.addiu, rt, rs, simm16),
        0x0A: instr(Opcode.slti, rt, rs, simm16),
        0x0B: instr(Opcode.sltiu, rt, rs, simm16),
        0x0C: instr(Opcode.andi, rt, rs, uimm16),
        0x0D: instr(Opcode.ori, rt, rs, uimm16),
        0x0E: instr(Opcode.xori, rt, rs, uimm16),
        0x0F: instr(Opcode.lui, rt, uimm16),
        0x10: cop0,
        0x11: cop1,
        0x12: nyi(Opcode.cop2),
        0x13: cop1x,
        0x14: instr(Opcode.beql, rs, rt, pcrel, iclass=LIKELY),
        0x15: instr(Opcode.bnel, rs, rt, pcrel, iclass=LIKELY),
        0x16: instr(Opcode.blezl, rs, pcrel, iclass=LIKELY),
        0x17: instr(Opcode.bgtzl, rs, pcrel, iclass=LIKELY),
        0x18: instr(Opcode.daddi, mips64, rt, rs, simm16),
        0x19: instr(Opcode.daddiu, mips64, rt, rs, simm16),
        0x1A: instr(Opcode.ldl, mips64, rt, mem(64)),
        0x1B: instr(Opcode.ldr, mips64, rt, mem(64)),
        0x1C: special2,
        0x1F: special3,
        0x20: instr(Opcode.lb, rt, mem(8)),
        0x21: instr(Opcode.lh, rt, mem(16)),
        0x22: instr(Opcode.lwl, rt, mem(32)),
        0x23: instr(Opcode.lw, rt, mem(32)),
        0x24: instr(Opcode.lbu, rt, mem(8)),
        0x25: instr(Opcode.lhu, rt, mem(16)),
        0x26: instr(Opcode.lwr, rt, mem(32)),
        0x27: instr(Opcode.lwu, mips64, rt, mem(32)),
        0x28: instr(Opcode.sb, rt, mem(8)),
        0x29: instr(Opcode.sh, rt, mem(16)),
        0x2A: instr(Opcode.swl, rt, mem(32)),
        0x2B: instr(Opcode.sw, rt, mem(32)),
        0x2C: instr(Opcode.sdl, mips64, rt, mem(64)),
        0x2D: instr(Opcode.sdr, mips64, rt, mem(64)),
        0x2E: instr(Opcode.swr, rt, mem(32)),
        0x2F: instr(Opcode.cache, hint, mem(32), iclass=PRIV),
        0x30: instr(Opcode.ll, rt, mem(32)),
        0x31: instr(Opcode.lwc1, ft, mem(32)),
        0x33: instr(Opcode.pref, hint, mem(32)),
        0x34: instr(Opcode.lld, mips64, rt, mem(64)),
        0x35: instr(Opcode.ldc1, dt, mem(64)),
        0x37: instr(Opcode.ld, mips64, rt, mem(64)),
        0x38: instr(Opcode.sc, rt, mem(32)),
        0x39: instr(Opcode.swc1, ft, mem(32)),
        0x3C: instr(Opcode.scd, mips64, rt, mem(64)),
        0x3D: instr(Opcode.sdc1, dt, mem(64)),
        0x3F: instr(Opcode.sd, mips64, rt, mem(64)),
    }, tag="root")


ROOT: Decoder = _build_root()


class MipsDisassembler(Disassembler[MachineInstruction]):
    root = ROOT

    def __init__(
        self,
        reader: ImageReader,
        big_endian: bool = True,
        is64bit: bool = False,
        diagnostics: Optional[DiagnosticSink] = None,
        trace: bool = False,
    ) -> None:
        ctx = MipsContext(
            diagnostics=diagnostics if diagnostics is not None else NullDiagnostics(),
            is64bit=is64bit,
        )
        super().__init__(reader, ctx, trace)
        self.big_endian = big_endian

    def read_word(self) -> int:
        if self.big_endian:
            return self.reader.read_be_u32()
        return self.reader.read_le_u32()
