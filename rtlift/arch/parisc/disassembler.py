"""PA-RISC 1.1/2.0 decoder tables.

Bit positions in this module use the manual's numbering: bit 0 is the most
significant bit of the 32-bit instruction word.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Optional, Sequence, Tuple

from ...coding import ImageReader
from ...decoding.bitfield import (
    Bitfield,
    be_field,
    be_fields,
    fields_length,
    read_fields,
    read_signed_fields,
    sign_extend,
)
from ...decoding.disassembler import DecodeContext, Disassembler
from ...decoding.tree import Decoder, Mutator, instr, mask_field, nyi, select, sparse
from ...machine import (
    AddressOperand,
    ImmediateOperand,
    IndexedOperand,
    InstrClass,
    LeftImmediateOperand,
    MemoryOperand,
    RegisterOperand,
    RegisterStorage,
)
from ...services import DiagnosticSink, NullDiagnostics
from . import conditions as cc
from .instruction import BaseRegMod, FpFormat, Opcode, PaRiscInstruction, SignExtension
from .registers import FP_REGS, FP_REGS32, GP_REGS, GPR_BITS, R1, RP, SPACE_REGS

TD = InstrClass.TRANSFER | InstrClass.DELAY
CTD = InstrClass.CONDITIONAL_TRANSFER | InstrClass.DELAY
CALL_TD = InstrClass.CALL | InstrClass.TRANSFER | InstrClass.DELAY

Permutation = Callable[[bool, int, Sequence[Bitfield]], int]


@dataclass
class PaRiscContext(DecodeContext):
    arch_name: ClassVar[str] = "PA-RISC"
    invalid_opcode: ClassVar[Opcode] = Opcode.invalid

    is64bit: bool = False
    annul: bool = False
    zero: bool = False
    sign: SignExtension = SignExtension.none
    cond: Optional[cc.Condition] = None
    base_reg_mod: BaseRegMod = BaseRegMod.none
    coprocessor: int = -1
    fp_format: FpFormat = FpFormat.none

    def reset(self, address: int) -> None:
        super().reset(address)
        self.annul = False
        self.zero = False
        self.sign = SignExtension.none
        self.cond = None
        self.base_reg_mod = BaseRegMod.none
        self.coprocessor = -1
        self.fp_format = FpFormat.none

    def make_instruction(self, iclass: InstrClass, opcode: Opcode) -> PaRiscInstruction:
        return PaRiscInstruction(
            opcode,
            iclass,
            tuple(self.ops),
            self.address,
            cond=self.cond,
            annul=self.annul,
            zero=self.zero,
            sign=self.sign,
            base_reg_mod=self.base_reg_mod,
            fp_format=self.fp_format,
            coprocessor=self.coprocessor,
        )


# Field permutations from the PA-RISC 2.0 manual, appendix "Instruction formats".


def assemble_6(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
    x = fields[0].read(word)
    y = fields[1].read(word)
    return 32 * x + (32 - y)


def assemble_12(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
    # cat(y, x{10}, x{0..9})
    x = fields[0].read(word)
    y = fields[1].read(word)
    return (y << fields[0].length) | ((x << 10) & 0x400) | ((x >> 1) & 0x3FF)


def assemble_16(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
    x = fields[0].read(word)
    y = fields[1].read(word)
    y_13 = y & 1
    if is64bit:
        # cat(y{13}, xor(y{13}, x{0}), xor(y{13}, x{1}), y{0..12})
        x_0 = (x >> 1) & 1
        x_1 = x & 1
        p = y_13
        p = (p << 1) | (y_13 ^ x_0)
        p = (p << 1) | (y_13 ^ x_1)
        return (p << 13) | (y >> 1)
    p = ((8 - y_13) & 7) << 13
    return sign_extend(p | (y >> 1), 16)


def assemble_16a(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
    # cat(z, xor(z, x{0}), xor(z, x{1}), y, 0{0..1})
    x = fields[0].read(word)
    y = fields[1].read(word)
    z = fields[2].read(word)
    p = ((8 - z) & 7) << 13
    if is64bit:
        p ^= x << 13
    return p | (y << 2)


def assemble_17(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
    # cat(z, x, y{10}, y{0..9})
    x = fields[0].read(word)
    y = fields[1].read(word)
    z = fields[2].read(word)
    p = (z << fields[0].length) | x
    return (p << fields[1].length) | ((y << 10) & 0x400) | ((y >> 1) & 0x3FF)


_ASM21_FIELDS = (
    be_field(11 + 20, 1),
    be_field(11 + 9, 11),
    be_field(11 + 5, 2),
    be_field(11 + 0, 5),
    be_field(11 + 7, 2),
)


def assemble_21(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
    # cat(x{20}, x{9..19}, x{5..6}, x{0..4}, x{7..8})
    return read_fields(_ASM21_FIELDS, fields[0].read(word))


def assemble_22(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
    a = fields[0].read(word)
    b = fields[1].read(word)
    c = fields[2].read(word)
    d = fields[3].read(word)
    p = (d << fields[0].length) | a
    p = (p << fields[1].length) | b
    return (p << fields[2].length) | ((c << 10) & 0x400) | ((c >> 1) & 0x3FF)


def low_sign_ext(width: int) -> Permutation:
    """sign_ext(cat(x{width-1}, x{0..width-2}), width): the sign is the low bit."""

    def permute(is64bit: bool, word: int, fields: Sequence[Bitfield]) -> int:
        x = fields[0].read(word)
        return sign_extend((x >> 1) | (x << (width - 1)), width)

    return permute


low_sign_ext5 = low_sign_ext(5)
low_sign_ext11 = low_sign_ext(11)


# Mutators


def u(pos: int, length: int, width: int = 32) -> Mutator:
    field = be_field(pos, length)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(ImmediateOperand(field.read(word), width))
        return True

    return m


def u_fields(spans: Sequence[Tuple[int, int]], permutation: Permutation) -> Mutator:
    fields = be_fields(*spans)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(ImmediateOperand(permutation(ctx.is64bit, word, fields), 32))
        return True

    return m


def u_from(base: int, pos: int, length: int) -> Mutator:
    """``base - field``: bit positions and lengths encoded in complement form."""
    field = be_field(pos, length)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(ImmediateOperand(base - field.read(word), 8))
        return True

    return m


def left(spans: Sequence[Tuple[int, int]], permutation: Permutation, shift: int) -> Mutator:
    fields = be_fields(*spans)

    def m(word: int, ctx: PaRiscContext) -> bool:
        value = (permutation(ctx.is64bit, word, fields) << shift) & 0xFFFFFFFF
        ctx.ops.append(LeftImmediateOperand(value))
        return True

    return m


def s(pos: int, length: int, width: int = 32) -> Mutator:
    field = be_field(pos, length)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(ImmediateOperand(field.read_signed(word), width))
        return True

    return m


def s_fields(spans: Sequence[Tuple[int, int]], permutation: Permutation) -> Mutator:
    fields = be_fields(*spans)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(ImmediateOperand(permutation(ctx.is64bit, word, fields), GPR_BITS))
        return True

    return m


def lse(pos: int, length: int) -> Mutator:
    """Low-sign-extended immediate: the sign bit is the field's last bit."""
    fields = be_fields((pos + length - 1, 1), (pos, length - 1))

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(ImmediateOperand(read_signed_fields(fields, word), GPR_BITS))
        return True

    return m


def r(pos: int) -> Mutator:
    field = be_field(pos, 5)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(RegisterOperand(GP_REGS[field.read(word)]))
        return True

    return m


def fr(pos: int) -> Mutator:
    field = be_field(pos, 5)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(RegisterOperand(FP_REGS[field.read(word)]))
        return True

    return m


def frsng(*spans: Tuple[int, int]) -> Mutator:
    fields = be_fields(*spans)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(RegisterOperand(FP_REGS32[read_fields(fields, word)]))
        return True

    return m


def reg(storage: RegisterStorage) -> Mutator:
    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(RegisterOperand(storage))
        return True

    return m


def sr(pos: int) -> Mutator:
    field = be_field(pos, 3)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.ops.append(RegisterOperand(SPACE_REGS[field.read(word)]))
        return True

    return m


def cf(pos: int, length: int, table: cc.ConditionTable) -> Mutator:
    if len(table) != 1 << length:
        raise ValueError(f"condition table for {pos}:{length} has {len(table)} entries")
    field = be_field(pos, length)

    def m(word: int, ctx: PaRiscContext) -> bool:
        cond = table[field.read(word)]
        if cond is None:
            return False
        if cond.kind is not cc.ConditionType.NEVER:
            ctx.cond = cond
        return True

    return m


def cf_bitsize(narrow: Mutator, wide: Mutator) -> Mutator:
    def m(word: int, ctx: PaRiscContext) -> bool:
        return wide(word, ctx) if ctx.is64bit else narrow(word, ctx)

    return m


_AM_FIELDS = be_fields((18, 1), (26, 1))
_BASE_REG_MODS = (BaseRegMod.none, BaseRegMod.ma, BaseRegMod.none, BaseRegMod.mb)


def mem(width: int, base_pos: int, spans: Sequence[Tuple[int, int]], permutation: Permutation) -> Mutator:
    """Base register plus a displacement assembled from several fields."""
    base_field = be_field(base_pos, 5)
    fields = be_fields(*spans)
    total = fields_length(fields)

    def m(word: int, ctx: PaRiscContext) -> bool:
        disp = sign_extend(permutation(ctx.is64bit, word, fields), total)
        ctx.ops.append(MemoryOperand(width, GP_REGS[base_field.read(word)], disp))
        return True

    return m


def mem_am(width: int, base_pos: int, spans: Sequence[Tuple[int, int]], permutation: Permutation) -> Mutator:
    """Like ``mem`` with base update: positive displacements modify after."""
    inner = mem(width, base_pos, spans, permutation)

    def m(word: int, ctx: PaRiscContext) -> bool:
        inner(word, ctx)
        op = ctx.ops[-1]
        assert isinstance(op, MemoryOperand)
        ctx.base_reg_mod = BaseRegMod.ma if op.offset > 0 else BaseRegMod.mb
        return True

    return m


def mem_short(width: int) -> Mutator:
    """5-bit displacement with space register and addressing-mode bits."""
    disp_field = be_field(11, 5)
    base_field = be_field(6, 5)
    space_field = be_field(16, 2)

    def m(word: int, ctx: PaRiscContext) -> bool:
        disp = disp_field.read_signed(word)
        am = read_fields(_AM_FIELDS, word)
        ctx.base_reg_mod = BaseRegMod.o if am == 1 and disp == 0 else _BASE_REG_MODS[am]
        ctx.ops.append(
            MemoryOperand(
                width,
                GP_REGS[base_field.read(word)],
                disp,
                SPACE_REGS[space_field.read(word)],
            )
        )
        return True

    return m


def mem_scaled(
    width: int,
    base_pos: int,
    space_pos: int,
    spans: Sequence[Tuple[int, int]],
    permutation: Optional[Permutation] = None,
    space_len: int = 2,
) -> Mutator:
    """Displacement counted in elements of ``width`` bits."""
    base_field = be_field(base_pos, 5)
    space_field = be_field(space_pos, space_len)
    fields = be_fields(*spans)
    total = fields_length(fields)

    def m(word: int, ctx: PaRiscContext) -> bool:
        if permutation is None:
            count = read_signed_fields(fields, word)
        else:
            count = sign_extend(permutation(ctx.is64bit, word, fields), total)
        ctx.ops.append(
            MemoryOperand(
                width,
                GP_REGS[base_field.read(word)],
                count * (width // 8),
                SPACE_REGS[space_field.read(word)],
            )
        )
        return True

    return m


def mem_indexed(width: int, base_pos: int, index_pos: int, space_pos: Optional[int] = None) -> Mutator:
    base_field = be_field(base_pos, 5)
    index_field = be_field(index_pos, 5)
    space_field = be_field(space_pos, 2) if space_pos is not None else None

    def m(word: int, ctx: PaRiscContext) -> bool:
        index = index_field.read(word)
        space = None
        if space_field is not None:
            space = SPACE_REGS[space_field.read(word)]
            am = read_fields(_AM_FIELDS, word)
            ctx.base_reg_mod = BaseRegMod.o if am == 1 and index == 0 else _BASE_REG_MODS[am]
        ctx.ops.append(IndexedOperand(width, GP_REGS[base_field.read(word)], GP_REGS[index], space))
        return True

    return m


def pc_rel(permutation: Permutation, *spans: Tuple[int, int]) -> Mutator:
    fields = be_fields(*spans)
    total = fields_length(fields)

    def m(word: int, ctx: PaRiscContext) -> bool:
        offset = sign_extend(permutation(ctx.is64bit, word, fields), total) * 4 + 8
        ctx.ops.append(AddressOperand((ctx.address + offset) & 0xFFFFFFFF))
        return True

    return m


def annul(pos: int) -> Mutator:
    field = be_field(pos, 1)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.annul = field.read(word) == 1
        return True

    return m


def cop(pos: int, length: int) -> Mutator:
    field = be_field(pos, length)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.coprocessor = field.read(word)
        return True

    return m


def z(pos: int) -> Mutator:
    field = be_field(pos, 1)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.zero = field.read(word) == 0
        return True

    return m


def se(pos: int) -> Mutator:
    field = be_field(pos, 1)

    def m(word: int, ctx: PaRiscContext) -> bool:
        ctx.sign = SignExtension.u if field.read(word) == 0 else SignExtension.s
        return True

    return m


_FP_FORMAT_FIELD = be_field(19, 2)
_FP_FORMATS: Dict[int, FpFormat] = {0: FpFormat.sgl, 1: FpFormat.dbl, 3: FpFormat.quad}


def fp_fmt(word: int, ctx: PaRiscContext) -> bool:
    fmt = _FP_FORMATS.get(_FP_FORMAT_FIELD.read(word))
    if fmt is None:
        return False
    ctx.fp_format = fmt
    return True


def eq0(value: int) -> bool:
    return value == 0


def is_fpu_coprocessor(value: int) -> bool:
    return (value & ~1) == 0


r6 = r(6)
r11 = r(11)
r27 = r(27)
fr6 = fr(6)
fr11 = fr(11)
fr27 = fr(27)
fr6_24 = frsng((6, 5), (24, 1))
fr11_19 = frsng((11, 5), (19, 1))
fr27_25 = frsng((27, 5), (25, 1))

cf16_cmpsub = cf(16, 4, cc.CMPSUB)
cf16_add = cf(16, 4, cc.ADD)
cf16_add64 = cf(16, 4, cc.ADD64)
cf16_log = cf(16, 4, cc.LOGICAL)
cf16_cmp32_t = cf(16, 3, cc.CMP32_TRUE)
cf16_cmp32_f = cf(16, 3, cc.CMP32_FALSE)
cf16_shext = cf(16, 3, cc.SHIFT_EXTRACT)
cfadd_bitsize = cf_bitsize(cf(16, 3, cc.ADD3), cf(16, 3, cc.ADD3_64))
cfadd_bitsize_neg = cf_bitsize(cf(16, 3, cc.ADD3_NEG), cf(16, 3, cc.ADD3_NEG_64))
cf27_fp = cf(27, 5, cc.FP_COMPARE)

an30 = annul(30)
disp12 = pc_rel(assemble_12, (19, 11), (31, 1))
disp16 = ((16, 2), (18, 14))
disp16a = ((16, 2), (18, 11), (31, 1))


def _mask(pos: int, length: int, *decoders: Decoder, tag: str = "") -> Decoder:
    return mask_field(be_field(pos, length), decoders, tag)


def _sparse(pos: int, length: int, default: Decoder, overrides: Dict[int, Decoder], tag: str = "") -> Decoder:
    return sparse(be_field(pos, length), default, overrides, tag)


def _select(pos: int, length: int, predicate: Callable[[int], bool], when_true: Decoder, when_false: Decoder) -> Decoder:
    return select(be_field(pos, length), predicate, when_true, when_false)


def _build_root() -> Decoder:
    invalid = instr(Opcode.invalid, iclass=InstrClass.INVALID)

    system_op = _sparse(19, 8, invalid, {
        0x00: instr(Opcode.break_, u(27, 5, 8), u(6, 13, 16), iclass=InstrClass.CALL | InstrClass.TRANSFER),
        0x20: nyi(Opcode.sync),
        0x60: nyi(Opcode.rfi),
        0x65: nyi(Opcode.rfir),
        0x6B: nyi(Opcode.ssm),
        0x73: nyi(Opcode.rsm),
        0xC3: nyi(Opcode.mtsm),
        0x85: _select(16, 2, eq0,
                      instr(Opcode.ldsid, r6, r27),
                      instr(Opcode.ldsid, sr(16), r27)),
        0xC1: instr(Opcode.mtsp, r11, sr(16)),
        0x25: nyi(Opcode.mfsp),
        0xC2: nyi(Opcode.mtctl),
        0x45: nyi(Opcode.mfctl),
    }, tag="system")

    mem_mgmt = _mask(19, 1,
        nyi(Opcode.iitlbt, "(instruction side)"),
        _sparse(18, 8, invalid, {
            0x60: nyi(Opcode.idtlbt),
            0x48: nyi(Opcode.pdtlb),
            0x49: nyi(Opcode.pdtlbe),
            0x58: nyi(Opcode.pdtlb),
            0x4A: nyi(Opcode.fdc, "(index)"),
            0xCA: nyi(Opcode.fdc, "(imm)"),
            0x4B: nyi(Opcode.fdce),
            0x4E: nyi(Opcode.pdc),
            0x4F: nyi(Opcode.fic),
            0x46: nyi(Opcode.probe),
            0xC6: nyi(Opcode.probei),
            0x47: nyi(Opcode.probe),
            0xC7: nyi(Opcode.probei),
            0x4D: nyi(Opcode.lpa),
            0x4C: nyi(Opcode.lci),
        }), tag="memMgmt")

    arith_log = _sparse(20, 6, invalid, {
        0x18: _mask(26, 1,
                    instr(Opcode.add, cf16_add, r11, r6, r27),
                    instr(Opcode.add, cf16_add64, r11, r6, r27)),
        0x38: nyi(Opcode.addo),
        0x1C: instr(Opcode.add_c, cf16_add, r11, r6, r27),
        0x3C: nyi(Opcode.addco),
        0x19: nyi(Opcode.shladd),
        0x39: nyi(Opcode.shladdo),
        0x1A: instr(Opcode.shladd, r11, u(24, 2, 8), r6, r27),
        0x3A: nyi(Opcode.shladdo),
        0x1B: nyi(Opcode.shladd),
        0x3B: nyi(Opcode.shladdo),
        0x10: nyi(Opcode.sub),
        0x30: nyi(Opcode.subo),
        0x13: nyi(Opcode.subt),
        0x33: nyi(Opcode.subto),
        0x14: instr(Opcode.sub_b, cf16_cmpsub, r11, r6, r27),
        0x34: nyi(Opcode.subbo),
        0x11: nyi(Opcode.ds),
        0x00: nyi(Opcode.andcm),
        0x08: instr(Opcode.and_, cf16_log, r11, r6, r27),
        0x09: instr(Opcode.or_, cf16_log, r11, r6, r27),
        0x0A: nyi(Opcode.xor),
        0x0E: nyi(Opcode.uxor),
        0x22: nyi(Opcode.comclr),
        0x26: nyi(Opcode.uaddcm),
        0x27: nyi(Opcode.uaddcmt),
        0x28: instr(Opcode.add_l, cf16_add, r11, r6, r27),
        0x29: nyi(Opcode.sh1addl),
        0x2A: instr(Opcode.shladd, r11, u(24, 2, 8), r6, r27),
        0x2B: nyi(Opcode.sh3addl),
        0x2E: nyi(Opcode.dcor),
        0x2F: nyi(Opcode.idcor),
    }, tag="arithLog")

    index_mem = _mask(19, 1,
        _sparse(22, 4, invalid, {
            0x0: instr(Opcode.ldb, mem_indexed(8, 6, 11, 16), r27),
            0x1: instr(Opcode.ldh, mem_indexed(16, 6, 11, 16), r27),
            0x2: instr(Opcode.ldw, mem_indexed(32, 6, 11, 16), r27),
            0x3: nyi(Opcode.ldd, "(index)"),
            0x4: nyi(Opcode.ldda, "(index)"),
            0x5: nyi(Opcode.ldcd, "(index)"),
            0x6: nyi(Opcode.ldwa, "(index)"),
            0x7: nyi(Opcode.ldcw, "(index)"),
        }),
        _mask(22, 4,
            instr(Opcode.ldb, mem_short(8), r27),
            instr(Opcode.ldh, mem_short(16), r27),
            instr(Opcode.ldw, mem_short(32), r27),
            nyi(Opcode.ldd, "(short)"),
            nyi(Opcode.ldda, "(short)"),
            nyi(Opcode.ldcd, "(short)"),
            nyi(Opcode.ldwa, "(short)"),
            nyi(Opcode.ldcw, "(short)"),
            instr(Opcode.stb, r27, mem_short(8)),
            instr(Opcode.sth, r27, mem_short(16)),
            instr(Opcode.stw, r27, mem_short(32)),
            nyi(Opcode.std, "(short)"),
            nyi(Opcode.stby, "(short)"),
            nyi(Opcode.stdby, "(short)"),
            instr(Opcode.stwa, r27, mem_short(32)),
            nyi(Opcode.stda, "(short)")),
        tag="indexMem")

    copr_w = _select(23, 3, is_fpu_coprocessor,
        _mask(19, 1,
            _mask(22, 1,
                nyi(Opcode.fldw, "(index)"),
                nyi(Opcode.fstw, "(index)")),
            _mask(22, 1,
                instr(Opcode.fldw, mem(32, 6, ((11, 5),), low_sign_ext5), fr27_25),
                instr(Opcode.fstw, fr27_25, mem(32, 6, ((11, 5),), low_sign_ext5)))),
        invalid)

    copr = _mask(21, 2,
        nyi(Opcode.fcpy, "(0C class 0)"),
        nyi(Opcode.fcnv, "(0C class 1)"),
        nyi(Opcode.fcmp, "(0C class 2)"),
        _mask(16, 3,
            nyi(Opcode.fadd),
            nyi(Opcode.fsub),
            instr(Opcode.fmpy, fp_fmt, fr6, fr11, fr27),
            nyi(Opcode.fdiv),
            invalid,
            invalid,
            invalid,
            invalid))

    float_decoder = _mask(21, 2,
        nyi(Opcode.fcpy, "(0E class 0)"),
        nyi(Opcode.fcnv, "(0E class 1)"),
        instr(Opcode.fcmp, cf27_fp, fr6_24, fr11_19),
        nyi(Opcode.fadd, "(0E class 3)"))

    imm11 = s_fields(((21, 11),), low_sign_ext11)
    subi = _mask(20, 1,
        instr(Opcode.subi, cf16_cmpsub, imm11, r6, r11),
        instr(Opcode.subi_tsv, cf16_cmpsub, imm11, r6, r11))
    addi = _mask(20, 1,
        instr(Opcode.addi, cf16_add, imm11, r6, r11),
        nyi(Opcode.addi_tsv))

    extract = _mask(19, 2,
        nyi(Opcode.shrpw, "(variable)"),
        nyi(Opcode.shrpw, "(fixed)"),
        nyi(Opcode.extrw, "(variable)"),
        instr(Opcode.extrw, cf16_shext, se(21), r6, u(22, 5, 8), u_from(32, 27, 5), r11))
    deposit = _mask(19, 2,
        nyi(Opcode.depw, "(variable)"),
        nyi(Opcode.depw, "(fixed)"),
        nyi(Opcode.depwi, "(variable)"),
        instr(Opcode.depwi, cf16_shext, z(21), s(11, 5, 8), u_from(31, 22, 5),
              u_fields(((0, 0), (27, 5)), assemble_6), r6))

    disp17 = pc_rel(assemble_17, (11, 5), (19, 11), (31, 1))
    branch = _mask(16, 3,
        _select(6, 5, eq0,
                instr(Opcode.b_l, disp17, r6, an30, iclass=TD),
                instr(Opcode.b_l, disp17, r6, an30, iclass=CALL_TD)),
        nyi(Opcode.gate),
        instr(Opcode.b_l, r11, r6, an30, iclass=CALL_TD),
        nyi(Opcode.blrpush),
        invalid,
        instr(Opcode.b_l, pc_rel(assemble_22, (6, 5), (11, 5), (19, 11), (31, 1)), reg(RP), an30,
              iclass=CALL_TD),
        instr(Opcode.bv, mem_indexed(32, 6, 11), an30, iclass=TD),
        nyi(Opcode.bve),
        tag="branch")

    ext_disp = ((11, 5), (19, 11), (31, 1))

    return _mask(0, 6,
        system_op,
        mem_mgmt,
        arith_log,
        index_mem,

        nyi(Opcode.spop),
        nyi(Opcode.diag),
        nyi(Opcode.fmpyadd),
        invalid,

        instr(Opcode.ldil, left(((11, 21),), assemble_21, 11), r6),
        copr_w,
        instr(Opcode.addil, left(((11, 21),), assemble_21, 11), r6, reg(R1)),
        _mask(19, 1,
            instr(Opcode.cstd, cop(23, 3), r27, mem_indexed(64, 6, 11, 16)),
            instr(Opcode.cstd, cop(23, 3), r27, mem_scaled(64, 6, 16, ((11, 5),)))),

        copr,
        instr(Opcode.ldo, mem(32, 6, disp16, assemble_16), r11),
        float_decoder,
        nyi(Opcode.pspec),

        # 0x10
        instr(Opcode.ldb, mem(8, 6, disp16, assemble_16), r11),
        instr(Opcode.ldh, mem(16, 6, disp16, assemble_16), r11),
        instr(Opcode.ldw, mem(32, 6, disp16, assemble_16), r11),
        instr(Opcode.ldw, mem_am(32, 6, disp16a, assemble_16a), r11),

        invalid,
        invalid,
        invalid,
        invalid,

        instr(Opcode.stb, r11, mem(8, 6, disp16, assemble_16)),
        instr(Opcode.sth, r11, mem(16, 6, disp16, assemble_16)),
        instr(Opcode.stw, r11, mem(32, 6, disp16, assemble_16)),
        instr(Opcode.stw, r11, mem_am(32, 6, disp16a, assemble_16a)),

        invalid,
        invalid,
        invalid,
        invalid,

        # 0x20
        instr(Opcode.cmpb, cf16_cmp32_t, r11, r6, disp12, an30, iclass=CTD),
        instr(Opcode.cmpib, cf16_cmp32_t, s(11, 5), r6, disp12, an30, iclass=CTD),
        instr(Opcode.cmpb, cf16_cmp32_f, r11, r6, disp12, an30, iclass=CTD),
        instr(Opcode.cmpib, cf16_cmp32_f, s(11, 5), r6, disp12, an30, iclass=CTD),

        nyi(Opcode.comiclr),
        subi,
        nyi(Opcode.fmpysub),
        invalid,

        instr(Opcode.addb, cf(16, 3, cc.ADD3), r11, r6, disp12, an30, iclass=CTD),
        instr(Opcode.addib, cfadd_bitsize, lse(11, 5), r6, disp12, an30, iclass=CTD),
        instr(Opcode.addb, cf(16, 3, cc.ADD3_NEG), r11, r6, disp12, an30, iclass=CTD),
        instr(Opcode.addib, cfadd_bitsize_neg, lse(11, 5), r6, disp12, an30, iclass=CTD),

        nyi(Opcode.addi_tc),
        addi,
        invalid,
        invalid,

        # 0x30
        nyi(Opcode.bvb),
        nyi(Opcode.bb),
        instr(Opcode.movb, cf16_shext, r11, r6, disp12, an30, iclass=CTD),
        instr(Opcode.movib, cf16_shext, lse(11, 5), r6, disp12, an30, iclass=CTD),

        extract,
        deposit,
        invalid,
        invalid,

        instr(Opcode.be, mem_scaled(32, 6, 16, ext_disp, assemble_17, space_len=3), an30, iclass=TD),
        instr(Opcode.be_l, mem_scaled(32, 6, 16, ext_disp, assemble_17, space_len=3), an30, iclass=CALL_TD),
        branch,
        invalid,

        invalid,
        invalid,
        invalid,
        invalid,
        tag="root")


ROOT: Decoder = _build_root()


class PaRiscDisassembler(Disassembler[PaRiscInstruction]):
    root = ROOT

    def __init__(
        self,
        reader: ImageReader,
        is64bit: bool = False,
        diagnostics: Optional[DiagnosticSink] = None,
        trace: bool = False,
    ) -> None:
        ctx = PaRiscContext(
            diagnostics=diagnostics if diagnostics is not None else NullDiagnostics(),
            is64bit=is64bit,
        )
        super().__init__(reader, ctx, trace)

    def read_word(self) -> int:
        return self.reader.read_be_u32()
