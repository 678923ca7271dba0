from __future__ import annotations

from typing import Callable, ClassVar, Dict, cast

from ...decoding.bitfield import sign_extend
from ...machine import (
    ImmediateOperand,
    InstrClass,
    MachineInstruction,
    MemoryOperand,
    RegisterOperand,
    RegisterStorage,
)
from ...rewriter import Rewriter, Routine
from ...rtl import ast
from ...rtl.emitter import (
    and_,
    comp,
    const,
    conv,
    eq,
    fbin,
    fneg,
    ge,
    gt,
    iadd,
    intrinsic,
    isub,
    le,
    lnot,
    lt,
    ne,
    or_,
    sar,
    sdiv,
    sext,
    shl,
    shr,
    slice_,
    smod,
    smul,
    udiv,
    uge,
    ult,
    umod,
    umul,
    xor,
    zext,
)
from .instruction import Opcode
from .registers import FCSR, FP_REGS, HI, HI64, LO, LO64, RA_NUMBER

Compare = Callable[[ast.Expr, ast.Expr], ast.Expr]


class MipsRewriter(Rewriter[MachineInstruction]):
    """MIPS32 rewriter; ``Mips64Rewriter`` widens the general registers.

    Word operations work on the low 32 bits of their sources and sign-extend
    the result to the register width, so the same routines serve both modes.
    """

    arch_name = "MIPS"
    invalid_opcode = Opcode.illegal
    zero_register = 0
    word_bits: ClassVar[int] = 32
    hi_reg: ClassVar[RegisterStorage] = HI
    lo_reg: ClassVar[RegisterStorage] = LO

    def op(self, instr: MachineInstruction, i: int) -> ast.Expr:
        return self.rewrite_operand(instr.operands[i])

    def word(self, value: ast.Expr) -> ast.Expr:
        if isinstance(value, ast.Const):
            return const(value.value, 32)
        return slice_(value, 0, 32)

    def widen(self, value: ast.Expr) -> ast.Expr:
        return sext(value, self.word_bits)

    def wconst(self, value: int) -> ast.Const:
        return const(value, self.word_bits)

    def is_return_register(self, reg: RegisterStorage) -> bool:
        return reg.bank == "gpr" and reg.number == RA_NUMBER

    def link_address(self, instr: MachineInstruction) -> ast.Addr:
        return ast.Addr((instr.address + 8) & ((1 << self.word_bits) - 1), self.word_bits)

    def dpair(self, op: object) -> ast.Reg:
        """Double-precision value held in an even/odd FPU register pair."""
        reg = cast(RegisterOperand, op).reg
        return self.binder.ensure_sequence(FP_REGS[reg.number + 1], FP_REGS[reg.number])

    def fpr(self, op: object) -> ast.Reg:
        return self.binder.ensure_register(cast(RegisterOperand, op).reg)

    def hi_lo(self) -> ast.Reg:
        return self.binder.ensure_sequence(self.hi_reg, self.lo_reg)

    def read_hi_lo(self) -> ast.Expr:
        """The 64-bit accumulator formed by the low words of hi and lo."""
        if self.word_bits == 32:
            return self.hi_lo()
        hi = zext(slice_(self.binder.ensure_register(self.hi_reg), 0, 32), 64)
        lo = zext(slice_(self.binder.ensure_register(self.lo_reg), 0, 32), 64)
        return or_(shl(hi, const(32, 64)), lo)

    def write_hi_lo(self, value: ast.Expr) -> None:
        if self.word_bits == 32:
            self.m.assign(self.hi_lo(), value)
            return
        # one assignment so both halves read the operands before either is written
        hi = zext(sext(slice_(value, 32, 32), 64), 128)
        lo = zext(sext(slice_(value, 0, 32), 64), 128)
        self.m.assign(self.hi_lo(), or_(shl(hi, const(64, 128)), lo))

    def fp_condition(self, cc: int = 0) -> ast.Expr:
        if cc == 0:
            return self.binder.ensure_flag_group(FCSR, "C")
        return intrinsic("__fp_condition", 1, const(cc, 8))

    def trap(self) -> ast.Stmt:
        return ast.SideEffect(intrinsic("__trap", 0))


class Mips64Rewriter(MipsRewriter):
    arch_name = "MIPS64"
    word_bits = 64
    address_bits = 64
    hi_reg = HI64
    lo_reg = LO64


def _binary(fn: Callable[[ast.Expr, ast.Expr], ast.Expr]) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.assign(instr.operands[0], fn(rw.op(instr, 1), rw.op(instr, 2)))

    return rewrite


def _word_binary(fn: Callable[[ast.Expr, ast.Expr], ast.Expr]) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        value = fn(rw.word(rw.op(instr, 1)), rw.word(rw.op(instr, 2)))
        rw.assign(instr.operands[0], rw.widen(value))

    return rewrite


def rewrite_nor(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.assign(instr.operands[0], comp(or_(rw.op(instr, 1), rw.op(instr, 2))))


def _set_if(fn: Compare) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.assign(instr.operands[0], zext(fn(rw.op(instr, 1), rw.op(instr, 2)), rw.word_bits))

    return rewrite


def _shift(fn: Callable[[ast.Expr, ast.Expr], ast.Expr]) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        amount = instr.operands[2]
        if isinstance(amount, ImmediateOperand):
            count: ast.Expr = const(amount.value, 32)
        else:
            count = and_(rw.word(rw.op(instr, 2)), const(0x1F, 32))
        rw.assign(instr.operands[0], rw.widen(fn(rw.word(rw.op(instr, 1)), count)))

    return rewrite


def _dshift(fn: Callable[[ast.Expr, ast.Expr], ast.Expr], extra: int = 0) -> Routine:
    """Doubleword shifts; the ``*32`` forms add 32 to the encoded amount."""

    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        amount = instr.operands[2]
        if isinstance(amount, ImmediateOperand):
            count: ast.Expr = const(amount.value + extra, 64)
        else:
            count = and_(rw.op(instr, 2), const(0x3F, 64))
        rw.assign(instr.operands[0], fn(rw.op(instr, 1), count))

    return rewrite


def rewrite_lui(rw: MipsRewriter, instr: MachineInstruction) -> None:
    imm = cast(ImmediateOperand, instr.operands[1])
    rw.assign(instr.operands[0], rw.wconst(sign_extend(imm.value << 16, 32)))


def _move_if(fn: Compare) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        dst = cast(RegisterOperand, instr.operands[0])
        if rw.is_zero_register(dst.reg):
            rw.m.nop()
            return
        test = fn(rw.op(instr, 2), rw.wconst(0))
        rw.m.if_(test, [ast.Assign(rw.binder.ensure_register(dst.reg), rw.op(instr, 1))])

    return rewrite


def _move_on_fp(taken_when_set: bool) -> Routine:
    """movt/movf: conditional move on an FPU condition code."""

    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        dst = cast(RegisterOperand, instr.operands[0])
        if rw.is_zero_register(dst.reg):
            rw.m.nop()
            return
        flag = rw.fp_condition(cast(ImmediateOperand, instr.operands[2]).value)
        test = flag if taken_when_set else lnot(flag)
        rw.m.if_(test, [ast.Assign(rw.binder.ensure_register(dst.reg), rw.op(instr, 1))])

    return rewrite


def _sign_extend(bits: int) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.assign(instr.operands[0], sext(slice_(rw.op(instr, 1), 0, bits), rw.word_bits))

    return rewrite


def _count_leading(name: str) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.assign(instr.operands[0], rw.widen(intrinsic(name, 32, rw.word(rw.op(instr, 1)))))

    return rewrite


def rewrite_ext(rw: MipsRewriter, instr: MachineInstruction) -> None:
    pos = cast(ImmediateOperand, instr.operands[2]).value
    size = cast(ImmediateOperand, instr.operands[3]).value
    src = rw.word(rw.op(instr, 1))
    if pos:
        src = shr(src, const(pos, 32))
    rw.assign(instr.operands[0], rw.widen(and_(src, const((1 << size) - 1, 32))))


def rewrite_ins(rw: MipsRewriter, instr: MachineInstruction) -> None:
    pos = cast(ImmediateOperand, instr.operands[2]).value
    size = cast(ImmediateOperand, instr.operands[3]).value
    field = (1 << size) - 1
    inserted = and_(rw.word(rw.op(instr, 1)), const(field, 32))
    if pos:
        inserted = shl(inserted, const(pos, 32))
    kept = and_(rw.word(rw.op(instr, 0)), const(~(field << pos), 32))
    rw.assign(instr.operands[0], rw.widen(or_(kept, inserted)))


def _multiply(signed: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        a, b = rw.word(rw.op(instr, 0)), rw.word(rw.op(instr, 1))
        rw.write_hi_lo(smul(a, b, 64) if signed else umul(a, b, 64))

    return rewrite


def _dmultiply(signed: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        a, b = rw.op(instr, 0), rw.op(instr, 1)
        rw.m.assign(rw.hi_lo(), smul(a, b, 128) if signed else umul(a, b, 128))

    return rewrite


def _divide(signed: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        a, b = rw.word(rw.op(instr, 0)), rw.word(rw.op(instr, 1))
        lo = rw.binder.ensure_register(rw.lo_reg)
        hi = rw.binder.ensure_register(rw.hi_reg)
        rw.m.assign(lo, rw.widen(sdiv(a, b) if signed else udiv(a, b)))
        rw.m.assign(hi, rw.widen(smod(a, b) if signed else umod(a, b)))

    return rewrite


def _ddivide(signed: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        a, b = rw.op(instr, 0), rw.op(instr, 1)
        lo = rw.binder.ensure_register(rw.lo_reg)
        hi = rw.binder.ensure_register(rw.hi_reg)
        rw.m.assign(lo, sdiv(a, b) if signed else udiv(a, b))
        rw.m.assign(hi, smod(a, b) if signed else umod(a, b))

    return rewrite


def rewrite_mul(rw: MipsRewriter, instr: MachineInstruction) -> None:
    product = smul(rw.word(rw.op(instr, 1)), rw.word(rw.op(instr, 2)), 32)
    rw.assign(instr.operands[0], rw.widen(product))


def _accumulate(fn: Callable[[ast.Expr, ast.Expr], ast.Expr], signed: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        a, b = rw.word(rw.op(instr, 0)), rw.word(rw.op(instr, 1))
        product = smul(a, b, 64) if signed else umul(a, b, 64)
        rw.write_hi_lo(fn(rw.read_hi_lo(), product))

    return rewrite


def rewrite_mfhi(rw: MipsRewriter, instr: MachineInstruction) -> None:
    src = rw.hi_reg if instr.opcode is Opcode.mfhi else rw.lo_reg
    rw.assign(instr.operands[0], rw.binder.ensure_register(src))


def rewrite_mthi(rw: MipsRewriter, instr: MachineInstruction) -> None:
    dst = rw.hi_reg if instr.opcode is Opcode.mthi else rw.lo_reg
    rw.m.assign(rw.binder.ensure_register(dst), rw.op(instr, 0))


def _load(bits: int, signed: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        value = rw.op(instr, 1)
        if bits < rw.word_bits:
            value = sext(value, rw.word_bits) if signed else zext(value, rw.word_bits)
        rw.assign(instr.operands[0], value)

    return rewrite


def rewrite_store(rw: MipsRewriter, instr: MachineInstruction) -> None:
    dst = cast(ast.Mem, rw.op(instr, 1))
    value = rw.op(instr, 0)
    if isinstance(value, ast.Const):
        value = const(value.value, dst.size)
    else:
        value = slice_(value, 0, dst.size)
    rw.m.store(dst, value)


def _unaligned_load(name: str) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.assign(instr.operands[0], intrinsic(name, rw.word_bits, rw.op(instr, 0), rw.op(instr, 1)))

    return rewrite


def _unaligned_store(name: str) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        dst = cast(ast.Mem, rw.op(instr, 1))
        rw.m.store(dst, intrinsic(name, dst.size, dst, rw.op(instr, 0)))

    return rewrite


def _load_linked(bits: int) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        value = intrinsic(f"__load_linked_{bits}", rw.word_bits, rw.op(instr, 1))
        rw.assign(instr.operands[0], value)

    return rewrite


def _store_conditional(bits: int) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        result = intrinsic(f"__store_conditional_{bits}", rw.word_bits, rw.op(instr, 1), rw.op(instr, 0))
        if not rw.assign(instr.operands[0], result):
            rw.m.side_effect(result)

    return rewrite


def rewrite_lwc1(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.fpr(instr.operands[0]), rw.op(instr, 1))


def rewrite_swc1(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.store(cast(ast.Mem, rw.op(instr, 1)), rw.fpr(instr.operands[0]))


def rewrite_ldc1(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.dpair(instr.operands[0]), rw.op(instr, 1))


def rewrite_sdc1(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.store(cast(ast.Mem, rw.op(instr, 1)), rw.dpair(instr.operands[0]))


def rewrite_j(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.goto(rw.target(instr.operands[0]))


def rewrite_jal(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.call(rw.target(instr.operands[0]))


def rewrite_jr(rw: MipsRewriter, instr: MachineInstruction) -> None:
    reg = cast(RegisterOperand, instr.operands[0]).reg
    if rw.is_return_register(reg):
        rw.m.ret()
        return
    rw.m.goto(rw.reg(reg))


def rewrite_jalr(rw: MipsRewriter, instr: MachineInstruction) -> None:
    link = cast(RegisterOperand, instr.operands[0]).reg
    target = rw.op(instr, 1)
    if rw.is_return_register(link):
        rw.m.call(target)
        return
    rw.iclass = InstrClass.TRANSFER | InstrClass.DELAY
    if not rw.is_zero_register(link):
        rw.m.assign(rw.binder.ensure_register(link), rw.link_address(instr))
    rw.m.goto(target)


def _branch(fn: Compare) -> Routine:
    """beq/bne family; ``beq r, r`` is an unconditional branch."""

    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        target = rw.target(instr.operands[2])
        a, b = instr.operands[0], instr.operands[1]
        if a == b and fn is eq:
            rw.iclass = (rw.iclass & ~InstrClass.CONDITIONAL) | InstrClass.TRANSFER
            rw.m.goto(target)
            return
        rw.m.branch(fn(rw.op(instr, 0), rw.op(instr, 1)), target)

    return rewrite


def _branch0(fn: Compare) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.m.branch(fn(rw.op(instr, 0), rw.wconst(0)), rw.target(instr.operands[1]))

    return rewrite


def _branch_and_link(fn: Compare) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        target = rw.target(instr.operands[1])
        src = cast(RegisterOperand, instr.operands[0]).reg
        if fn is ge and rw.is_zero_register(src):
            rw.m.call(target)
            return
        rw.m.if_(fn(rw.op(instr, 0), rw.wconst(0)), [ast.Call(target)])

    return rewrite


def _branch_fp(taken_when_set: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        flag = rw.fp_condition()
        rw.m.branch(flag if taken_when_set else lnot(flag), rw.target(instr.operands[0]))

    return rewrite


def _trap(fn: Compare) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.m.if_(fn(rw.op(instr, 0), rw.op(instr, 1)), [rw.trap()])

    return rewrite


def _system_call(name: str) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.m.side_effect(intrinsic(name, 0, *(rw.op(instr, i) for i in range(len(instr.operands)))))

    return rewrite


def _address_hint(name: str) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        ea = rw.effective_address(cast(MemoryOperand, instr.operands[1]))
        rw.m.side_effect(intrinsic(name, 0, rw.op(instr, 0), ea))

    return rewrite


def rewrite_mfc0(rw: MipsRewriter, instr: MachineInstruction) -> None:
    cpr = rw.binder.ensure_register(cast(RegisterOperand, instr.operands[1]).reg)
    rw.assign(instr.operands[0], intrinsic("__read_cpr0", rw.word_bits, cpr))


def rewrite_mtc0(rw: MipsRewriter, instr: MachineInstruction) -> None:
    cpr = rw.binder.ensure_register(cast(RegisterOperand, instr.operands[1]).reg)
    rw.m.side_effect(intrinsic("__write_cpr0", 0, cpr, rw.op(instr, 0)))


def rewrite_eret(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.side_effect(intrinsic("__eret", 0))
    rw.m.ret()


def rewrite_rdhwr(rw: MipsRewriter, instr: MachineInstruction) -> None:
    hwr = cast(ImmediateOperand, instr.operands[1])
    rw.assign(instr.operands[0], intrinsic("__read_hardware_register", rw.word_bits, const(hwr.value, 8)))


def _fpu_single(op: ast.BinaryOp) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.m.assign(rw.fpr(instr.operands[0]), fbin(op, rw.fpr(instr.operands[1]), rw.fpr(instr.operands[2])))

    return rewrite


def _fpu_double(op: ast.BinaryOp) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        rw.m.assign(rw.dpair(instr.operands[0]), fbin(op, rw.dpair(instr.operands[1]), rw.dpair(instr.operands[2])))

    return rewrite


def _fpu_fused(op: ast.BinaryOp, negate: bool, double: bool) -> Routine:
    """``fd = fs * ft +/- fr``, negated for the ``nmadd``/``nmsub`` forms."""

    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        read = rw.dpair if double else rw.fpr
        fr, fs, ft = (read(instr.operands[i]) for i in (1, 2, 3))
        value = fbin(op, fbin("fmul", fs, ft), fr)
        rw.m.assign(read(instr.operands[0]), fneg(value) if negate else value)

    return rewrite


def rewrite_mov_s(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.fpr(instr.operands[0]), rw.fpr(instr.operands[1]))


def rewrite_mov_d(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.dpair(instr.operands[0]), rw.dpair(instr.operands[1]))


def _fpu_compare(op: ast.BinaryOp, double: bool) -> Routine:
    def rewrite(rw: MipsRewriter, instr: MachineInstruction) -> None:
        read = rw.dpair if double else rw.fpr
        rw.m.assign(rw.binder.ensure_flag_group(FCSR, "C"), fbin(op, read(instr.operands[0]), read(instr.operands[1])))

    return rewrite


def rewrite_cvt_from_double(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.fpr(instr.operands[0]), conv(rw.dpair(instr.operands[1]), 32))


def rewrite_cvt_to_double(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.dpair(instr.operands[0]), conv(rw.fpr(instr.operands[1]), 64))


def rewrite_cvt_d_l(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.dpair(instr.operands[0]), conv(rw.dpair(instr.operands[1]), 64))


def rewrite_trunc_l_d(rw: MipsRewriter, instr: MachineInstruction) -> None:
    truncated = intrinsic("__ftrunc", 64, rw.dpair(instr.operands[1]))
    rw.m.assign(rw.dpair(instr.operands[0]), conv(truncated, 64))


def rewrite_mfc1(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.assign(instr.operands[0], rw.widen(rw.fpr(instr.operands[1])))


def rewrite_mtc1(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.assign(rw.fpr(instr.operands[1]), rw.word(rw.op(instr, 0)))


def rewrite_nop(rw: MipsRewriter, instr: MachineInstruction) -> None:
    rw.m.nop()


ROUTINES: Dict[Opcode, Routine] = {
    Opcode.add: _word_binary(iadd),
    Opcode.addi: _word_binary(iadd),
    Opcode.addiu: _word_binary(iadd),
    Opcode.addu: _word_binary(iadd),
    Opcode.sub: _word_binary(isub),
    Opcode.subu: _word_binary(isub),
    Opcode.dadd: _binary(iadd),
    Opcode.daddi: _binary(iadd),
    Opcode.daddiu: _binary(iadd),
    Opcode.daddu: _binary(iadd),
    Opcode.dsub: _binary(isub),
    Opcode.dsubu: _binary(isub),
    Opcode.and_: _binary(and_),
    Opcode.andi: _binary(and_),
    Opcode.or_: _binary(or_),
    Opcode.ori: _binary(or_),
    Opcode.xor: _binary(xor),
    Opcode.xori: _binary(xor),
    Opcode.nor: rewrite_nor,
    Opcode.slt: _set_if(lt),
    Opcode.slti: _set_if(lt),
    Opcode.sltiu: _set_if(ult),
    Opcode.sltu: _set_if(ult),
    Opcode.sll: _shift(shl),
    Opcode.sllv: _shift(shl),
    Opcode.srl: _shift(shr),
    Opcode.srlv: _shift(shr),
    Opcode.sra: _shift(sar),
    Opcode.srav: _shift(sar),
    Opcode.dsll: _dshift(shl),
    Opcode.dsll32: _dshift(shl, 32),
    Opcode.dsllv: _dshift(shl),
    Opcode.dsrl: _dshift(shr),
    Opcode.dsrl32: _dshift(shr, 32),
    Opcode.dsrlv: _dshift(shr),
    Opcode.dsra: _dshift(sar),
    Opcode.dsra32: _dshift(sar, 32),
    Opcode.dsrav: _dshift(sar),
    Opcode.lui: rewrite_lui,
    Opcode.movz: _move_if(eq),
    Opcode.movn: _move_if(ne),
    Opcode.movf: _move_on_fp(False),
    Opcode.movt: _move_on_fp(True),
    Opcode.seb: _sign_extend(8),
    Opcode.seh: _sign_extend(16),
    Opcode.clz: _count_leading("__count_leading_zeros"),
    Opcode.clo: _count_leading("__count_leading_ones"),
    Opcode.ext: rewrite_ext,
    Opcode.ins: rewrite_ins,
    Opcode.mult: _multiply(True),
    Opcode.multu: _multiply(False),
    Opcode.dmult: _dmultiply(True),
    Opcode.dmultu: _dmultiply(False),
    Opcode.div: _divide(True),
    Opcode.divu: _divide(False),
    Opcode.ddiv: _ddivide(True),
    Opcode.ddivu: _ddivide(False),
    Opcode.mul: rewrite_mul,
    Opcode.madd: _accumulate(iadd, True),
    Opcode.maddu: _accumulate(iadd, False),
    Opcode.msub: _accumulate(isub, True),
    Opcode.msubu: _accumulate(isub, False),
    Opcode.mfhi: rewrite_mfhi,
    Opcode.mflo: rewrite_mfhi,
    Opcode.mthi: rewrite_mthi,
    Opcode.mtlo: rewrite_mthi,
    Opcode.lb: _load(8, True),
    Opcode.lbu: _load(8, False),
    Opcode.lh: _load(16, True),
    Opcode.lhu: _load(16, False),
    Opcode.lw: _load(32, True),
    Opcode.lwu: _load(32, False),
    Opcode.ld: _load(64, True),
    Opcode.sb: rewrite_store,
    Opcode.sh: rewrite_store,
    Opcode.sw: rewrite_store,
    Opcode.sd: rewrite_store,
    Opcode.lwl: _unaligned_load("__lwl"),
    Opcode.lwr: _unaligned_load("__lwr"),
    Opcode.ldl: _unaligned_load("__ldl"),
    Opcode.ldr: _unaligned_load("__ldr"),
    Opcode.swl: _unaligned_store("__swl"),
    Opcode.swr: _unaligned_store("__swr"),
    Opcode.sdl: _unaligned_store("__sdl"),
    Opcode.sdr: _unaligned_store("__sdr"),
    Opcode.ll: _load_linked(32),
    Opcode.lld: _load_linked(64),
    Opcode.sc: _store_conditional(32),
    Opcode.scd: _store_conditional(64),
    Opcode.lwc1: rewrite_lwc1,
    Opcode.swc1: rewrite_swc1,
    Opcode.ldc1: rewrite_ldc1,
    Opcode.sdc1: rewrite_sdc1,
    Opcode.j: rewrite_j,
    Opcode.jal: rewrite_jal,
    Opcode.jr: rewrite_jr,
    Opcode.jalr: rewrite_jalr,
    Opcode.beq: _branch(eq),
    Opcode.beql: _branch(eq),
    Opcode.bne: _branch(ne),
    Opcode.bnel: _branch(ne),
    Opcode.blez: _branch0(le),
    Opcode.blezl: _branch0(le),
    Opcode.bgtz: _branch0(gt),
    Opcode.bgtzl: _branch0(gt),
    Opcode.bltz: _branch0(lt),
    Opcode.bltzl: _branch0(lt),
    Opcode.bgez: _branch0(ge),
    Opcode.bgezl: _branch0(ge),
    Opcode.bltzal: _branch_and_link(lt),
    Opcode.bltzall: _branch_and_link(lt),
    Opcode.bgezal: _branch_and_link(ge),
    Opcode.bgezall: _branch_and_link(ge),
    Opcode.bc1f: _branch_fp(False),
    Opcode.bc1fl: _branch_fp(False),
    Opcode.bc1t: _branch_fp(True),
    Opcode.bc1tl: _branch_fp(True),
    Opcode.teq: _trap(eq),
    Opcode.teqi: _trap(eq),
    Opcode.tne: _trap(ne),
    Opcode.tnei: _trap(ne),
    Opcode.tlt: _trap(lt),
    Opcode.tlti: _trap(lt),
    Opcode.tltu: _trap(ult),
    Opcode.tltiu: _trap(ult),
    Opcode.tge: _trap(ge),
    Opcode.tgei: _trap(ge),
    Opcode.tgeu: _trap(uge),
    Opcode.tgeiu: _trap(uge),
    Opcode.syscall: _system_call("__syscall"),
    Opcode.break_: _system_call("__break"),
    Opcode.sdbbp: _system_call("__sdbbp"),
    Opcode.sync: _system_call("__sync"),
    Opcode.cache: _address_hint("__cache"),
    Opcode.pref: _address_hint("__prefetch"),
    Opcode.mfc0: rewrite_mfc0,
    Opcode.mtc0: rewrite_mtc0,
    Opcode.eret: rewrite_eret,
    Opcode.rdhwr: rewrite_rdhwr,
    Opcode.add_s: _fpu_single("fadd"),
    Opcode.sub_s: _fpu_single("fsub"),
    Opcode.mul_s: _fpu_single("fmul"),
    Opcode.div_s: _fpu_single("fdiv"),
    Opcode.add_d: _fpu_double("fadd"),
    Opcode.sub_d: _fpu_double("fsub"),
    Opcode.mul_d: _fpu_double("fmul"),
    Opcode.div_d: _fpu_double("fdiv"),
    Opcode.madd_s: _fpu_fused("fadd", False, False),
    Opcode.madd_d: _fpu_fused("fadd", False, True),
    Opcode.msub_s: _fpu_fused("fsub", False, False),
    Opcode.msub_d: _fpu_fused("fsub", False, True),
    Opcode.nmadd_s: _fpu_fused("fadd", True, False),
    Opcode.nmadd_d: _fpu_fused("fadd", True, True),
    Opcode.nmsub_s: _fpu_fused("fsub", True, False),
    Opcode.nmsub_d: _fpu_fused("fsub", True, True),
    Opcode.mov_s: rewrite_mov_s,
    Opcode.mov_d: rewrite_mov_d,
    Opcode.c_eq_s: _fpu_compare("feq", False),
    Opcode.c_lt_s: _fpu_compare("flt", False),
    Opcode.c_le_s: _fpu_compare("fle", False),
    Opcode.c_eq_d: _fpu_compare("feq", True),
    Opcode.c_lt_d: _fpu_compare("flt", True),
    Opcode.c_le_d: _fpu_compare("fle", True),
    Opcode.cvt_s_d: rewrite_cvt_from_double,
    Opcode.cvt_w_d: rewrite_cvt_from_double,
    Opcode.cvt_d_s: rewrite_cvt_to_double,
    Opcode.cvt_d_w: rewrite_cvt_to_double,
    Opcode.cvt_d_l: rewrite_cvt_d_l,
    Opcode.trunc_l_d: rewrite_trunc_l_d,
    Opcode.mfc1: rewrite_mfc1,
    Opcode.mtc1: rewrite_mtc1,
    Opcode.cfc1: rewrite_mfc1,
    Opcode.ctc1: rewrite_mtc1,
    Opcode.nop: rewrite_nop,
}

MipsRewriter.routines = ROUTINES
