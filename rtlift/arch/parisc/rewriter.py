from __future__ import annotations

from typing import Callable, Dict, Optional, cast

from ...machine import (
    ImmediateOperand,
    IndexedOperand,
    InstrClass,
    MemoryOperand,
    Operand,
    RegisterOperand,
)
from ...rewriter import Rewriter, Routine
from ...rtl import ast
from ...rtl.emitter import (
    and_,
    comp,
    cond,
    cond_code,
    const,
    eq,
    fbin,
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
    sext,
    shl,
    shr,
    slice_,
    uge,
    ugt,
    ule,
    ult,
    zext,
)
from ...rtl.validate import expr_size
from .conditions import Condition, ConditionType
from .instruction import BaseRegMod, Opcode, PaRiscInstruction, SignExtension
from .registers import FPSR, PSW, R31, RP

CT = ConditionType
TD = InstrClass.TRANSFER | InstrClass.DELAY

_COMPARE: Dict[ConditionType, Callable[[ast.Expr, ast.Expr], ast.Expr]] = {
    CT.EQ: eq,
    CT.NE: ne,
    CT.LT: lt,
    CT.GE: ge,
    CT.LE: le,
    CT.GT: gt,
    CT.ULT: ult,
    CT.UGE: uge,
    CT.ULE: ule,
    CT.UGT: ugt,
}

_FLAG_CONDITIONS: Dict[ConditionType, ast.CondKind] = {
    CT.SV: "SV",
    CT.NSV: "NSV",
    CT.UV: "UV",
    CT.NUV: "NUV",
    CT.ZNV: "ZNV",
    CT.VNZ: "VNZ",
}

_FP_SIMPLE = {"=": "feq", "<": "flt", "<=": "fle"}


class PaRiscRewriter(Rewriter[PaRiscInstruction]):
    arch_name = "PA-RISC"
    invalid_opcode = Opcode.invalid
    zero_register = 0

    def carry(self) -> ast.FlagGroup:
        return self.binder.ensure_flag_group(PSW, "C")

    def skip_target(self, instr: PaRiscInstruction) -> ast.Addr:
        return ast.Addr((instr.address + 8) & 0xFFFFFFFF)

    def result_condition(self, condition: Condition, result: ast.Expr) -> ast.Expr:
        """Condition evaluated on the value an instruction produced."""
        kind = condition.kind
        if kind is CT.TR:
            return const(1, 1)
        if kind in _FLAG_CONDITIONS:
            return cond_code(_FLAG_CONDITIONS[kind], result)
        if kind in (CT.ODD, CT.EVEN):
            low = and_(result, const(1, expr_size(result)))
            return ne(low, const(0, expr_size(result))) if kind is CT.ODD else eq(low, const(0, expr_size(result)))
        if kind in _COMPARE:
            return _COMPARE[kind](result, const(0, expr_size(result)))
        raise NotImplementedError(f"Condition {condition.display!r}")

    def compare_condition(self, condition: Condition, a: ast.Expr, b: ast.Expr) -> ast.Expr:
        kind = condition.kind
        if kind in _COMPARE:
            return _COMPARE[kind](a, b)
        return self.result_condition(condition, isub(a, b))

    def skip_next_if(self, instr: PaRiscInstruction, condition: ast.Expr) -> None:
        self.iclass = InstrClass.CONDITIONAL_TRANSFER
        self.m.branch(condition, self.skip_target(instr))

    def mark_annul(self, instr: PaRiscInstruction) -> None:
        if instr.annul:
            self.iclass |= InstrClass.ANNUL

    def narrow(self, value: ast.Expr, width: int) -> ast.Expr:
        if isinstance(value, ast.Const):
            return const(value.value, width)
        return slice_(value, 0, width)

    def write_result(
        self,
        instr: PaRiscInstruction,
        dst: Operand,
        value: ast.Expr,
        carry: bool = False,
        compare: Optional[tuple] = None,
    ) -> ast.Expr:
        """Assign ``value`` to ``dst`` then emit carry update and conditional skip.

        ``compare`` holds the operand pair for compare-style conditions; when
        the destination is one of them the condition is evaluated on the result.
        """
        stored = self.assign(dst, value)
        result = self.rewrite_operand(dst) if stored else value
        if carry:
            self.m.assign(self.carry(), cond(result, 1))
        if instr.cond is not None:
            if compare is not None and not (stored and any(_aliases(e, result) for e in compare)):
                test = self.compare_condition(instr.cond, *compare)
            else:
                test = self.result_condition(instr.cond, result)
            self.skip_next_if(instr, test)
        return result

    def memory_access(
        self, instr: PaRiscInstruction, op: Operand, access: Callable[[ast.Mem], None]
    ) -> None:
        """Perform ``access`` and honor the ``ma``/``mb`` base update completers."""
        assert isinstance(op, (MemoryOperand, IndexedOperand))
        mod = instr.base_reg_mod
        if mod not in (BaseRegMod.ma, BaseRegMod.mb) or self.is_zero_register(op.base):
            access(ast.Mem(self.effective_address(op), op.width))
            return
        base = self.binder.ensure_register(op.base)
        updated = self.effective_address(op)
        if mod is BaseRegMod.mb:
            self.m.assign(base, updated)
            access(ast.Mem(base, op.width))
        else:
            access(ast.Mem(base, op.width))
            self.m.assign(base, updated)


def _aliases(a: ast.Expr, b: ast.Expr) -> bool:
    return isinstance(a, ast.Reg) and a == b


def _rr(rw: PaRiscRewriter, instr: PaRiscInstruction, i: int) -> ast.Expr:
    return rw.rewrite_operand(instr.operands[i])


def rewrite_add(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    a, b = _rr(rw, instr, 0), _rr(rw, instr, 1)
    value = iadd(a, b)
    if instr.opcode is Opcode.add_c:
        value = iadd(value, zext(rw.carry(), 32))
    rw.write_result(instr, instr.operands[2], value, carry=instr.opcode is not Opcode.add_l)


def rewrite_addi(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    imm, src = _rr(rw, instr, 0), _rr(rw, instr, 1)
    rw.write_result(instr, instr.operands[2], iadd(src, imm), carry=True)


def rewrite_sub_b(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    a, b = _rr(rw, instr, 0), _rr(rw, instr, 1)
    value = isub(isub(a, b), zext(lnot(rw.carry()), 32))
    rw.write_result(instr, instr.operands[2], value, carry=True, compare=(a, b))


def rewrite_subi(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    imm, src = _rr(rw, instr, 0), _rr(rw, instr, 1)
    result = rw.write_result(instr, instr.operands[2], isub(imm, src), carry=True, compare=(imm, src))
    if instr.opcode is Opcode.subi_tsv:
        rw.m.if_(cond_code("SV", result), [ast.SideEffect(intrinsic("__trap", 0))])


def rewrite_logical(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    a, b = _rr(rw, instr, 0), _rr(rw, instr, 1)
    value = and_(a, b) if instr.opcode is Opcode.and_ else or_(a, b)
    rw.write_result(instr, instr.operands[2], value)


def rewrite_shladd(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    a, b = _rr(rw, instr, 0), _rr(rw, instr, 2)
    sa = cast(ImmediateOperand, instr.operands[1]).value
    value = iadd(shl(a, const(sa, 32)), b) if sa else iadd(a, b)
    rw.write_result(instr, instr.operands[3], value)


def rewrite_ldil(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    rw.assign(instr.operands[1], _rr(rw, instr, 0))


def rewrite_addil(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    rw.assign(instr.operands[2], iadd(_rr(rw, instr, 1), _rr(rw, instr, 0)))


def rewrite_ldo(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    rw.assign(instr.operands[1], rw.effective_address(instr.operands[0]))


def rewrite_load(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    dst = instr.operands[1]
    rw.memory_access(instr, instr.operands[0], lambda m: rw.assign(dst, zext(m, 32)))


def rewrite_store(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    value = _rr(rw, instr, 0)
    rw.memory_access(instr, instr.operands[1], lambda m: rw.m.store(m, rw.narrow(value, m.size)))


def rewrite_cmpb(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    if instr.cond is None:
        rw.iclass = InstrClass.LINEAR
        rw.m.nop()
        return
    target = rw.target(instr.operands[2])
    if instr.cond.kind is CT.TR:
        rw.iclass = TD
        rw.m.goto(target)
    else:
        rw.m.branch(rw.compare_condition(instr.cond, _rr(rw, instr, 0), _rr(rw, instr, 1)), target)
    rw.mark_annul(instr)


def _branch_on_result(rw: PaRiscRewriter, instr: PaRiscInstruction, result: ast.Expr) -> None:
    target = rw.target(instr.operands[2])
    if instr.cond is None:
        rw.iclass = InstrClass.LINEAR
    elif instr.cond.kind is CT.TR:
        rw.iclass = TD
        rw.m.goto(target)
    else:
        rw.m.branch(rw.result_condition(instr.cond, result), target)
    rw.mark_annul(instr)


def rewrite_addb(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    value = iadd(_rr(rw, instr, 1), _rr(rw, instr, 0))
    dst = instr.operands[1]
    result = rw.rewrite_operand(dst) if rw.assign(dst, value) else value
    _branch_on_result(rw, instr, result)


def rewrite_movb(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    value = _rr(rw, instr, 0)
    dst = instr.operands[1]
    result = rw.rewrite_operand(dst) if rw.assign(dst, value) else value
    _branch_on_result(rw, instr, result)


def rewrite_b_l(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    dst, link = instr.operands[0], instr.operands[1]
    if isinstance(dst, RegisterOperand):
        # blr: target is the instruction after the delay slot plus index * 8
        target: ast.Expr = iadd(ast.Addr((instr.address + 8) & 0xFFFFFFFF), shl(rw.reg(dst.reg), const(3, 32)))
    else:
        target = rw.target(dst)
    rw.mark_annul(instr)
    assert isinstance(link, RegisterOperand)
    if rw.is_zero_register(link.reg):
        rw.m.goto(target)
        return
    rw.m.assign(rw.binder.ensure_register(link.reg), ast.Addr((instr.address + 8) & 0xFFFFFFFF))
    rw.m.call(target)


def rewrite_bv(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    op = instr.operands[0]
    assert isinstance(op, IndexedOperand)
    rw.mark_annul(instr)
    if rw.is_zero_register(op.index):
        if op.base == RP:
            rw.m.ret()
            return
        rw.m.goto(rw.reg(op.base))
        return
    rw.m.goto(iadd(rw.reg(op.base), shl(rw.reg(op.index), const(3, 32))))


def rewrite_be(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    target = rw.effective_address(instr.operands[0])
    rw.mark_annul(instr)
    if instr.opcode is Opcode.be_l:
        rw.m.assign(rw.binder.ensure_register(R31), ast.Addr((instr.address + 8) & 0xFFFFFFFF))
        rw.m.call(target)
    else:
        rw.m.goto(target)


def rewrite_extrw(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    src = _rr(rw, instr, 0)
    pos = cast(ImmediateOperand, instr.operands[1]).value
    length = cast(ImmediateOperand, instr.operands[2]).value
    shifted = shr(src, const(31 - pos, 32)) if pos != 31 else src
    if instr.sign is SignExtension.s and length < 32:
        value = sext(slice_(shifted, 0, length), 32)
    else:
        value = and_(shifted, const((1 << length) - 1, 32))
    rw.write_result(instr, instr.operands[3], value)


def rewrite_depwi(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    imm = cast(ImmediateOperand, instr.operands[0]).value
    pos = cast(ImmediateOperand, instr.operands[1]).value
    length = cast(ImmediateOperand, instr.operands[2]).value
    dst = instr.operands[3]
    shift = 31 - pos
    field_mask = (((1 << length) - 1) << shift) & 0xFFFFFFFF
    bits = const((imm << shift) & field_mask, 32)
    if instr.zero:
        value: ast.Expr = bits
    else:
        value = or_(and_(rw.rewrite_operand(dst), comp(const(field_mask, 32))), bits)
    rw.write_result(instr, dst, value)


def rewrite_fldw(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    dst = cast(RegisterOperand, instr.operands[1])
    rw.memory_access(instr, instr.operands[0], lambda m: rw.m.assign(rw.binder.ensure_register(dst.reg), m))


def rewrite_fstw(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    value = _rr(rw, instr, 0)
    rw.memory_access(instr, instr.operands[1], lambda m: rw.m.store(m, value))


def rewrite_fmpy(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    dst = cast(RegisterOperand, instr.operands[2])
    rw.m.assign(rw.binder.ensure_register(dst.reg), fbin("fmul", _rr(rw, instr, 0), _rr(rw, instr, 1)))


def rewrite_fcmp(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    a, b = _rr(rw, instr, 0), _rr(rw, instr, 1)
    assert instr.cond is not None
    op = _FP_SIMPLE.get(instr.cond.display)
    if op is not None:
        test: ast.Expr = fbin(op, a, b)  # type: ignore[arg-type]
    else:
        test = intrinsic("__fcmp", 1, a, b, const(instr.cond.fp_index, 8))
    rw.m.assign(rw.binder.ensure_flag_group(FPSR, "C"), test)


def rewrite_cstd(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    ea = rw.effective_address(instr.operands[1])
    rw.m.side_effect(intrinsic("__cstd", 0, const(instr.coprocessor, 8), _rr(rw, instr, 0), ea))


def rewrite_break(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    rw.m.side_effect(intrinsic("__break", 0, _rr(rw, instr, 0), _rr(rw, instr, 1)))


def rewrite_ldsid(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    rw.assign(instr.operands[1], intrinsic("__ldsid", 32, _rr(rw, instr, 0)))


def rewrite_mtsp(rw: PaRiscRewriter, instr: PaRiscInstruction) -> None:
    dst = cast(RegisterOperand, instr.operands[1])
    rw.m.assign(rw.binder.ensure_register(dst.reg), _rr(rw, instr, 0))


ROUTINES: Dict[Opcode, Routine] = {
    Opcode.add: rewrite_add,
    Opcode.add_c: rewrite_add,
    Opcode.add_l: rewrite_add,
    Opcode.addi: rewrite_addi,
    Opcode.addb: rewrite_addb,
    Opcode.addib: rewrite_addb,
    Opcode.addil: rewrite_addil,
    Opcode.and_: rewrite_logical,
    Opcode.or_: rewrite_logical,
    Opcode.b_l: rewrite_b_l,
    Opcode.be: rewrite_be,
    Opcode.be_l: rewrite_be,
    Opcode.break_: rewrite_break,
    Opcode.bv: rewrite_bv,
    Opcode.cmpb: rewrite_cmpb,
    Opcode.cmpib: rewrite_cmpb,
    Opcode.cstd: rewrite_cstd,
    Opcode.depwi: rewrite_depwi,
    Opcode.extrw: rewrite_extrw,
    Opcode.fcmp: rewrite_fcmp,
    Opcode.fldw: rewrite_fldw,
    Opcode.fmpy: rewrite_fmpy,
    Opcode.fstw: rewrite_fstw,
    Opcode.ldb: rewrite_load,
    Opcode.ldh: rewrite_load,
    Opcode.ldw: rewrite_load,
    Opcode.ldil: rewrite_ldil,
    Opcode.ldo: rewrite_ldo,
    Opcode.ldsid: rewrite_ldsid,
    Opcode.movb: rewrite_movb,
    Opcode.movib: rewrite_movb,
    Opcode.mtsp: rewrite_mtsp,
    Opcode.shladd: rewrite_shladd,
    Opcode.stb: rewrite_store,
    Opcode.sth: rewrite_store,
    Opcode.stw: rewrite_store,
    Opcode.stwa: rewrite_store,
    Opcode.sub_b: rewrite_sub_b,
    Opcode.subi: rewrite_subi,
    Opcode.subi_tsv: rewrite_subi,
}

PaRiscRewriter.routines = ROUTINES
