from __future__ import annotations

from typing import Callable, Dict, Tuple, cast

from ...machine import MachineInstruction, RegisterOperand
from ...rewriter import Rewriter, Routine
from ...rtl import ast
from ...rtl.emitter import and_, cond, cond_code, iadd, intrinsic, isub, or_, xor
from .instruction import Opcode
from .registers import CCR

# Condition code and the CCR bits it reads, per bcc opcode.
BRANCH_CONDITIONS: Dict[Opcode, Tuple[ast.CondKind, str]] = {
    Opcode.bhi: ("UGT", "ZC"),
    Opcode.bls: ("ULE", "ZC"),
    Opcode.bcc: ("UGE", "C"),
    Opcode.bcs: ("ULT", "C"),
    Opcode.bne: ("NE", "Z"),
    Opcode.beq: ("EQ", "Z"),
    Opcode.bvc: ("NO", "V"),
    Opcode.bvs: ("OV", "V"),
    Opcode.bpl: ("PL", "N"),
    Opcode.bmi: ("MI", "N"),
    Opcode.bge: ("GE", "NV"),
    Opcode.blt: ("LT", "NV"),
    Opcode.bgt: ("GT", "NZV"),
    Opcode.ble: ("LE", "NZV"),
}


class H8Rewriter(Rewriter[MachineInstruction]):
    arch_name = "H8"
    invalid_opcode = Opcode.invalid

    def flags(self, bits: str) -> ast.FlagGroup:
        return self.binder.ensure_flag_group(CCR, bits)

    def set_flags(self, bits: str, result: ast.Expr) -> None:
        group = self.flags(bits)
        self.m.assign(group, cond(result, group.size))

    def dst(self, instr: MachineInstruction) -> ast.Reg:
        return self.binder.ensure_register(cast(RegisterOperand, instr.operands[1]).reg)


def _arith(fn: Callable[[ast.Expr, ast.Expr], ast.Expr], flags: str) -> Routine:
    def rewrite(rw: H8Rewriter, instr: MachineInstruction) -> None:
        dst = rw.dst(instr)
        rw.m.assign(dst, fn(dst, rw.rewrite_operand(instr.operands[0])))
        rw.set_flags(flags, dst)

    return rewrite


def rewrite_mov(rw: H8Rewriter, instr: MachineInstruction) -> None:
    dst = rw.dst(instr)
    rw.m.assign(dst, rw.rewrite_operand(instr.operands[0]))
    rw.set_flags("NZV", dst)


def rewrite_cmp(rw: H8Rewriter, instr: MachineInstruction) -> None:
    rw.set_flags("NZVC", isub(rw.dst(instr), rw.rewrite_operand(instr.operands[0])))


def rewrite_bcc(rw: H8Rewriter, instr: MachineInstruction) -> None:
    target = rw.target(instr.operands[0])
    if instr.opcode is Opcode.bra:
        rw.m.goto(target)
        return
    if instr.opcode is Opcode.brn:
        rw.m.nop()
        return
    kind, bits = BRANCH_CONDITIONS[instr.opcode]
    rw.m.branch(cond_code(kind, rw.flags(bits)), target)


def rewrite_bsr(rw: H8Rewriter, instr: MachineInstruction) -> None:
    rw.m.call(rw.target(instr.operands[0]), 2)


def rewrite_rts(rw: H8Rewriter, instr: MachineInstruction) -> None:
    rw.m.ret()


def rewrite_rte(rw: H8Rewriter, instr: MachineInstruction) -> None:
    rw.m.side_effect(intrinsic("__restore_ccr", 0))
    rw.m.ret()


def rewrite_nop(rw: H8Rewriter, instr: MachineInstruction) -> None:
    rw.m.nop()


ROUTINES: Dict[Opcode, Routine] = {
    Opcode.nop: rewrite_nop,
    Opcode.mov_b: rewrite_mov,
    Opcode.mov_w: rewrite_mov,
    Opcode.add_b: _arith(iadd, "NZVC"),
    Opcode.add_w: _arith(iadd, "NZVC"),
    Opcode.sub_b: _arith(isub, "NZVC"),
    Opcode.sub_w: _arith(isub, "NZVC"),
    Opcode.and_b: _arith(and_, "NZV"),
    Opcode.or_b: _arith(or_, "NZV"),
    Opcode.xor_b: _arith(xor, "NZV"),
    Opcode.cmp_b: rewrite_cmp,
    Opcode.cmp_w: rewrite_cmp,
    Opcode.bsr: rewrite_bsr,
    Opcode.rts: rewrite_rts,
    Opcode.rte: rewrite_rte,
}
ROUTINES.update({opcode: rewrite_bcc for opcode in (Opcode.bra, Opcode.brn, *BRANCH_CONDITIONS)})

H8Rewriter.routines = ROUTINES
