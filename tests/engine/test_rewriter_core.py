import enum

from rtlift.coding import ImageReader
from rtlift.machine import (
    ImmediateOperand,
    IndexedOperand,
    InstrClass,
    MachineInstruction,
    MemoryOperand,
    RegisterOperand,
    RegisterStorage,
)
from rtlift.rewriter import Rewriter
from rtlift.rtl import ast
from rtlift.rtl.emitter import const, iadd, isub
from rtlift.rtl.text import format_cluster
from rtlift.services import LoggingHost, RecordingDiagnostics

R0 = RegisterStorage("r0", 0, 32)
R1 = RegisterStorage("r1", 1, 32)
R2 = RegisterStorage("r2", 2, 32)


class Op(enum.Enum):
    li = "li"
    add = "add"
    frob = "frob"
    invalid = "invalid"


def rewrite_li(rw: "ToyRewriter", instr: MachineInstruction) -> None:
    rw.assign(instr.operands[1], rw.rewrite_operand(instr.operands[0]))


def rewrite_add(rw: "ToyRewriter", instr: MachineInstruction) -> None:
    a, b, d = instr.operands
    rw.assign(d, iadd(rw.rewrite_operand(a), rw.rewrite_operand(b)))


class ToyRewriter(Rewriter[MachineInstruction]):
    arch_name = "Toy"
    invalid_opcode = Op.invalid
    zero_register = 0
    routines = {Op.li: rewrite_li, Op.add: rewrite_add}


def _instr(opcode: Op, *operands, address: int = 0x100, iclass=InstrClass.LINEAR) -> MachineInstruction:
    return MachineInstruction(opcode, iclass, tuple(operands), address, 4)


def test_one_cluster_per_instruction() -> None:
    instrs = [
        _instr(Op.li, ImmediateOperand(5), RegisterOperand(R1), address=0x100),
        _instr(Op.add, RegisterOperand(R1), RegisterOperand(R2), RegisterOperand(R1), address=0x104),
    ]
    clusters = list(ToyRewriter(instrs))
    assert [c.address for c in clusters] == [0x100, 0x104]
    assert format_cluster(clusters[1]) == [
        "0|L--|00000104(4): 1 instructions",
        "1|L--|r1 = r1 + r2",
    ]


def test_zero_register_reads_as_constant_and_drops_writes() -> None:
    instrs = [
        _instr(Op.add, RegisterOperand(R0), RegisterOperand(R1), RegisterOperand(R2)),
        _instr(Op.li, ImmediateOperand(1), RegisterOperand(R0)),
    ]
    first, second = ToyRewriter(instrs)
    assert first.instructions == (ast.Assign(ast.Reg("r2", 32), iadd(ast.Const(0, 32), ast.Reg("r1", 32))),)
    # write to r0 dropped
    assert second.instructions == (ast.Nop(),)


def test_missing_routine_reports_once_and_lifts_invalid() -> None:
    host = LoggingHost()
    diagnostics = RecordingDiagnostics()
    reader = ImageReader(bytes.fromhex("DEADBEEF" "DEADBEEF"), 0x100)
    instrs = [_instr(Op.frob, address=0x100), _instr(Op.frob, address=0x104)]
    clusters = list(ToyRewriter(instrs, host=host, diagnostics=diagnostics, reader=reader))
    assert all(c.is_invalid and c.iclass == InstrClass.INVALID for c in clusters)
    assert host.errors == [(0x100, "Toy instruction 'frob' is not supported yet.")]
    assert len(diagnostics.cases) == 1
    case = diagnostics.cases[0]
    assert case.hex_bytes == "DEADBEEF"
    assert case.stub.startswith("def test_toy_rw_frob() -> None:")


def test_decoder_stub_goes_to_missing_path() -> None:
    host = LoggingHost()
    stub = _instr(Op.li, iclass=InstrClass(0))
    (cluster,) = ToyRewriter([stub], host=host)
    assert cluster.is_invalid
    assert host.errors


def test_invalid_instruction_emits_invalid_without_report() -> None:
    host = LoggingHost()
    (cluster,) = ToyRewriter([_instr(Op.invalid, iclass=InstrClass.INVALID)], host=host)
    assert format_cluster(cluster) == ["0|---|00000100(4): 1 instructions", "1|---|<invalid>"]
    assert host.errors == []


def test_effective_address_forms() -> None:
    rw = ToyRewriter([])
    r1 = ast.Reg("r1", 32)
    assert rw.effective_address(MemoryOperand(32, R1, 8)) == iadd(r1, const(8, 32))
    assert rw.effective_address(MemoryOperand(32, R1, -4)) == isub(r1, const(4, 32))
    assert rw.effective_address(MemoryOperand(32, R1)) == r1
    assert rw.effective_address(MemoryOperand(32, R0, 0x40)) == const(0x40, 32)
    assert rw.effective_address(IndexedOperand(32, R1, R0)) == r1
    assert rw.effective_address(IndexedOperand(32, R0, R2)) == ast.Reg("r2", 32)


def test_memory_operands_take_width_before_base() -> None:
    op = MemoryOperand(32, R1)
    assert (op.width, op.base, op.offset, op.space) == (32, R1, 0, None)
    assert str(MemoryOperand(16, R1, 8, R2)) == "0x8(r2,r1)"
    indexed = IndexedOperand(64, R1, R2)
    assert (indexed.width, indexed.base, indexed.index, indexed.space) == (64, R1, R2, None)
    assert str(indexed) == "r2(r1)"
    assert RegisterOperand(R1).width == 32


def test_unsupported_opcodes() -> None:
    assert ToyRewriter.unsupported_opcodes(list(Op)) == [Op.frob]
