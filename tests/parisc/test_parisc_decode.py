import pytest

from rtlift.arch.parisc.disassembler import ROOT, PaRiscDisassembler, assemble_21
from rtlift.arch.parisc.instruction import BaseRegMod, Opcode
from rtlift.coding import ImageReader
from rtlift.decoding.bitfield import be_field
from rtlift.machine import InstrClass, class_code


def decode(hexstr: str, address: int = 0x1000, is64bit: bool = False):
    dis = PaRiscDisassembler(ImageReader(bytes.fromhex(hexstr), address), is64bit=is64bit)
    instr = dis.disassemble_instruction()
    assert instr is not None
    return instr


@pytest.mark.parametrize(
    "hexstr, text",
    [
        ("08410603", "add r1,r2,r3"),
        ("08412603", "add,= r1,r2,r3"),
        ("B42007FF", "addi -1,r1,r0"),
        ("37DE0080", "ldo 0x40(r30),r30"),
        ("20200400", "ldil L%0x20000000,r1"),
        ("48640010", "ldw 0x8(r3),r4"),
        ("4BC43FF9", "ldw -0x4(r30),r4"),
        ("6BC23FD9", "stw r2,-0x14(r30)"),
        ("D0641BF8", "extrw,u r3,0x1F,8,r4"),
        ("80412000", "cmpb,= r1,r2,0x00001008"),
        ("E840C000", "bv r0(r2)"),
        ("E840C002", "bv,n r0(r2)"),
        ("E8400000", "b,l 0x00001008,r2"),
        ("00000000", "break 0,0"),
    ],
)
def test_disassembly(hexstr: str, text: str) -> None:
    instr = decode(hexstr)
    assert str(instr) == text
    assert instr.address == 0x1000
    assert instr.length == 4


def test_all_zero_word_is_break_with_zero_class() -> None:
    instr = decode("00000000")
    assert instr.opcode is Opcode.break_
    assert instr.iclass == InstrClass.CALL | InstrClass.TRANSFER | InstrClass.ZERO


@pytest.mark.parametrize(
    "hexstr, code",
    [
        ("08410603", "L--"),
        ("E840C000", "TD-"),
        ("E840C002", "TDA"),
        ("E8400000", "CD-"),
        ("E8000000", "TD-"),
        ("80412000", "TD-"),
    ],
)
def test_instruction_classes(hexstr: str, code: str) -> None:
    assert class_code(decode(hexstr).iclass) == code


def test_conditional_branch_is_marked_conditional() -> None:
    assert decode("80412000").iclass & InstrClass.CONDITIONAL


def test_unimplemented_encoding_is_a_stub(recording) -> None:
    dis = PaRiscDisassembler(ImageReader(bytes.fromhex("0B200000"), 0x2000), diagnostics=recording)
    (instr,) = list(dis)
    assert instr.opcode is Opcode.andcm
    assert instr.iclass == InstrClass(0)
    assert instr.operands == ()
    (case,) = recording.cases
    assert case.address == 0x2000
    assert case.hex_bytes == "0B200000"


def test_reserved_condition_decodes_invalid() -> None:
    # or with condition field 8: reserved in the logical table
    instr = decode("08418243")
    assert instr.opcode is Opcode.invalid
    assert instr.is_invalid


def test_base_update_completer() -> None:
    # ldw,ma with a positive displacement modifies after the access
    instr = decode("4C640010")
    assert instr.base_reg_mod is BaseRegMod.ma
    assert str(instr).startswith("ldw,ma ")


def test_assemble_21() -> None:
    field = be_field(11, 21)
    assert assemble_21(False, 0x20200400, (field,)) << 11 == 0x20000000


def test_wide_add_condition_in_64_bit_mode() -> None:
    # bit 26 selects the doubleword condition table
    assert str(decode("08412623", is64bit=True)) == "add,*= r1,r2,r3"


def test_root_covers_every_major_opcode() -> None:
    assert len(ROOT.decoders) == 64
