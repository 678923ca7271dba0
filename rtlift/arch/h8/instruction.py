from __future__ import annotations

import enum


class Opcode(enum.Enum):
    invalid = "invalid"
    add_b = "add.b"
    add_w = "add.w"
    and_b = "and.b"
    cmp_b = "cmp.b"
    cmp_w = "cmp.w"
    mov_b = "mov.b"
    mov_w = "mov.w"
    nop = "nop"
    or_b = "or.b"
    sub_b = "sub.b"
    sub_w = "sub.w"
    xor_b = "xor.b"

    bra = "bra"
    brn = "brn"
    bhi = "bhi"
    bls = "bls"
    bcc = "bcc"
    bcs = "bcs"
    bne = "bne"
    beq = "beq"
    bvc = "bvc"
    bvs = "bvs"
    bpl = "bpl"
    bmi = "bmi"
    bge = "bge"
    blt = "blt"
    bgt = "bgt"
    ble = "ble"
    bsr = "bsr"
    rte = "rte"
    rts = "rts"

    # Recognised, not decoded further.
    addx = "addx"
    adds = "adds"
    band = "band"
    bset = "bset"
    daa = "daa"
    das = "das"
    dec = "dec"
    divxu = "divxu"
    eepmov = "eepmov"
    inc = "inc"
    jmp = "jmp"
    jsr = "jsr"
    ldc = "ldc"
    mulxu = "mulxu"
    neg = "neg"
    not_ = "not"
    rotl = "rotl"
    shal = "shal"
    sleep = "sleep"
    stc = "stc"
    subs = "subs"
    subx = "subx"


BRANCHES = (
    Opcode.bra,
    Opcode.brn,
    Opcode.bhi,
    Opcode.bls,
    Opcode.bcc,
    Opcode.bcs,
    Opcode.bne,
    Opcode.beq,
    Opcode.bvc,
    Opcode.bvs,
    Opcode.bpl,
    Opcode.bmi,
    Opcode.bge,
    Opcode.blt,
    Opcode.bgt,
    Opcode.ble,
)
