from __future__ import annotations

import enum


class Opcode(enum.Enum):
    illegal = "illegal"

    add = "add"
    dadd = "dadd"
    daddi = "daddi"
    daddiu = "daddiu"
    daddu = "daddu"
    ddiv = "ddiv"
    ddivu = "ddivu"
    dmult = "dmult"
    dmultu = "dmultu"
    dsll = "dsll"
    dsll32 = "dsll32"
    dsllv = "dsllv"
    dsra = "dsra"
    dsra32 = "dsra32"
    dsrav = "dsrav"
    dsrl = "dsrl"
    dsrl32 = "dsrl32"
    dsrlv = "dsrlv"
    dsub = "dsub"
    dsubu = "dsubu"
    movf = "movf"
    movt = "movt"
    addi = "addi"
    addiu = "addiu"
    addu = "addu"
    and_ = "and"
    andi = "andi"
    clo = "clo"
    clz = "clz"
    div = "div"
    divu = "divu"
    ext = "ext"
    ins = "ins"
    lui = "lui"
    madd = "madd"
    maddu = "maddu"
    mfhi = "mfhi"
    mflo = "mflo"
    movn = "movn"
    movz = "movz"
    msub = "msub"
    msubu = "msubu"
    mthi = "mthi"
    mtlo = "mtlo"
    mul = "mul"
    mult = "mult"
    multu = "multu"
    nop = "nop"
    nor = "nor"
    or_ = "or"
    ori = "ori"
    seb = "seb"
    seh = "seh"
    sll = "sll"
    sllv = "sllv"
    slt = "slt"
    slti = "slti"
    sltiu = "sltiu"
    sltu = "sltu"
    sra = "sra"
    srav = "srav"
    srl = "srl"
    srlv = "srlv"
    sub = "sub"
    subu = "subu"
    wsbh = "wsbh"
    xor = "xor"
    xori = "xori"

    lb = "lb"
    ld = "ld"
    ldl = "ldl"
    ldr = "ldr"
    lld = "lld"
    lwu = "lwu"
    scd = "scd"
    sd = "sd"
    sdl = "sdl"
    sdr = "sdr"
    ldxc1 = "ldxc1"
    lwxc1 = "lwxc1"
    prefx = "prefx"
    sdxc1 = "sdxc1"
    swxc1 = "swxc1"
    lbu = "lbu"
    lh = "lh"
    lhu = "lhu"
    ll = "ll"
    lw = "lw"
    lwl = "lwl"
    lwr = "lwr"
    sb = "sb"
    sc = "sc"
    sh = "sh"
    sw = "sw"
    swl = "swl"
    swr = "swr"
    lwc1 = "lwc1"
    swc1 = "swc1"
    ldc1 = "ldc1"
    sdc1 = "sdc1"

    beq = "beq"
    beql = "beql"
    bgez = "bgez"
    bgezal = "bgezal"
    bgezall = "bgezall"
    bgezl = "bgezl"
    bgtz = "bgtz"
    bgtzl = "bgtzl"
    blez = "blez"
    blezl = "blezl"
    bltz = "bltz"
    bltzal = "bltzal"
    bltzall = "bltzall"
    bltzl = "bltzl"
    bne = "bne"
    bnel = "bnel"
    bc1f = "bc1f"
    bc1t = "bc1t"
    bc1fl = "bc1fl"
    bc1tl = "bc1tl"
    j = "j"
    jal = "jal"
    jalr = "jalr"
    jr = "jr"

    teq = "teq"
    teqi = "teqi"
    tge = "tge"
    tgei = "tgei"
    tgeiu = "tgeiu"
    tgeu = "tgeu"
    tlt = "tlt"
    tlti = "tlti"
    tltiu = "tltiu"
    tltu = "tltu"
    tne = "tne"
    tnei = "tnei"

    break_ = "break"
    cache = "cache"
    eret = "eret"
    mfc0 = "mfc0"
    mtc0 = "mtc0"
    pref = "pref"
    rdhwr = "rdhwr"
    sdbbp = "sdbbp"
    sync = "sync"
    syscall = "syscall"
    tlbp = "tlbp"
    tlbr = "tlbr"
    tlbwi = "tlbwi"
    tlbwr = "tlbwr"
    wait = "wait"

    add_d = "add.d"
    add_s = "add.s"
    c_eq_d = "c.eq.d"
    c_eq_s = "c.eq.s"
    c_le_d = "c.le.d"
    c_le_s = "c.le.s"
    c_lt_d = "c.lt.d"
    c_lt_s = "c.lt.s"
    cfc1 = "cfc1"
    cop1_ps = "cop1.ps"
    cop2 = "cop2"
    ctc1 = "ctc1"
    cvt_d_s = "cvt.d.s"
    cvt_d_w = "cvt.d.w"
    cvt_s_d = "cvt.s.d"
    cvt_w_d = "cvt.w.d"
    div_d = "div.d"
    div_s = "div.s"
    mfc1 = "mfc1"
    mov_d = "mov.d"
    mov_s = "mov.s"
    mtc1 = "mtc1"
    mul_d = "mul.d"
    mul_s = "mul.s"
    sub_d = "sub.d"
    sub_s = "sub.s"
    cvt_d_l = "cvt.d.l"
    trunc_l_d = "trunc.l.d"
    madd_d = "madd.d"
    madd_s = "madd.s"
    msub_d = "msub.d"
    msub_s = "msub.s"
    nmadd_d = "nmadd.d"
    nmadd_s = "nmadd.s"
    nmsub_d = "nmsub.d"
    nmsub_s = "nmsub.s"

