from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional

from ...machine import MachineInstruction
from .conditions import Condition


class Opcode(enum.Enum):
    invalid = "invalid"
    add = "add"
    add_c = "add,c"
    add_l = "add,l"
    addb = "addb"
    addco = "addco"
    addi = "addi"
    addi_tc = "addi,tc"
    addi_tsv = "addi,tsv"
    addib = "addib"
    addil = "addil"
    addo = "addo"
    and_ = "and"
    andcm = "andcm"
    b_l = "b,l"
    bb = "bb"
    be = "be"
    be_l = "be,l"
    blrpush = "blrpush"
    break_ = "break"
    bv = "bv"
    bvb = "bvb"
    bve = "bve"
    cmpb = "cmpb"
    cmpib = "cmpib"
    comclr = "comclr"
    comiclr = "comiclr"
    cstd = "cstd"
    dcor = "dcor"
    depw = "depw"
    depwi = "depwi"
    diag = "diag"
    ds = "ds"
    extrw = "extrw"
    fadd = "fadd"
    fcmp = "fcmp"
    fcnv = "fcnv"
    fcpy = "fcpy"
    fdc = "fdc"
    fdce = "fdce"
    fdiv = "fdiv"
    fic = "fic"
    fldw = "fldw"
    fmpy = "fmpy"
    fmpyadd = "fmpyadd"
    fmpysub = "fmpysub"
    fstw = "fstw"
    fsub = "fsub"
    gate = "gate"
    idcor = "idcor"
    idtlbt = "idtlbt"
    iitlbt = "iitlbt"
    lci = "lci"
    ldb = "ldb"
    ldcd = "ldcd"
    ldcw = "ldcw"
    ldd = "ldd"
    ldda = "ldda"
    ldh = "ldh"
    ldil = "ldil"
    ldo = "ldo"
    ldsid = "ldsid"
    ldw = "ldw"
    ldwa = "ldwa"
    lpa = "lpa"
    mfctl = "mfctl"
    mfsp = "mfsp"
    movb = "movb"
    movib = "movib"
    mtctl = "mtctl"
    mtsm = "mtsm"
    mtsp = "mtsp"
    or_ = "or"
    pdc = "pdc"
    pdtlb = "pdtlb"
    pdtlbe = "pdtlbe"
    probe = "probe"
    probei = "probei"
    pspec = "pspec"
    rfi = "rfi"
    rfir = "rfir"
    rsm = "rsm"
    sh1addl = "sh1addl"
    sh3addl = "sh3addl"
    shladd = "shladd"
    shladdo = "shladdo"
    shrpw = "shrpw"
    spop = "spop"
    ssm = "ssm"
    stb = "stb"
    stby = "stby"
    std = "std"
    stda = "stda"
    stdby = "stdby"
    sth = "sth"
    stw = "stw"
    stwa = "stwa"
    sub = "sub"
    sub_b = "sub,b"
    subbo = "subbo"
    subi = "subi"
    subi_tsv = "subi,tsv"
    subo = "subo"
    subt = "subt"
    subto = "subto"
    sync = "sync"
    syncdma = "syncdma"
    uaddcm = "uaddcm"
    uaddcmt = "uaddcmt"
    uxor = "uxor"
    xor = "xor"


class SignExtension(enum.Enum):
    none = ""
    u = "u"
    s = "s"


class BaseRegMod(enum.Enum):
    none = ""
    ma = "ma"
    mb = "mb"
    o = "o"


class FpFormat(enum.Enum):
    none = ""
    sgl = "sgl"
    dbl = "dbl"
    quad = "quad"


FP_FORMAT_BITS = {FpFormat.sgl: 32, FpFormat.dbl: 64, FpFormat.quad: 128}


@dataclass(frozen=True)
class PaRiscInstruction(MachineInstruction):
    cond: Optional[Condition] = None
    annul: bool = False
    zero: bool = False
    sign: SignExtension = SignExtension.none
    base_reg_mod: BaseRegMod = BaseRegMod.none
    fp_format: FpFormat = FpFormat.none
    coprocessor: int = -1

    def mnemonic(self) -> str:
        parts: List[str] = [self.opcode.value]
        if self.zero:
            parts.append("z")
        if self.sign is not SignExtension.none:
            parts.append(self.sign.value)
        if self.base_reg_mod is not BaseRegMod.none:
            parts.append(self.base_reg_mod.value)
        if self.fp_format is not FpFormat.none:
            parts.append(self.fp_format.value)
        if self.cond is not None:
            parts.append(self.cond.display)
        if self.annul:
            parts.append("n")
        return ",".join(parts)
