from __future__ import annotations

from typing import Tuple

from ...machine import RegisterStorage


def _gprs(bits: int) -> Tuple[RegisterStorage, ...]:
    return tuple(RegisterStorage(f"r{i}", i, bits) for i in range(32))


GP_REGS = _gprs(32)
GP_REGS64 = _gprs(64)
FP_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"f{i}", i, 32, "fpr") for i in range(32)
)
CP0_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"cpr{i}", i, 32, "cp0") for i in range(32)
)
FCR_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage("fcsr" if i == 31 else f"fcr{i}", i, 32, "fcr") for i in range(32)
)

HI = RegisterStorage("hi", 0, 32, "muldiv")
LO = RegisterStorage("lo", 1, 32, "muldiv")
HI64 = RegisterStorage("hi", 0, 64, "muldiv")
LO64 = RegisterStorage("lo", 1, 64, "muldiv")
FCSR = FCR_REGS[31]

SP = GP_REGS[29]
RA_NUMBER = 31
RA = GP_REGS[RA_NUMBER]
