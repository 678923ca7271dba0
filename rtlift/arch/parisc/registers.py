from __future__ import annotations

from typing import Tuple

from ...machine import RegisterStorage

# General registers are 32 bits wide in both the 1.1 and the 2.0 wide mode;
# immediates are sized to match.
GPR_BITS = 32

GP_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"r{i}", i, GPR_BITS) for i in range(32)
)
SPACE_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"sr{i}", i, 32, "space") for i in range(8)
)
FP_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"fr{i}", i, 64, "fpr") for i in range(32)
)
# Single-precision halves: index = (register << 1) | right-half bit.
FP_REGS32: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"fr{i >> 1}{'R' if i & 1 else 'L'}", i, 32, "fpr32") for i in range(64)
)

PSW = RegisterStorage("psw", 0, 32, "ctl")
FPSR = RegisterStorage("fpsr", 0, 32, "ctl")

R1 = GP_REGS[1]
RP = GP_REGS[2]
R31 = GP_REGS[31]
