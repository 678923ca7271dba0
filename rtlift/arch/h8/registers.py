from __future__ import annotations

from typing import Tuple

from ...machine import RegisterStorage

# Byte registers are indexed by the 4-bit register field: 0-7 high halves, 8-15 low halves.
BYTE_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"r{i & 7}{'l' if i & 8 else 'h'}", i, 8, "gpr8") for i in range(16)
)
WORD_REGS: Tuple[RegisterStorage, ...] = tuple(
    RegisterStorage(f"{'e' if i & 8 else 'r'}{i & 7}", i, 16) for i in range(16)
)

CCR = RegisterStorage("ccr", 0, 8, "ctl")
SP = WORD_REGS[7]
