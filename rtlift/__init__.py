"""
Instruction decoding and RTL lifting for PA-RISC, MIPS and H8.

    >>> from rtlift import lift
    >>> for cluster in lift("parisc", bytes.fromhex("37DE0080")):
    ...     print(cluster)
"""

from __future__ import annotations

from typing import Iterator, Optional

from .arch import ARCHITECTURES, Architecture, get_architecture
from .coding import BufferTooShort, ImageReader
from .config import LiftConfig, load_lift_config
from .machine import InstrClass, MachineInstruction
from .rtl import ast
from .services import RewriterHost


def disassemble(arch: str, data: bytes, base_address: int = 0) -> Iterator[MachineInstruction]:
    return get_architecture(arch).disassemble(data, base_address)


def lift(
    arch: str,
    data: bytes,
    base_address: int = 0,
    host: Optional[RewriterHost] = None,
) -> Iterator[ast.RtlCluster]:
    return get_architecture(arch).lift(data, base_address, host)


__all__ = [
    "ARCHITECTURES",
    "Architecture",
    "BufferTooShort",
    "ImageReader",
    "InstrClass",
    "LiftConfig",
    "MachineInstruction",
    "disassemble",
    "get_architecture",
    "lift",
    "load_lift_config",
]
