"""Declarative decoder trees.

A tree is built once at import time from four node kinds and is then shared
read-only by every disassembler of the architecture:

* ``InstrDecoder``  terminal; runs its mutators and builds the instruction
* ``MaskDecoder``   selects a child by the value of a bitfield
* ``ConditionalDecoder`` selects one of two children by a predicate
* ``NyiDecoder``    placeholder for a recognised but unimplemented encoding
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Iterator,
    Mapping,
    Sequence,
    Tuple,
    Union,
)

from ..machine import InstrClass, MachineInstruction
from .bitfield import Bitfield, DecoderConfigurationError, dump_masked

if TYPE_CHECKING:
    from .disassembler import DecodeContext

logger = logging.getLogger(__name__)

Mutator = Callable[[int, "DecodeContext"], bool]
Predicate = Callable[[int], bool]


@dataclass(frozen=True, slots=True)
class InstrDecoder:
    iclass: InstrClass
    opcode: Any
    mutators: Tuple[Mutator, ...] = ()

    def __post_init__(self) -> None:
        if self.iclass & InstrClass.DELAY and not self.iclass & InstrClass.TRANSFER:
            raise DecoderConfigurationError(
                f"{self.opcode}: delay slot without a transfer class"
            )

    def decode(self, word: int, ctx: "DecodeContext") -> MachineInstruction:
        for mutator in self.mutators:
            if not mutator(word, ctx):
                return ctx.make_invalid()
        return ctx.make_instruction(self.iclass, self.opcode)


@dataclass(frozen=True, slots=True)
class MaskDecoder:
    field: Bitfield
    decoders: Tuple["Decoder", ...]
    tag: str = ""

    def __post_init__(self) -> None:
        expected = 1 << self.field.length
        if len(self.decoders) != expected:
            raise DecoderConfigurationError(
                f"Mask {self.tag or self.field} needs {expected} decoders, "
                f"got {len(self.decoders)}"
            )

    def decode(self, word: int, ctx: "DecodeContext") -> MachineInstruction:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s %s %s",
                self.tag or "mask",
                dump_masked(word, (self.field,), self.field.word_bits),
                self.field,
            )
        return self.decoders[self.field.read(word)].decode(word, ctx)


@dataclass(frozen=True, slots=True)
class ConditionalDecoder:
    field: Bitfield
    predicate: Predicate
    when_true: "Decoder"
    when_false: "Decoder"
    tag: str = ""

    def decode(self, word: int, ctx: "DecodeContext") -> MachineInstruction:
        if self.predicate(self.field.read(word)):
            return self.when_true.decode(word, ctx)
        return self.when_false.decode(word, ctx)


@dataclass(frozen=True, slots=True)
class NyiDecoder:
    opcode: Any
    message: str = ""

    def decode(self, word: int, ctx: "DecodeContext") -> MachineInstruction:
        return ctx.make_stub(self.opcode, self.message, word)


Decoder = Union[InstrDecoder, MaskDecoder, ConditionalDecoder, NyiDecoder]


def children(node: Decoder) -> Tuple[Decoder, ...]:
    if isinstance(node, MaskDecoder):
        return node.decoders
    if isinstance(node, ConditionalDecoder):
        return (node.when_true, node.when_false)
    if isinstance(node, (InstrDecoder, NyiDecoder)):
        return ()
    raise TypeError(f"Unsupported decoder: {node!r}")


def iter_decoders(root: Decoder) -> Iterator[Decoder]:
    """Depth-first walk; shared subtrees are visited once."""
    seen: set[int] = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(children(node)))


# Builders used by the per-architecture decoder tables.


def instr(opcode: Any, *mutators: Mutator, iclass: InstrClass = InstrClass.LINEAR) -> InstrDecoder:
    return InstrDecoder(iclass, opcode, tuple(mutators))


def mask(position: int, length: int, *decoders: Decoder, tag: str = "", word_bits: int = 32) -> MaskDecoder:
    return MaskDecoder(Bitfield(position, length, word_bits), tuple(decoders), tag)


def mask_field(field: Bitfield, decoders: Sequence[Decoder], tag: str = "") -> MaskDecoder:
    return MaskDecoder(field, tuple(decoders), tag)


def sparse(
    field: Bitfield,
    default: Decoder,
    overrides: Mapping[int, Decoder],
    tag: str = "",
) -> MaskDecoder:
    table = [default] * (1 << field.length)
    for value, decoder in overrides.items():
        if not 0 <= value < len(table):
            raise DecoderConfigurationError(
                f"Sparse {tag or field}: key {value:#x} out of range"
            )
        table[value] = decoder
    return MaskDecoder(field, tuple(table), tag)


def select(field: Bitfield, predicate: Predicate, when_true: Decoder, when_false: Decoder, tag: str = "") -> ConditionalDecoder:
    return ConditionalDecoder(field, predicate, when_true, when_false, tag)


def nyi(opcode: Any, message: str = "") -> NyiDecoder:
    return NyiDecoder(opcode, message)


__all__ = [
    "ConditionalDecoder",
    "Decoder",
    "DecoderConfigurationError",
    "InstrDecoder",
    "MaskDecoder",
    "Mutator",
    "NyiDecoder",
    "Predicate",
    "children",
    "instr",
    "iter_decoders",
    "mask",
    "mask_field",
    "nyi",
    "select",
    "sparse",
]
