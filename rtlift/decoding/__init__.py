"""
Declarative decoding for fixed-width instruction words.

Bitfields extract spans of a word, mutators turn them into operands and
completer flags on a ``DecodeContext``, and decoder trees dispatch on masks
and predicates until a terminal builds the machine instruction.
"""

from .bitfield import (  # noqa: F401
    Bitfield,
    DecoderConfigurationError,
    be_field,
    be_fields,
    fields_length,
    read_fields,
    read_signed_fields,
    sign_extend,
)
from .disassembler import DecodeContext, Disassembler  # noqa: F401
from .tree import (  # noqa: F401
    ConditionalDecoder,
    Decoder,
    InstrDecoder,
    MaskDecoder,
    Mutator,
    NyiDecoder,
    iter_decoders,
)

__all__ = [
    "Bitfield",
    "ConditionalDecoder",
    "DecodeContext",
    "Decoder",
    "DecoderConfigurationError",
    "Disassembler",
    "InstrDecoder",
    "MaskDecoder",
    "Mutator",
    "NyiDecoder",
    "be_field",
    "be_fields",
    "fields_length",
    "iter_decoders",
    "read_fields",
    "read_signed_fields",
    "sign_extend",
]
