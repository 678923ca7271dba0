from __future__ import annotations

import os

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from rtlift import ARCHITECTURES, get_architecture
from rtlift.arch.h8.disassembler import ROOT as H8_ROOT
from rtlift.arch.mips.disassembler import ROOT as MIPS_ROOT
from rtlift.arch.parisc.disassembler import ROOT as PARISC_ROOT
from rtlift.decoding.bitfield import sign_extend
from rtlift.decoding.tree import MaskDecoder, iter_decoders
from rtlift.rtl.text import format_cluster
from rtlift.rtl.validate import validate_cluster

from .strategies import INTERESTING_WORDS, QUIET, encode, programs

FAST_MAX_EXAMPLES = int(os.getenv("RTLIFT_PROP_EXAMPLES", "200"))
NIGHTLY_MAX_EXAMPLES = int(os.getenv("RTLIFT_PROP_NIGHTLY_EXAMPLES", "5000"))

FAST = settings(
    max_examples=FAST_MAX_EXAMPLES,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


@pytest.mark.parametrize("root", [PARISC_ROOT, MIPS_ROOT, H8_ROOT], ids=["parisc", "mips", "h8"])
def test_mask_tables_are_dense(root) -> None:
    masks = [node for node in iter_decoders(root) if isinstance(node, MaskDecoder)]
    assert masks
    for node in masks:
        assert len(node.decoders) == 1 << node.field.length
        assert all(child is not None for child in node.decoders)


@given(value=st.integers(min_value=-(1 << 40), max_value=1 << 40), bits=st.integers(min_value=1, max_value=32))
@FAST
def test_sign_extend_range(value: int, bits: int) -> None:
    result = sign_extend(value, bits)
    assert -(1 << (bits - 1)) <= result < (1 << (bits - 1))
    assert (result - value) % (1 << bits) == 0


def _check_program(arch_name: str, data: bytes, base: int) -> None:
    arch = get_architecture(arch_name, QUIET)
    instrs = list(arch.disassemble(data, base))

    assert len(instrs) == len(data) // arch.word_bytes
    address = base
    for instr in instrs:
        assert instr.address == address
        assert instr.length == arch.word_bytes
        str(instr)
        if instr.is_invalid:
            assert instr.operands == ()
        address += instr.length

    clusters = list(arch.lift(data, base))
    assert [(c.address, c.length) for c in clusters] == [(i.address, i.length) for i in instrs]
    for cluster in clusters:
        assert validate_cluster(cluster, arch.zero_registers) == []
        format_cluster(cluster)


@given(program=programs())
@FAST
def test_decode_and_lift_invariants(program) -> None:
    _check_program(*program)


@given(program=programs())
@FAST
def test_decoding_is_deterministic(program) -> None:
    arch_name, data, base = program
    arch = get_architecture(arch_name, QUIET)
    assert list(arch.disassemble(data, base)) == list(arch.disassemble(data, base))
    assert list(arch.lift(data, base)) == list(arch.lift(data, base))


@pytest.mark.parametrize("arch_name", [name for name in ARCHITECTURES if name != "h8"])
@given(value=INTERESTING_WORDS)
@FAST
def test_interesting_words(arch_name: str, value: int) -> None:
    _check_program(arch_name, encode(arch_name, [value]), 0x1000)


@pytest.mark.nightly
@given(program=programs(max_words=32))
@settings(
    max_examples=NIGHTLY_MAX_EXAMPLES,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
def test_decode_and_lift_nightly(program) -> None:
    if not os.getenv("RTLIFT_PROP_RUN_NIGHTLY"):
        pytest.skip("Nightly fuzzing disabled (set RTLIFT_PROP_RUN_NIGHTLY=1 to enable)")
    _check_program(*program)
