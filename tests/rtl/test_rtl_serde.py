import pytest

from rtlift.machine import InstrClass
from rtlift.rtl import ast, serde
from rtlift.rtl.emitter import RtlEmitter, cond_code, const, eq, iadd, intrinsic


def _sample() -> ast.RtlCluster:
    m = RtlEmitter()
    r1 = ast.Reg("r1", 32)
    m.assign(r1, iadd(r1, const(4, 32)))
    m.store(ast.Mem(r1, 8), ast.Slice(r1, 0, 8))
    m.if_(cond_code("SV", r1), [ast.SideEffect(intrinsic("__trap", 0))])
    m.branch(eq(r1, const(0, 32)), ast.Addr(0x1008))
    return m.make_cluster(0x1000, 4, InstrClass.CONDITIONAL_TRANSFER | InstrClass.DELAY)


def test_round_trip_json_preserves_cluster() -> None:
    cluster = _sample()
    payload = serde.to_json(cluster, indent=0)
    restored = serde.from_json(payload)
    assert restored == cluster
    assert serde.to_json(restored, indent=0) == payload


def test_unset_optional_fields_are_omitted() -> None:
    data = serde.node_to_dict(ast.Mem(ast.Reg("r1", 32), 8))
    assert "seg" not in data
    assert data["type"] == "mem"


def test_unknown_node_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="bogus"):
        serde.node_from_dict({"type": "bogus"})
