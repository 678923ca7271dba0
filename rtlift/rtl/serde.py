from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict

from ..machine import InstrClass
from . import ast

_KIND = "type"

_NODES = {
    cls.__name__.lower(): cls
    for cls in (
        ast.Const,
        ast.Addr,
        ast.Reg,
        ast.FlagGroup,
        ast.Mem,
        ast.UnOp,
        ast.BinOp,
        ast.Slice,
        ast.CondCode,
        ast.Intrinsic,
        ast.Assign,
        ast.Store,
        ast.Branch,
        ast.Goto,
        ast.Call,
        ast.Return,
        ast.If,
        ast.SideEffect,
        ast.Nop,
        ast.Invalid,
    )
}


def _value_to_json(value: Any) -> Any:
    if dataclasses.is_dataclass(value):
        return node_to_dict(value)
    if isinstance(value, tuple):
        return [_value_to_json(item) for item in value]
    return value


def node_to_dict(node: Any) -> Dict[str, Any]:
    kind = type(node).__name__.lower()
    if kind not in _NODES:
        raise TypeError(f"Unsupported RTL node: {node!r}")
    data: Dict[str, Any] = {_KIND: kind}
    for f in dataclasses.fields(node):
        value = getattr(node, f.name)
        if value is None:
            continue
        data[f.name] = _value_to_json(value)
    return data


def _value_from_json(value: Any) -> Any:
    if isinstance(value, dict):
        return node_from_dict(value)
    if isinstance(value, list):
        return tuple(_value_from_json(item) for item in value)
    return value


def node_from_dict(data: Dict[str, Any]) -> Any:
    payload = dict(data)
    kind = payload.pop(_KIND)
    try:
        cls = _NODES[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown RTL node type: {kind}") from exc
    return cls(**{key: _value_from_json(value) for key, value in payload.items()})


def cluster_to_dict(cluster: ast.RtlCluster) -> Dict[str, Any]:
    return {
        "address": cluster.address,
        "length": cluster.length,
        "iclass": int(cluster.iclass),
        "instructions": [node_to_dict(stmt) for stmt in cluster.instructions],
    }


def cluster_from_dict(data: Dict[str, Any]) -> ast.RtlCluster:
    return ast.RtlCluster(
        address=data["address"],
        length=data["length"],
        iclass=InstrClass(data["iclass"]),
        instructions=tuple(node_from_dict(stmt) for stmt in data["instructions"]),
    )


def to_json(cluster: ast.RtlCluster, *, indent: int | None = 2) -> str:
    return json.dumps(cluster_to_dict(cluster), indent=indent, sort_keys=True)


def from_json(payload: str) -> ast.RtlCluster:
    return cluster_from_dict(json.loads(payload))


__all__ = [
    "cluster_from_dict",
    "cluster_to_dict",
    "from_json",
    "node_from_dict",
    "node_to_dict",
    "to_json",
]
