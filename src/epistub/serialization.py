"""
Serialization helpers for epistub objects (Declaration, Variable, types).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit:

    {"name": "compute",
     "inputs":  [{"name": "x", "type": "int", "length": 0}, ...],
     "outputs": [{"name": "y", "type": "float", "length": 0}]}

A length of 0 means a scalar.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

import yaml

from epistub.model import Declaration, Variable
from epistub.type_lattice import (
    Custom,
    Float,
    Integer,
    MetaType,
    Primitive,
    Type,
    Vector,
    type_of,
)


def type_to_str(t: Type) -> str:
    if isinstance(t, Integer):
        return "int"
    if isinstance(t, Float):
        return "float"
    if isinstance(t, Custom):
        return t.name
    raise TypeError(f"Unsupported Type: {type(t)}")


def meta_type_to_dict(kind: MetaType) -> Dict[str, Any]:
    if isinstance(kind, Vector):
        return {"type": type_to_str(kind.type), "length": kind.length}
    if isinstance(kind, Primitive):
        return {"type": type_to_str(kind.type), "length": 0}
    raise TypeError(f"Unsupported MetaType: {type(kind)}")


def meta_type_from_dict(d: Dict[str, Any]) -> MetaType:
    base = type_of(d["type"])
    length = d.get("length", 0)
    if length:
        return Vector(base, length)
    return Primitive(base)


def variable_to_dict(v: Variable) -> Dict[str, Any]:
    return {"name": v.name, **meta_type_to_dict(v.kind)}


def variable_from_dict(d: Dict[str, Any]) -> Variable:
    return Variable(name=d["name"], kind=meta_type_from_dict(d))


def declaration_to_dict(decl: Declaration) -> Dict[str, Any]:
    return {
        "name": decl.name,
        "inputs": [variable_to_dict(v) for v in decl.inputs],
        "outputs": [variable_to_dict(v) for v in decl.outputs],
    }


def declaration_from_dict(d: Dict[str, Any]) -> Declaration:
    return Declaration(
        name=d["name"],
        inputs=tuple(variable_from_dict(v) for v in d.get("inputs", [])),
        outputs=tuple(variable_from_dict(v) for v in d.get("outputs", [])),
    )


def declarations_to_json(decls: Sequence[Declaration]) -> str:
    return json.dumps([declaration_to_dict(d) for d in decls], indent=2)


def declarations_from_json(s: str) -> List[Declaration]:
    return [declaration_from_dict(d) for d in json.loads(s)]


def declarations_to_yaml(decls: Sequence[Declaration]) -> str:
    # keep key order so dumps read like the source
    return yaml.safe_dump([declaration_to_dict(d) for d in decls], sort_keys=False)


def declarations_from_yaml(s: str) -> List[Declaration]:
    return [declaration_from_dict(d) for d in (yaml.safe_load(s) or [])]
