"""
Serialization helpers for decoded DMM objects (DMM, Datum, Literal).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Keys are written in their text form ("aab") and coordinates as "x,y,z"
strings so the output stays valid JSON/YAML mapping keys. Mappings are
written in insertion order, so grid iteration order survives a round trip.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Tuple

import yaml

from dmm.keys import Key
from dmm.literals import Literal, Number, Float, Text, Path, ListLiteral
from dmm.model import DMM, Datum


def literal_to_dict(lit: Literal) -> Dict[str, Any]:
    if isinstance(lit, Number):
        return {"type": "number", "value": lit.value}
    if isinstance(lit, Float):
        return {"type": "float", "value": lit.value}
    if isinstance(lit, Text):
        return {"type": "text", "value": lit.value}
    if isinstance(lit, Path):
        return {"type": "path", "value": lit.value}
    if isinstance(lit, ListLiteral):
        return {"type": "list", "value": lit.text}
    raise TypeError(f"Unsupported Literal type: {type(lit)}")


def literal_from_dict(d: Dict[str, Any]) -> Literal:
    t = d.get("type")
    if t == "number":
        return Number(int(d["value"]))
    if t == "float":
        return Float(float(d["value"]))
    if t == "text":
        return Text(d["value"])
    if t == "path":
        return Path(d["value"])
    if t == "list":
        return ListLiteral(d["value"])
    raise TypeError(f"Unsupported literal dict type: {t}")


def datum_to_dict(datum: Datum) -> Dict[str, Any]:
    return {
        "path": datum.path,
        "var_edits": {name: literal_to_dict(v) for name, v in datum.var_edits.items()},
    }


def datum_from_dict(d: Dict[str, Any]) -> Datum:
    return Datum(
        path=d["path"],
        var_edits={name: literal_from_dict(v) for name, v in d.get("var_edits", {}).items()},
    )


def coords_to_str(coords: Tuple[int, int, int]) -> str:
    return ",".join(str(c) for c in coords)


def coords_from_str(s: str) -> Tuple[int, int, int]:
    parts = [int(p) for p in s.split(",")]
    if len(parts) != 3:
        raise ValueError(f"Expected 'x,y,z' coordinates, got {s!r}")
    return (parts[0], parts[1], parts[2])


def dmm_to_dict(dmm: DMM) -> Dict[str, Any]:
    return {
        "dictionary": {
            str(key): [datum_to_dict(d) for d in datums]
            for key, datums in dmm.dictionary.items()
        },
        "grid": {
            coords_to_str(coords): [str(k) for k in keys]
            for coords, keys in dmm.grid.items()
        },
    }


def dmm_from_dict(d: Dict[str, Any]) -> DMM:
    dictionary = {
        Key.from_str(code): [datum_from_dict(x) for x in datums]
        for code, datums in d.get("dictionary", {}).items()
    }
    grid = {
        coords_from_str(coords): [Key.from_str(code) for code in keys]
        for coords, keys in d.get("grid", {}).items()
    }
    return DMM(dictionary=dictionary, grid=grid)


def dmm_to_json(dmm: DMM) -> str:
    return json.dumps(dmm_to_dict(dmm))


def dmm_from_json(s: str) -> DMM:
    d = json.loads(s)
    return dmm_from_dict(d)


def dmm_to_yaml(dmm: DMM) -> str:
    return yaml.safe_dump(dmm_to_dict(dmm), sort_keys=False)


def dmm_from_yaml(s: str) -> DMM:
    d = yaml.safe_load(s)
    return dmm_from_dict(d)
