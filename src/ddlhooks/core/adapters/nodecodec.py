"""JSON decoding of command nodes.

A node is a JSON object whose "node" key names the class, e.g.::

    {"node": "DropStmt", "remove_type": "TABLE",
     "objects": [["t1"], ["t2"]], "missing_ok": true}

Nested helper values (RangeVar, TypeName, ColumnDef, ...) are objects too.
The "node" key is only required where a field accepts several classes,
like the elements of CreateStmt.table_elts. Enums accept either their value
("FOREIGN TABLE") or their member name ("FOREIGN_TABLE").
"""

from __future__ import annotations

import dataclasses
import json
import types
import typing
from enum import Enum
from pathlib import Path
from typing import Any, Union

from ddlhooks.core import nodes as n

_KEY = "node"


def _dataclass_types() -> dict[str, type]:
    return {
        name: obj
        for name, obj in vars(n).items()
        if isinstance(obj, type) and dataclasses.is_dataclass(obj)
    }


_TYPES = _dataclass_types()


class NodeDecodeError(ValueError):
    """Raised when a JSON document does not describe a valid node."""


def _decode_enum(cls: type[Enum], value: Any) -> Enum:
    try:
        return cls(value)
    except ValueError:
        pass
    if isinstance(value, str):
        key = value.strip().upper().replace(" ", "_")
        if key in cls.__members__:
            return cls.__members__[key]
        try:
            return cls(value.strip().upper())
        except ValueError:
            pass
    raise NodeDecodeError(f"invalid {cls.__name__}: {value!r}")


def _decode_object(data: dict[str, Any], cls: type | None) -> Any:
    name = data.get(_KEY)
    if name is not None:
        cls = _TYPES.get(name)
        if cls is None:
            raise NodeDecodeError(f"unknown node type {name!r}")
    if cls is None:
        raise NodeDecodeError(f"object without a {_KEY!r} key: {data!r}")

    hints = typing.get_type_hints(cls, vars(n))
    kwargs = {}
    known = {f.name for f in dataclasses.fields(cls)}
    for key, value in data.items():
        if key == _KEY:
            continue
        if key not in known:
            raise NodeDecodeError(f"{cls.__name__} has no field {key!r}")
        kwargs[key] = _decode(value, hints[key])
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise NodeDecodeError(f"invalid {cls.__name__}: {exc}") from exc


def _decode_untyped(value: Any) -> Any:
    # payload fields (AlterTableCmd.definition, DefElem.arg, expressions)
    if isinstance(value, dict) and _KEY in value:
        return _decode_object(value, None)
    if isinstance(value, list):
        return tuple(_decode_untyped(item) for item in value)
    return value


def _decode(value: Any, hint: Any) -> Any:
    if value is None:
        return None
    if hint is Any:
        return _decode_untyped(value)

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin in (Union, types.UnionType):
        arms = [a for a in args if a is not type(None)]
        if isinstance(value, dict) and _KEY in value:
            return _decode_object(value, None)
        classes = [a for a in arms if dataclasses.is_dataclass(a)]
        if isinstance(value, dict) and len(classes) == 1:
            return _decode_object(value, classes[0])
        if isinstance(value, dict) and classes:
            raise NodeDecodeError(f"ambiguous object, add a {_KEY!r} key: {value!r}")
        if len(arms) == 1:
            return _decode(value, arms[0])
        return value

    if origin is tuple:
        if not isinstance(value, (list, tuple)):
            raise NodeDecodeError(f"expected a list, got {value!r}")
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(_decode(item, args[0]) for item in value)
        return tuple(_decode(item, arg) for item, arg in zip(value, args))

    if origin is frozenset:
        return frozenset(_decode(item, args[0]) for item in value)

    if isinstance(hint, type):
        if issubclass(hint, Enum):
            return _decode_enum(hint, value)
        if dataclasses.is_dataclass(hint):
            if isinstance(value, hint):
                return value
            if not isinstance(value, dict):
                raise NodeDecodeError(f"expected an object for {hint.__name__}")
            return _decode_object(value, hint)
    return value


def decode_node(data: dict[str, Any]) -> n.Node:
    """Build a statement node from its JSON object form."""
    if not isinstance(data, dict):
        raise NodeDecodeError("a command node must be a JSON object")
    node = _decode_object(data, None)
    if not isinstance(node, n.Node):
        raise NodeDecodeError(f"{type(node).__name__} is not a statement")
    return node


def load_node(path: Path) -> n.Node:
    """Read a statement node from a JSON file."""
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise NodeDecodeError(f"{path}: {exc}") from exc
    return decode_node(data)


def encode_node(value: Any) -> Any:
    """Inverse of decode_node, producing plain JSON-compatible values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {_KEY: type(value).__name__}
        for f in dataclasses.fields(value):
            out[f.name] = encode_node(getattr(value, f.name))
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (tuple, list)):
        return [encode_node(item) for item in value]
    if isinstance(value, frozenset):
        return sorted(encode_node(item) for item in value)
    return value
