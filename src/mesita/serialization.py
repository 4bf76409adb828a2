"""JSON round-trip for Mesita model values.

Converts ``TableData``, ``CellRange``, ``TableCellRanges``, ``CellCoords``
and ``ActiveCell`` to/from JSON-compatible dicts. Useful for handing the
structural model to an out-of-process renderer or toolbar, and for
persisting the active cell across a host reload.

All output is deterministic (sorted keys).

Example:
    >>> table = TableData(("A",), ("left",), (("1",),))
    >>> from_json(to_json(table)) == table
    True

Thread Safety:
    All functions are pure, safe to call from any thread.

"""

import json
from dataclasses import fields
from typing import Any

from mesita.errors import SerializationError
from mesita.model import ActiveCell, CellCoords, CellRange, TableCellRanges, TableData

# Registry of type names to classes for deserialization
_MODEL_TYPES: dict[str, type] = {
    "TableData": TableData,
    "CellRange": CellRange,
    "TableCellRanges": TableCellRanges,
    "CellCoords": CellCoords,
    "ActiveCell": ActiveCell,
}

Model = TableData | CellRange | TableCellRanges | CellCoords | ActiveCell


def to_dict(value: Model) -> dict[str, Any]:
    """Convert a model value to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization; tuples
    become lists.
    """
    result: dict[str, Any] = {"_type": type(value).__name__}
    for f in fields(value):
        result[f.name] = _serialize_value(getattr(value, f.name))
    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, tuple(_MODEL_TYPES.values())):
        return to_dict(value)
    if isinstance(value, tuple):
        return [_serialize_value(item) for item in value]
    # Primitives: str, int, None
    return value


def from_dict(data: dict[str, Any]) -> Model:
    """Reconstruct a model value from a dict.

    Raises:
        SerializationError: If ``_type`` is missing or unknown, or the
            fields do not fit the type

    """
    type_name = data.get("_type")
    if type_name is None:
        raise SerializationError("Missing '_type' field in serialized value")

    model_cls = _MODEL_TYPES.get(type_name)
    if model_cls is None:
        raise SerializationError(f"Unknown model type: {type_name!r}")

    kwargs: dict[str, Any] = {}
    for f in fields(model_cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _deserialize_value(data[f.name])

    try:
        return model_cls(**kwargs)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Invalid {type_name} payload: {e}") from e


def _deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if value.get("_type") is not None:
            return from_dict(value)
        return value
    if isinstance(value, list):
        return tuple(_deserialize_value(item) for item in value)
    return value


def to_json(value: Model, *, indent: int | None = None) -> str:
    """Serialize a model value to a JSON string (sorted keys)."""
    return json.dumps(to_dict(value), sort_keys=True, indent=indent)


def from_json(data: str) -> Model:
    """Deserialize a model value from a JSON string.

    Raises:
        SerializationError: If the JSON is malformed or not a model value

    """
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise SerializationError(f"Expected a JSON object, got {type(raw).__name__}")
    return from_dict(raw)


__all__ = ["from_dict", "from_json", "to_dict", "to_json"]
