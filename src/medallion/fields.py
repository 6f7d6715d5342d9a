"""Merging of fixed fields with caller-defined fields.

Both the header and the payload are serialized as a single flat JSON object
that combines a fixed set of fields known to Medallion with arbitrary fields
defined by the caller. The caller's fields may be any type that Pydantic can
validate and serialize to a JSON object: a Pydantic model, a dataclass, a
`~typing.TypedDict`, or a plain `dict`.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .exceptions import EncodeError

__all__ = [
    "dump_fields",
    "merge_fields",
    "validate_fields",
]


def dump_fields(value: Any, kind: str) -> dict[str, Any]:
    """Serialize caller-defined fields to a JSON-compatible object.

    Parameters
    ----------
    value
        Caller-defined fields.
    kind
        Description of the fields for error messages.

    Returns
    -------
    dict of Any
        JSON-compatible representation of the fields.

    Raises
    ------
    medallion.exceptions.EncodeError
        Raised if the value cannot be serialized or doesn't serialize to a
        JSON object.
    """
    try:
        adapter: TypeAdapter[Any] = TypeAdapter(type(value))
        dumped = adapter.dump_python(value, mode="json", by_alias=True)
    except (PydanticSerializationError, PydanticUserError) as e:
        raise EncodeError(f"Cannot serialize {kind}: {e}") from e
    if not isinstance(dumped, dict):
        msg = f"{kind.capitalize()} must serialize to a JSON object"
        raise EncodeError(msg)
    return dumped


def merge_fields(
    fixed: Mapping[str, Any],
    extra: Any | None,
    *,
    reserved: Collection[str],
    kind: str,
) -> dict[str, Any]:
    """Merge fixed fields and caller-defined fields into one object.

    Parameters
    ----------
    fixed
        JSON-compatible fixed fields.
    extra
        Caller-defined fields, or `None` if there are none.
    reserved
        Names of all fixed fields, whether or not they are present.
    kind
        Description of the caller-defined fields for error messages.

    Returns
    -------
    dict of Any
        Union of the fixed and caller-defined fields.

    Raises
    ------
    medallion.exceptions.EncodeError
        Raised if the caller-defined fields cannot be serialized to a JSON
        object or use the name of a fixed field.
    """
    merged = dict(fixed)
    if extra is None:
        return merged
    dumped = dump_fields(extra, kind)
    if conflicts := sorted(set(dumped) & set(reserved)):
        msg = f"{kind.capitalize()} conflict with fixed fields: {conflicts}"
        raise EncodeError(msg)
    merged.update(dumped)
    return merged


def validate_fields[T](data: Mapping[str, Any], model: type[T]) -> T | None:
    """Recover caller-defined fields from a decoded object.

    The whole object, including fixed fields, is validated against the
    caller's type. Failure is not an error, since the caller's fields are
    optional.

    Parameters
    ----------
    data
        Decoded JSON object.
    model
        Type of the caller-defined fields.

    Returns
    -------
    Any or None
        The validated fields, or `None` if the object doesn't validate.
    """
    adapter = TypeAdapter(model)
    try:
        return adapter.validate_python(data)
    except ValidationError:
        return None
