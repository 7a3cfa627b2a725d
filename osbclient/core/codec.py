"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Version-aware JSON codec for broker message records.

Every message record is a dataclass whose fields are declared with
:func:`wire_field`. The field metadata is the single gating table consulted
by the request builder and the response interpreter:

- ``name``: JSON key on the wire (defaults to the attribute name)
- ``location``: where the value travels in a request: ``body``, ``path``,
  ``query`` or ``none`` (carried out of band, e.g. as a header)
- ``required``: must be non-empty before a request is sent
- ``min_version``: lowest API version in which the field exists
- ``alpha``: only exchanged when alpha features are enabled
"""

import dataclasses
import json
import typing
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from osbclient.core.version import APIVersion
from osbclient.exceptions import DecodeError, RequestEncodingError

T = TypeVar("T")

BODY = "body"
PATH = "path"
QUERY = "query"
NONE = "none"

_NoneType = type(None)


def wire_field(
    name: Optional[str] = None,
    *,
    location: str = BODY,
    required: bool = False,
    min_version: Optional[APIVersion] = None,
    alpha: bool = False,
    strict: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
):
    """
    Declare a message field together with its wire gating rules.

    Required request fields default to ``""`` so that an unset identifier is
    reported by validation rather than by the constructor. ``strict`` fields
    get no default and must be present when decoding a response.
    """
    metadata = {
        "wire_name": name,
        "location": location,
        "required": required,
        "min_version": min_version,
        "alpha": alpha,
    }
    if default is dataclasses.MISSING and default_factory is dataclasses.MISSING and not strict:
        default = "" if required else None
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata)


def wire_name(f: dataclasses.Field) -> str:
    return f.metadata.get("wire_name") or f.name


def location(f: dataclasses.Field) -> str:
    return f.metadata.get("location", BODY)


def is_allowed(f: dataclasses.Field, version: APIVersion, alpha_enabled: bool) -> bool:
    """Whether a field may be exchanged at the given version and alpha setting."""
    min_version = f.metadata.get("min_version")
    if min_version is not None and not version.at_least(min_version):
        return False
    if f.metadata.get("alpha") and not alpha_enabled:
        return False
    return True


def required_fields(record: Any):
    """Yield (wire name, value) for every required field of a record."""
    for f in dataclasses.fields(record):
        if f.metadata.get("required"):
            yield wire_name(f), getattr(record, f.name)


def fields_at(record: Any, where: str):
    """Yield the dataclass fields of ``record`` that travel in ``where``."""
    for f in dataclasses.fields(record):
        if location(f) == where:
            yield f


# Encoding

def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (dict, list, str)) and len(value) == 0)


def encode_value(value: Any, version: APIVersion, alpha_enabled: bool) -> Any:
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_wire(value, version, alpha_enabled)
    if isinstance(value, list):
        return [encode_value(v, version, alpha_enabled) for v in value]
    if isinstance(value, dict):
        return {k: encode_value(v, version, alpha_enabled) for k, v in value.items()}
    return value


def to_wire(
    record: Any,
    version: APIVersion,
    alpha_enabled: bool,
    where: Optional[str] = BODY,
) -> Dict[str, Any]:
    """
    Convert a record into a JSON-ready dict.

    Only fields at ``where`` are emitted (all fields when ``where`` is None).
    Fields gated above ``version`` or behind the alpha flag are dropped, as
    are unset and empty values, with the exception of required fields.
    """
    out: Dict[str, Any] = {}
    for f in dataclasses.fields(record):
        if where is not None and location(f) != where:
            continue
        if not is_allowed(f, version, alpha_enabled):
            continue
        value = getattr(record, f.name)
        if _is_empty(value) and not f.metadata.get("required"):
            continue
        out[wire_name(f)] = encode_value(value, version, alpha_enabled)
    return out


def dumps(payload: Any) -> bytes:
    """Serialize a JSON-ready payload to bytes."""
    try:
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise RequestEncodingError(f"failed to encode request body: {e}") from e


# Decoding

def loads(body: bytes) -> Any:
    """Parse a JSON response body."""
    try:
        return json.loads(body.decode("utf-8") if isinstance(body, bytes) else body)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(_json_error_text(e, body)) from e


def _json_error_text(e: Exception, body: Any) -> str:
    if not body or (isinstance(body, (bytes, str)) and not body.strip()):
        return "unexpected end of JSON input"
    return str(e)


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not _NoneType]
        if len(args) == 1:
            return args[0]
    return tp


def decode_value(tp: Any, raw: Any, version: APIVersion, alpha_enabled: bool, path: str) -> Any:
    if raw is None:
        return None
    tp = _unwrap_optional(tp)
    # NewType aliases such as OperationKey
    tp = getattr(tp, "__supertype__", tp)
    if tp is Any:
        return raw
    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(raw)
        except ValueError:
            raise DecodeError(f"{path}: unexpected value {raw!r}") from None
    if dataclasses.is_dataclass(tp):
        return from_wire(tp, raw, version, alpha_enabled, path)

    origin = typing.get_origin(tp)
    if origin in (list, typing.List):
        if not isinstance(raw, list):
            raise DecodeError(f"{path}: expected array, got {type(raw).__name__}")
        (item_tp,) = typing.get_args(tp) or (Any,)
        return [
            decode_value(item_tp, item, version, alpha_enabled, f"{path}[{i}]")
            for i, item in enumerate(raw)
        ]
    if origin in (dict, typing.Dict):
        if not isinstance(raw, dict):
            raise DecodeError(f"{path}: expected object, got {type(raw).__name__}")
        return raw

    if tp is bool:
        if not isinstance(raw, bool):
            raise DecodeError(f"{path}: expected boolean, got {type(raw).__name__}")
    elif tp is int:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise DecodeError(f"{path}: expected integer, got {type(raw).__name__}")
    elif tp is float:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise DecodeError(f"{path}: expected number, got {type(raw).__name__}")
    elif tp is str:
        if not isinstance(raw, str):
            raise DecodeError(f"{path}: expected string, got {type(raw).__name__}")
    return raw


def from_wire(
    cls: Type[T],
    data: Any,
    version: APIVersion,
    alpha_enabled: bool,
    path: Optional[str] = None,
) -> T:
    """
    Build a record of type ``cls`` from a decoded JSON object.

    Keys for fields gated above ``version`` or behind the alpha flag are
    ignored even when the broker sent them. Unknown keys are ignored.

    Raises:
        DecodeError: If the data does not match the record's shape
    """
    path = path or cls.__name__
    if not isinstance(data, dict):
        raise DecodeError(f"{path}: expected object, got {type(data).__name__}")

    hints = typing.get_type_hints(cls)
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init or location(f) == NONE:
            continue
        key = wire_name(f)
        has_default = (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        )
        if key not in data or not is_allowed(f, version, alpha_enabled):
            if not has_default:
                raise DecodeError(f"{path}: missing required key '{key}'")
            continue
        kwargs[f.name] = decode_value(hints[f.name], data[key], version, alpha_enabled, f"{path}.{key}")
    return cls(**kwargs)
