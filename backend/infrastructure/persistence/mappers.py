"""
Aggregate <-> JSON document mapping.

Domain types are plain dataclasses, so one generic mapper driven by their
type hints covers the whole Project aggregate. Fields starting with an
underscore (pending domain events) are not persisted.
"""

from dataclasses import fields, is_dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Type, TypeVar, Union, get_args, get_origin, get_type_hints
from uuid import UUID

from domain.project.aggregates import Project

T = TypeVar('T')


# =============================================================================
# ENCODE
# =============================================================================

def encode(value: Any) -> Any:
    """Turn a domain value into JSON-compatible data."""
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value):
        return {
            f.name: encode(getattr(value, f.name))
            for f in fields(value)
            if not f.name.startswith('_')
        }
    if isinstance(value, (list, tuple)):
        return [encode(v) for v in value]
    if isinstance(value, dict):
        return {str(k): encode(v) for k, v in value.items()}
    raise TypeError(f"Cannot encode {type(value).__name__}")


# =============================================================================
# DECODE
# =============================================================================

@lru_cache(maxsize=None)
def _hints(cls) -> Dict[str, Any]:
    return get_type_hints(cls)


def decode(hint: Any, raw: Any) -> Any:
    """Rebuild a value of type ``hint`` from JSON data."""
    if raw is None or hint is Any:
        return raw

    origin = get_origin(hint)
    args = get_args(hint)

    if origin is Union:
        options = [a for a in args if a is not type(None)]
        return decode(options[0], raw) if len(options) == 1 else raw
    if origin is list:
        return [decode(args[0], v) for v in raw] if args else list(raw)
    if origin is tuple:
        item_hint = args[0] if args else Any
        return tuple(decode(item_hint, v) for v in raw)
    if origin is dict:
        value_hint = args[1] if args else Any
        return {k: decode(value_hint, v) for k, v in raw.items()}

    if is_dataclass(hint):
        return from_dict(hint, raw)
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(raw)
    if hint is Decimal:
        return Decimal(str(raw))
    if hint is UUID:
        return UUID(str(raw))
    if hint is datetime:
        return datetime.fromisoformat(raw)
    return raw


def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
    hints = _hints(cls)
    kwargs = {}
    for f in fields(cls):
        if f.name.startswith('_') or not f.init or f.name not in data:
            continue
        kwargs[f.name] = decode(hints[f.name], data[f.name])
    return cls(**kwargs)


# =============================================================================
# PROJECT
# =============================================================================

def to_document(project: Project) -> Dict[str, Any]:
    return encode(project)


def from_document(document: Dict[str, Any]) -> Project:
    return from_dict(Project, document)
