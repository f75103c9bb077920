"""Convert result dataclasses to the camelCase JSON shape clients consume."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_camel_dict(value: Any) -> Any:
    """Recursively serialize dataclasses, enums, lists and dicts.

    Dataclass field names become camelCase; dict keys are kept as-is.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {
            camel_case(f.name): to_camel_dict(getattr(value, f.name))
            for f in fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_camel_dict(v) for v in value]
    if isinstance(value, dict):
        return {
            (k.value if isinstance(k, Enum) else k): to_camel_dict(v)
            for k, v in value.items()
        }
    return value
