from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

Accessor = Callable[[Any], Any]


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"


def get_value(record: Any, path: str) -> Any:
    """Read ``path`` from a mapping or an object; dotted paths walk nested JSON.

    Missing keys, missing attributes and ``None`` along the way all yield ``None``.
    """
    current = record
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


@dataclass(frozen=True)
class Field:
    name: str
    kind: FieldKind = FieldKind.TEXT
    label: str = ""
    accessor: Optional[Accessor] = None

    def value(self, record: Any) -> Any:
        if self.accessor is not None:
            return self.accessor(record)
        return get_value(record, self.name)

    @property
    def title(self) -> str:
        return self.label or self.name.replace("_", " ").title()


def text_field(name: str, label: str = "", accessor: Optional[Accessor] = None) -> Field:
    return Field(name=name, kind=FieldKind.TEXT, label=label, accessor=accessor)


def number_field(name: str, label: str = "", accessor: Optional[Accessor] = None) -> Field:
    return Field(name=name, kind=FieldKind.NUMBER, label=label, accessor=accessor)


def date_field(name: str, label: str = "", accessor: Optional[Accessor] = None) -> Field:
    return Field(name=name, kind=FieldKind.DATE, label=label, accessor=accessor)
