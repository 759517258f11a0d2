"""Base class module"""

from __future__ import annotations

from dataclasses import MISSING, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Mapping,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

T = TypeVar("T", bound="BaseModel")


class BaseModel:
    """
    Lightweight base with to_dict / from_dict.
    - DATE_FORMAT_MAP:    output formats per field (strftime on serialize)
    - DATE_INPUT_FORMATS: list of accepted input formats per field (for parse)
    """

    DATE_FORMAT_MAP: ClassVar[Dict[str, str]] = {}
    DATE_INPUT_FORMATS: ClassVar[Dict[str, List[str]]] = {}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):  # type: ignore
            out[f.name] = self._serialize_value(f.name, getattr(self, f.name))
        return out

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        hints = get_type_hints(cls)
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):  # type: ignore
            name = f.name
            if name in data:
                kwargs[name] = cls._deserialize_value(name, data[name], hints.get(name, Any))
            elif f.default is MISSING and f.default_factory is MISSING:  # type: ignore[misc]
                kwargs[name] = None
        return cls(**kwargs)  # type: ignore[call-arg]

    # --- internals ---
    def _serialize_value(self, name: str, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, (date, datetime)):
            fmt = (self.DATE_FORMAT_MAP or {}).get(name)
            return value.strftime(fmt) if fmt else value.isoformat()
        if is_dataclass(value):
            if hasattr(value, "to_dict"):
                return value.to_dict()  # type: ignore
            return {
                f.name: self._serialize_value(f.name, getattr(value, f.name))
                for f in fields(value)
            }
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(name, v) for v in value]
        if isinstance(value, dict):
            return {k: self._serialize_value(name, v) for k, v in value.items()}
        return value

    @classmethod
    def _deserialize_value(cls, name: str, value: Any, typ: Any) -> Any:
        if value is None:
            return None

        origin = get_origin(typ)

        # Optional[X] / X | None
        if origin is Union or (origin is not None and type(None) in get_args(typ)):
            args = [a for a in get_args(typ) if a is not type(None)]
            if len(args) == 1:
                return cls._deserialize_value(name, value, args[0])
            return value

        if isinstance(typ, type) and issubclass(typ, Enum):
            return typ(value)

        if typ is date or typ is datetime:
            if isinstance(value, typ):
                return value
            formats = list((cls.DATE_INPUT_FORMATS or {}).get(name, []))
            if fmt_out := (cls.DATE_FORMAT_MAP or {}).get(name):
                formats.append(fmt_out)
            for fmt in formats:
                try:
                    parsed = datetime.strptime(value, fmt)
                except (ValueError, TypeError):
                    continue
                return parsed if typ is datetime else parsed.date()
            try:
                return typ.fromisoformat(value)
            except (ValueError, TypeError) as exc:
                raise ValueError(f"Invalid date for field '{name}': {value!r}") from exc

        if hasattr(typ, "from_dict") and isinstance(value, Mapping):
            return typ.from_dict(value)

        if origin in (list, List, tuple):
            inner = get_args(typ)[0] if get_args(typ) else Any
            return [cls._deserialize_value(name, v, inner) for v in value]

        if origin in (dict, Dict):
            val_type = get_args(typ)[1] if len(get_args(typ)) == 2 else Any
            return {k: cls._deserialize_value(name, v, val_type) for k, v in value.items()}

        return value
