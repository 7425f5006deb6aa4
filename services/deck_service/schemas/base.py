"""Shared schema base for the persisted state tree.

The persisted layout uses camelCase keys, so every schema serialises by alias
while still accepting snake_case field names from Python callers.
"""

import uuid
from collections.abc import Iterable, Iterator, MutableSet
from typing import Any

from pydantic import BaseModel, ConfigDict, GetCoreSchemaHandler
from pydantic.alias_generators import to_camel
from pydantic_core import core_schema


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_camel_dict(self, **kwargs) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class OrderedIdSet(MutableSet):
    """A set of ids that remembers insertion order.

    Compares equal to a plain ``set`` with the same members, and persists as a
    JSON array in the order the ids were added.
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: dict[str, None] = dict.fromkeys(ids)

    def __contains__(self, item: object) -> bool:
        return item in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, value: str) -> None:
        self._ids[value] = None

    def discard(self, value: str) -> None:
        self._ids.pop(value, None)

    def __repr__(self) -> str:
        return f"OrderedIdSet({list(self._ids)!r})"

    @classmethod
    def _validate(cls, value: Any) -> "OrderedIdSet":
        if isinstance(value, cls):
            return value
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise ValueError("Expected an array of ids")
        ids = list(value)
        if not all(isinstance(i, str) for i in ids):
            raise ValueError("Ids must be strings")
        return cls(ids)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                list,
                return_schema=core_schema.list_schema(core_schema.str_schema()),
            ),
        )


def new_id(prefix: str) -> str:
    """Generate an entity id such as ``prod-3f9a1c2b7d4e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"
