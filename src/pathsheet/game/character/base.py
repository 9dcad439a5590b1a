"""Base Pydantic model shared by every character record type."""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

RecordT = TypeVar("RecordT", bound="RecordModel")


class RecordModel(BaseModel):
    """Immutable record with camelCase aliases matching the stored JSON shape."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump the record in its JSON wire format (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def with_changes(record: RecordT, **changes: Any) -> RecordT:
    """Return a copy of ``record`` with the given fields replaced.

    Changed values are re-validated, so nested dictionaries are accepted
    wherever the field expects a record.
    """
    data = record.model_dump()
    data.update(changes)
    return type(record).model_validate(data)
