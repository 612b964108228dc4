"""Backend change notifications and the single merge reducer.

Events are applied in receipt order. There is no deduplication and no
conflict resolution: the last event for an id wins.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, Union

from directory_api.mapping import banner_from_row, hospital_from_row
from directory_api.models import BANNERS_TABLE, HOSPITALS_TABLE, HeroBanner, Hospital


class Identified(Protocol):
    @property
    def id(self) -> str: ...


R = TypeVar("R", bound=Identified)


class ChangeEventError(ValueError):
    pass


@dataclass(frozen=True)
class Inserted:
    table: str
    record: Hospital | HeroBanner


@dataclass(frozen=True)
class Updated:
    table: str
    record: Hospital | HeroBanner


@dataclass(frozen=True)
class Deleted:
    table: str
    record_id: str


ChangeEvent = Union[Inserted, Updated, Deleted]

_ROW_MAPPERS = {
    HOSPITALS_TABLE: hospital_from_row,
    BANNERS_TABLE: banner_from_row,
}


def apply_change(records: Sequence[R], event: ChangeEvent, *, insert_at_head: bool = True) -> list[R]:
    if isinstance(event, Inserted):
        if insert_at_head:
            return [event.record, *records]
        return [*records, event.record]
    if isinstance(event, Updated):
        return [event.record if item.id == event.record.id else item for item in records]
    if isinstance(event, Deleted):
        return [item for item in records if item.id != event.record_id]
    raise ChangeEventError(f"unsupported change event: {event!r}")


def parse_change_event(payload: Mapping[str, Any]) -> ChangeEvent:
    """Decode a database webhook body into a change event.

    Expected shape: ``{"type", "table", "record", "old_record"}`` where
    ``record`` carries the new row and ``old_record`` the deleted one.
    """
    table = str(payload.get("table", ""))
    mapper = _ROW_MAPPERS.get(table)
    if mapper is None:
        raise ChangeEventError(f"unsupported table: {table or '<missing>'}")

    event_type = str(payload.get("type", "")).upper()
    if event_type in {"INSERT", "UPDATE"}:
        row = payload.get("record")
        if not isinstance(row, Mapping) or "id" not in row:
            raise ChangeEventError(f"{event_type} event requires a record with an id")
        try:
            record = mapper(row)
        except (TypeError, ValueError) as exc:
            raise ChangeEventError(f"{event_type} event has a malformed {table} record: {exc}") from exc
        return Inserted(table, record) if event_type == "INSERT" else Updated(table, record)
    if event_type == "DELETE":
        old_row = payload.get("old_record")
        if not isinstance(old_row, Mapping) or "id" not in old_row:
            raise ChangeEventError("DELETE event requires an old_record with an id")
        return Deleted(table, str(old_row["id"]))
    raise ChangeEventError(f"unsupported event type: {event_type or '<missing>'}")
