from datetime import date, datetime
from typing import Any

from tuffous.core.models import Todo, TodoMetadata

TodoRecord = dict[str, Any]


def _parse_date(val) -> date | None:
    """Parse a date value that may be an ISO string or numeric timestamp."""
    if isinstance(val, str) and val:
        return date.fromisoformat(val.split("T")[0])
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return datetime.fromtimestamp(val).date()
    return None


def _parse_datetime(val) -> datetime:
    """Parse a required datetime; a bare date means midnight."""
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return datetime.fromtimestamp(val)
    if isinstance(val, str) and val:
        try:
            return datetime.fromisoformat(val)
        except ValueError:
            return datetime.combine(date.fromisoformat(val), datetime.min.time())
    raise ValueError(f"invalid timestamp: {val!r}")


def _parse_datetime_optional(val) -> datetime | None:
    if val is None or val == "":
        return None
    return _parse_datetime(val)


def _parse_ids(val) -> list[int]:
    if val is None:
        return []
    if not isinstance(val, list):
        raise ValueError(f"expected a list of ids, got {type(val).__name__}")
    return list(dict.fromkeys(int(v) for v in val))


def _parse_tags(val) -> list[str]:
    if val is None:
        return []
    if not isinstance(val, list):
        raise ValueError(f"expected a list of tags, got {type(val).__name__}")
    return list(dict.fromkeys(str(v) for v in val))


def record_to_todo(record: TodoRecord) -> Todo:
    """
    Converts one decoded record file into a Todo.
    Accepts the legacy keys 'dependents' (parents) and 'time' (scheduled date).
    Raises ValueError, KeyError or TypeError on malformed input.
    """
    if not isinstance(record, dict):
        raise ValueError("record is not an object")
    meta = record.get("metadata") or {}
    if not isinstance(meta, dict):
        raise ValueError("metadata is not an object")
    parents = record["parents"] if "parents" in record else record.get("dependents")
    scheduled = record["scheduled_date"] if "scheduled_date" in record else record.get("time")
    weight = int(record.get("weight", 1))
    return Todo(
        id=int(record["id"]),
        creation_date=_parse_datetime(record["creation_date"]),
        metadata=TodoMetadata(
            name=str(meta.get("name", "")),
            details=str(meta.get("details", "")),
        ),
        completed=bool(record.get("completed", False)),
        deadline=_parse_datetime_optional(record.get("deadline")),
        scheduled_date=_parse_date(scheduled),
        parents=_parse_ids(parents),
        tags=_parse_tags(record.get("tags")),
        weight=weight if weight > 0 else 1,
    )


def todo_to_record(todo: Todo) -> TodoRecord:
    return {
        "id": todo.id,
        "completed": todo.completed,
        "creation_date": todo.creation_date.isoformat(),
        "deadline": todo.deadline.isoformat() if todo.deadline else None,
        "scheduled_date": todo.scheduled_date.isoformat() if todo.scheduled_date else None,
        "parents": list(todo.parents),
        "tags": list(todo.tags),
        "weight": todo.weight,
        "metadata": {"name": todo.metadata.name, "details": todo.metadata.details},
    }
