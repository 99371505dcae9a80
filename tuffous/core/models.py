import dataclasses
import hashlib
from datetime import date, datetime

from ..lib import clock
from .errors import ValidationError

EXCLUDE_MARK = "!"


def _hash64(text: str) -> int:
    return int(hashlib.sha256(text.encode()).hexdigest()[:16], 16)


def make_id(name: str, created: datetime) -> int:
    """Derive a 64-bit id from the name and creation time.

    Not collision-proof; good enough for a personal store.
    """
    return _hash64(f"{_hash64(name)}{_hash64(created.isoformat())}")


@dataclasses.dataclass
class TodoMetadata:
    name: str
    details: str = ""


@dataclasses.dataclass(eq=False)
class Todo:
    id: int
    creation_date: datetime
    metadata: TodoMetadata
    completed: bool = False
    deadline: datetime | None = None
    scheduled_date: date | None = None
    parents: list[int] = dataclasses.field(default_factory=list)
    tags: list[str] = dataclasses.field(default_factory=list)
    weight: int = 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Todo):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def details(self) -> str:
        return self.metadata.details

    def rename(self, name: str) -> None:
        if not name or not name.strip():
            raise ValidationError("Name cannot be empty or whitespace-only")
        self.metadata.name = name

    def set_weight(self, weight: int) -> None:
        if weight < 1:
            raise ValidationError(f"Weight must be a positive integer, got {weight}")
        self.weight = weight

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def remove_tag(self, tag: str) -> None:
        if tag in self.tags:
            self.tags.remove(tag)

    def toggle_tag(self, spec: str) -> None:
        """Apply one tag edit: 'x' adds x, 'x!' or '!x' removes it."""
        if spec.endswith(EXCLUDE_MARK):
            self.remove_tag(spec[: -len(EXCLUDE_MARK)])
        elif spec.startswith(EXCLUDE_MARK):
            self.remove_tag(spec[len(EXCLUDE_MARK) :])
        else:
            self.add_tag(spec)


def create(name: str, created: datetime | None = None) -> Todo:
    if not name or not name.strip():
        raise ValidationError("Name cannot be empty or whitespace-only")
    created = created or clock.now()
    return Todo(
        id=make_id(name, created),
        creation_date=created,
        metadata=TodoMetadata(name=name),
    )
