"""
Postbridge - Builder state.

Plain record accumulated by QueryBuilder and consumed once by the executor.
"""

from dataclasses import dataclass, field
from enum import Enum

from postbridge.db.models import CountMode, Payload


class Intent(str, Enum):
    """What a builder will do when executed."""

    READ = "read"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


# First match wins when a caller sets more than one mutation
INTENT_PRECEDENCE = (Intent.INSERT, Intent.UPDATE, Intent.DELETE)


@dataclass
class QueryState:
    """Everything a builder has accumulated for one request."""

    resource: str
    select: str = "*"
    count: CountMode | None = None
    head: bool = False

    # (column or group key, wire value) in call order
    filters: list[tuple[str, str]] = field(default_factory=list)
    # "column.asc" / "column.desc", highest priority first
    order: list[str] = field(default_factory=list)
    limit: int | None = None
    offset: int | None = None

    insert: Payload | None = None
    update: Payload | None = None
    delete: bool = False

    def requested_intents(self) -> list[Intent]:
        """Mutations that were set, in precedence order."""
        flags = {
            Intent.INSERT: self.insert is not None,
            Intent.UPDATE: self.update is not None,
            Intent.DELETE: self.delete,
        }
        return [intent for intent in INTENT_PRECEDENCE if flags[intent]]

    @property
    def intent(self) -> Intent:
        requested = self.requested_intents()
        return requested[0] if requested else Intent.READ
