"""
Debug trace for signing and dispatch steps.

A trace belongs to exactly one logical request and is filled sequentially, so
it needs no locking. Entries are only ever appended.
"""
import uuid
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class TraceEntry:
    """
    A single recorded step.

    Attributes:
        stage: Stage tag (e.g. 'signature_generated', 'attempt_failed')
        timestamp: ISO-8601 time the step was recorded
        error: Error description, if the step failed
        details: Extra diagnostic fields (never secrets)
    """
    stage: str
    timestamp: str
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {'step': self.stage, 'timestamp': self.timestamp}
        if self.error is not None:
            data['error'] = self.error
        data.update(self.details)
        return data


class DebugTrace:
    """Append-only ordered log returned to the caller alongside a result."""

    def __init__(self, request_id: Optional[str] = None):
        """
        Initialize an empty trace.

        Args:
            request_id: Correlation id (random 9-character id if omitted)
        """
        self.request_id = request_id or uuid.uuid4().hex[:9]
        self.started_at = _utc_now()
        self._entries: List[TraceEntry] = []

    def record(self, stage: str, error: Optional[str] = None, **details: Any) -> TraceEntry:
        """
        Append a step.

        Args:
            stage: Stage tag
            error: Optional error description
            **details: Extra diagnostic fields

        Returns:
            The recorded entry
        """
        entry = TraceEntry(stage=stage, timestamp=_utc_now(), error=error, details=dict(details))
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> Tuple[TraceEntry, ...]:
        """Snapshot of the recorded entries in order."""
        return tuple(self._entries)

    def stages(self) -> List[str]:
        return [entry.stage for entry in self._entries]

    def last_error(self) -> Optional[str]:
        """Most recent error recorded, if any."""
        for entry in reversed(self._entries):
            if entry.error is not None:
                return entry.error
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self.entries)

    def to_dict(self) -> dict:
        """
        Convert to dictionary for JSON responses.

        Returns:
            Dictionary with request id, start time and ordered steps
        """
        return {
            'requestId': self.request_id,
            'timestamp': self.started_at,
            'steps': [entry.to_dict() for entry in self._entries]
        }
