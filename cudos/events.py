"""
Event Log & Receipts

Every ledger mutation runs inside an operation opened on the ``EventLog``.
Events emitted while the operation runs are staged and only become
observable once it returns normally, at which point they are committed as
one ``Receipt`` carrying the next sequence number. An operation that raises
commits nothing.

Operations nest: an inner operation joins the outermost one, so a facade
call that drives several components still yields exactly one receipt.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Receipt:
    """
    Committed result of one ledger operation.

    Attributes:
        seq:     Commit sequence number (0 is the construction receipt)
        events:  Events emitted by the operation, in emission order
    """
    seq: int
    events: Tuple[Any, ...] = ()

    @property
    def logs(self) -> Tuple[Any, ...]:
        return self.events

    def find(self, name: str) -> List[Any]:
        """Return the events of this receipt named *name*."""
        return [e for e in self.events if e.name == name]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "events": [e.to_dict() for e in self.events],
        }


class Operation:
    """Handle for an open operation; ``receipt`` is set once it commits."""

    def __init__(self) -> None:
        self.staged: List[Any] = []
        self.receipt: Optional[Receipt] = None


class EventLog:
    """Append-only log of committed receipts."""

    def __init__(self) -> None:
        self._receipts: List[Receipt] = []
        self._current: Optional[Operation] = None

    @contextmanager
    def operation(self) -> Iterator[Operation]:
        if self._current is not None:
            # Nested call: join the outer operation
            yield self._current
            return

        op = Operation()
        self._current = op
        try:
            yield op
        finally:
            self._current = None
        # Only reached when the body returned normally
        op.receipt = Receipt(seq=len(self._receipts), events=tuple(op.staged))
        self._receipts.append(op.receipt)

    def emit(self, event: Any) -> None:
        if self._current is None:
            raise RuntimeError("Events can only be emitted inside an operation")
        self._current.staged.append(event)

    @property
    def in_operation(self) -> bool:
        return self._current is not None

    @property
    def receipts(self) -> List[Receipt]:
        return list(self._receipts)

    @property
    def events(self) -> List[Any]:
        return [e for r in self._receipts for e in r.events]

    @property
    def last_seq(self) -> int:
        """Sequence number of the last committed receipt, -1 if none."""
        return len(self._receipts) - 1

    def __len__(self) -> int:
        return len(self._receipts)

    def __repr__(self) -> str:
        return f"<EventLog receipts={len(self._receipts)}>"
