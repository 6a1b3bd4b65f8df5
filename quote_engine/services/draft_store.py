"""Draft store: durable snapshots of in-progress quote edits, keyed by request."""
import json
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from quote_engine.config.settings import DRAFT_KEY_PREFIX
from quote_engine.services.line_items import LineItem
from quote_engine.services.quote_parameters import QuoteParameters
from quote_engine.utils.error_logger import log_exception
from quote_engine.utils.logger import get_logger

logger = get_logger(__name__)


def draft_key(request_id: str) -> str:
    """Storage key for a request's draft, e.g. quote-draft:<request_id>."""
    return f"{DRAFT_KEY_PREFIX}{request_id}"


@dataclass(frozen=True)
class QuoteDraft:
    """Snapshot of the builder: parameters (including notes) and line items."""
    parameters: QuoteParameters
    line_items: Tuple[LineItem, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "line_items", tuple(self.line_items))

    @property
    def notes(self) -> str:
        return self.parameters.admin_notes

    def to_dict(self) -> Dict[str, Any]:
        data = self.parameters.to_dict()
        data["lineItems"] = [item.to_dict() for item in self.line_items]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuoteDraft":
        """Inverse of to_dict(); saved values come back unchanged."""
        return cls(
            parameters=QuoteParameters.from_draft_dict(data),
            line_items=tuple(LineItem.from_draft_dict(entry) for entry in data.get("lineItems") or []),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "QuoteDraft":
        return cls.from_dict(json.loads(raw))


class DraftStore(ABC):
    """
    Single-slot-per-key snapshot storage.

    save() overwrites, never merges. load() after save() returns an equal
    draft until clear() or another save() on the same key.
    """

    @abstractmethod
    def save(self, request_id: str, draft: QuoteDraft) -> None:
        """Store draft for request_id, replacing any previous one."""

    @abstractmethod
    def load(self, request_id: str) -> Optional[QuoteDraft]:
        """Return the stored draft or None."""

    @abstractmethod
    def clear(self, request_id: str) -> None:
        """Delete the stored draft, if any."""


class InMemoryDraftStore(DraftStore):
    """Dictionary-backed store holding serialized drafts."""

    def __init__(self):
        self._drafts: Dict[str, str] = {}
        self._lock = threading.Lock()

    def save(self, request_id: str, draft: QuoteDraft) -> None:
        with self._lock:
            self._drafts[draft_key(request_id)] = draft.to_json()

    def load(self, request_id: str) -> Optional[QuoteDraft]:
        with self._lock:
            raw = self._drafts.get(draft_key(request_id))
        return QuoteDraft.from_json(raw) if raw is not None else None

    def clear(self, request_id: str) -> None:
        with self._lock:
            self._drafts.pop(draft_key(request_id), None)

    def keys(self):
        with self._lock:
            return list(self._drafts)


class DatabaseDraftStore(DraftStore):
    """Durable store: one quote_drafts row per key, payload as JSON text."""

    def __init__(self, session_factory=None):
        if session_factory is None:
            from quote_engine.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    def save(self, request_id: str, draft: QuoteDraft) -> None:
        from quote_engine.models.quote_draft import QuoteDraftRecord

        db = self._session_factory()
        try:
            key = draft_key(request_id)
            record = db.query(QuoteDraftRecord).filter(QuoteDraftRecord.draft_key == key).first()
            if record is None:
                record = QuoteDraftRecord(draft_key=key, request_id=str(request_id))
                db.add(record)
            record.payload = draft.to_json()
            db.commit()
            logger.debug("Draft saved", extra={"draft_key": key})
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def load(self, request_id: str) -> Optional[QuoteDraft]:
        from quote_engine.models.quote_draft import QuoteDraftRecord

        db = self._session_factory()
        try:
            record = db.query(QuoteDraftRecord).filter(
                QuoteDraftRecord.draft_key == draft_key(request_id)
            ).first()
            if record is None:
                return None
            try:
                return QuoteDraft.from_json(record.payload)
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning(
                    "Ignoring unreadable draft",
                    extra={"draft_key": record.draft_key, "error": str(e)}
                )
                return None
        finally:
            db.close()

    def clear(self, request_id: str) -> None:
        from quote_engine.models.quote_draft import QuoteDraftRecord

        db = self._session_factory()
        try:
            db.query(QuoteDraftRecord).filter(
                QuoteDraftRecord.draft_key == draft_key(request_id)
            ).delete()
            db.commit()
            logger.debug("Draft cleared", extra={"draft_key": draft_key(request_id)})
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class BackgroundDraftStore(DraftStore):
    """
    Non-blocking wrapper around another DraftStore.

    save() records the snapshot and wakes a worker thread. Saves on the same
    key that arrive before the worker runs collapse into one write, so the
    last write wins. load() sees pending snapshots before persisted ones.
    """

    def __init__(self, store: DraftStore):
        self._store = store
        self._pending: Dict[str, QuoteDraft] = {}
        self._pending_lock = threading.Lock()
        # Held by the worker while it takes and writes a snapshot, and by clear()
        self._io_lock = threading.Lock()
        self._wakeup = threading.Condition(self._pending_lock)
        self._idle = threading.Event()
        self._idle.set()
        self._closed = False
        self._worker = threading.Thread(target=self._run, name="draft-writer", daemon=True)
        self._worker.start()

    def save(self, request_id: str, draft: QuoteDraft) -> None:
        with self._wakeup:
            if self._closed:
                raise RuntimeError("BackgroundDraftStore is closed")
            self._pending[str(request_id)] = draft
            self._idle.clear()
            self._wakeup.notify()

    def load(self, request_id: str) -> Optional[QuoteDraft]:
        with self._pending_lock:
            pending = self._pending.get(str(request_id))
        if pending is not None:
            return pending
        return self._store.load(request_id)

    def clear(self, request_id: str) -> None:
        with self._io_lock:
            with self._pending_lock:
                self._pending.pop(str(request_id), None)
            self._store.clear(request_id)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every pending snapshot is written. Returns False on timeout."""
        return self._idle.wait(timeout)

    def close(self, timeout: Optional[float] = 5.0) -> None:
        with self._wakeup:
            self._closed = True
            self._wakeup.notify()
        self._worker.join(timeout)

    def _peek_next(self) -> Optional[Tuple[str, QuoteDraft]]:
        with self._pending_lock:
            if not self._pending:
                return None
            request_id = next(iter(self._pending))
            return request_id, self._pending[request_id]

    def _run(self) -> None:
        while True:
            with self._wakeup:
                while not self._pending and not self._closed:
                    self._idle.set()
                    self._wakeup.wait()
                if self._closed and not self._pending:
                    self._idle.set()
                    return

            with self._io_lock:
                entry = self._peek_next()
                if entry is None:
                    continue
                request_id, draft = entry
                try:
                    self._store.save(request_id, draft)
                except Exception as e:
                    log_exception(e, additional_context={"draft_key": draft_key(request_id)})
                finally:
                    # Stays visible to load() until written; a newer save keeps its slot
                    with self._pending_lock:
                        if self._pending.get(request_id) is draft:
                            del self._pending[request_id]
