"""
In-memory storage for import sessions.

Sessions live in process memory with TTL expiration; nothing is written
to durable storage. Single-process only.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from config import settings
from models.import_session import ImportEvent, ImportEventKind
from models.product import ImportedProduct, ProductStatus
from parsers.product_text_parser import ParseAnomaly


@dataclass
class ImportSession:
    """
    Working set of one product import.

    `products` keeps display order; records are replaced whole, keyed by id.
    """
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)
    products: dict[str, ImportedProduct] = field(default_factory=dict)
    anomalies: list[ParseAnomaly] = field(default_factory=list)
    events: list[ImportEvent] = field(default_factory=list)

    @property
    def is_processing(self) -> bool:
        """True while any product still waits for its suggestion."""
        return any(
            p.status in (ProductStatus.PENDING, ProductStatus.PROCESSING)
            for p in self.products.values()
        )

    def ordered_products(self) -> list[ImportedProduct]:
        """Products in display order."""
        return list(self.products.values())

    def record_event(
        self,
        kind: ImportEventKind,
        message: str,
        product_id: Optional[str] = None
    ) -> ImportEvent:
        """Append an event to the session log and return it."""
        event = ImportEvent(kind=kind, message=message, product_id=product_id)
        self.events.append(event)
        return event


class ImportSessionStore:
    """Sessions by id, each with an expiry time."""

    def __init__(self, ttl_minutes: Optional[int] = None):
        self.ttl_minutes = ttl_minutes or settings.import_session_ttl_minutes
        self._cache: dict[str, tuple[datetime, ImportSession]] = {}

    def _expiry(self) -> datetime:
        return datetime.now() + timedelta(minutes=self.ttl_minutes)

    def save(self, session: ImportSession) -> str:
        """Store a session, return its id."""
        self._cache[session.session_id] = (self._expiry(), session)
        self._cleanup_expired()
        return session.session_id

    def get(self, session_id: str) -> Optional[ImportSession]:
        """
        Retrieve a session by id. Returns None if expired/not found.

        Every workflow operation reads its session through here, so a hit
        pushes the expiry forward: the TTL counts from the last use.
        """
        entry = self._cache.get(session_id)
        if entry is None:
            return None
        expires_at, session = entry
        if datetime.now() > expires_at:
            del self._cache[session_id]
            return None
        self._cache[session_id] = (self._expiry(), session)
        return session

    def delete(self, session_id: str) -> None:
        """Remove a session."""
        self._cache.pop(session_id, None)

    def clear(self) -> None:
        """Remove all sessions."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def _cleanup_expired(self) -> None:
        """Remove all expired entries."""
        now = datetime.now()
        expired = [k for k, (exp, _) in self._cache.items() if now > exp]
        for k in expired:
            del self._cache[k]


# Singleton instance
_store: Optional[ImportSessionStore] = None


def get_import_session_store() -> ImportSessionStore:
    """Get or create the process-wide ImportSessionStore."""
    global _store
    if _store is None:
        _store = ImportSessionStore()
    return _store
