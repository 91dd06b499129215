"""Record store used by the import endpoint."""
import logging
import threading
from typing import Any, Dict, List, Protocol

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def insert_many(self, documents: List[Dict[str, Any]]) -> int:
        """Persist documents and return how many were stored."""
        ...


class InMemoryRecordStore:
    """Process-local store; documents live until the process exits."""

    def __init__(self):
        self._documents: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def insert_many(self, documents: List[Dict[str, Any]]) -> int:
        with self._lock:
            self._documents.extend(documents)
        logger.info(f"Stored {len(documents)} documents", extra={"total": len(self._documents)})
        return len(documents)

    def all(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._documents)
