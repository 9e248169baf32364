"""Thread-safe in-memory stores plus a flat-file document store.

Sessions, records and presence records live in process memory; restart loses
them. Documents are written under ``DATA_DIR/uploads`` with a unique prefix.
"""
from __future__ import annotations

import os
import secrets
import threading
from typing import Dict, Generic, List, Optional, TypeVar

from ..config import DATA_DIR
from ..errors import DuplicateItem, SessionNotFound
from ..utils.clock import now_ms
from .model import ApprovalSession

T = TypeVar("T")


class MemoryStore(Generic[T]):
    def __init__(self):
        self._items: Dict[str, T] = {}
        self._lock = threading.Lock()

    def create(self, item_id: str, item: T) -> T:
        with self._lock:
            if item_id in self._items:
                raise DuplicateItem(f"item with id '{item_id}' already exists")
            self._items[item_id] = item
        return item

    def get(self, item_id: str) -> Optional[T]:
        with self._lock:
            return self._items.get(item_id)

    def update(self, item_id: str, item: T) -> T:
        with self._lock:
            if item_id not in self._items:
                raise KeyError(item_id)
            self._items[item_id] = item
        return item

    def delete(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def all(self) -> List[T]:
        with self._lock:
            return list(self._items.values())

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


class SessionStore(MemoryStore[ApprovalSession]):
    def add(self, session: ApprovalSession) -> ApprovalSession:
        return self.create(session.id, session)

    def require(self, session_id: str) -> ApprovalSession:
        s = self.get(session_id)
        if s is None:
            raise SessionNotFound(session_id)
        return s

    def find_by_token(self, token: str) -> Optional[ApprovalSession]:
        if not token.isascii():
            return None
        for s in self.all():
            if secrets.compare_digest(s.secure_token, token):
                return s
        return None


def _uploads_dir() -> str:
    base = os.path.join(os.getenv("DATA_DIR", DATA_DIR), "uploads")
    os.makedirs(base, exist_ok=True)
    return base


def save_document(data: bytes, filename: str) -> str:
    """Write ``data`` and return the stored path."""
    safe = os.path.basename(filename or "") or "document"
    name = f"{now_ms()}-{secrets.token_hex(4)}-{safe}"
    path = os.path.join(_uploads_dir(), name)
    with open(path, "wb") as f:
        f.write(data)
    return path


def read_document(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()
