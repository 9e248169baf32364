"""Approval session state machine.

States:
 - pending  (initial)
 - approved (terminal)
 - expired  (terminal)

A session is the only mutable state the signing core has to respect. The
check-expiry-then-transition step runs under a per-session lock so that of
several concurrent ``approve`` calls exactly one succeeds. Expiry is a data
comparison against ``expires_at``, not a scheduled event.
"""
from __future__ import annotations

import os
import secrets
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..config import SESSION_TTL_MS
from ..errors import SessionAlreadyApproved, SessionExpired
from ..hashing import hash_intent
from ..obs.prom import observe_session_transition
from ..utils.clock import now_ms
from ..utils.logging import get_logger

__all__ = [
    "SessionStatus",
    "ApprovalSession",
    "create_session",
    "can_approve",
    "approve",
    "expire",
]

log = get_logger()


class SessionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    EXPIRED = "expired"


@dataclass
class ApprovalSession:
    id: str
    secure_token: str = field(repr=False)
    document_digest: str
    document_path: str
    document_name: str
    intent_text: str
    intent_digest: str
    created_at: int
    expires_at: int
    status: SessionStatus = SessionStatus.PENDING
    approved_at: Optional[int] = None
    record_ref: Optional[str] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def public_view(self) -> Dict[str, Any]:
        """Session fields safe to show to anyone holding the session id."""
        return {
            "id": self.id,
            "document_digest": self.document_digest,
            "document_name": self.document_name,
            "intent_text": self.intent_text,
            "intent_digest": self.intent_digest,
            "status": self.status.value,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
            "approved_at": self.approved_at,
            "record_ref": self.record_ref,
        }


def _default_ttl_ms() -> int:
    return int(os.getenv("SESSION_TTL_MS", str(SESSION_TTL_MS)))


def create_session(
    document_digest: str,
    document_path: str,
    document_name: str,
    intent_text: str,
    ttl_ms: Optional[int] = None,
    now: Optional[int] = None,
) -> ApprovalSession:
    now = now_ms() if now is None else now
    canonical_intent, intent_digest = hash_intent(intent_text)
    session = ApprovalSession(
        id=str(uuid.uuid4()),
        secure_token=secrets.token_urlsafe(32),
        document_digest=document_digest,
        document_path=document_path,
        document_name=document_name,
        intent_text=canonical_intent,
        intent_digest=intent_digest,
        created_at=now,
        expires_at=now + (_default_ttl_ms() if ttl_ms is None else ttl_ms),
    )
    observe_session_transition(SessionStatus.PENDING.value)
    log.info(f"session created id={session.id} doc={document_digest[:16]}")
    return session


def can_approve(session: ApprovalSession, now: Optional[int] = None) -> bool:
    if session.status is not SessionStatus.PENDING:
        return False
    now = now_ms() if now is None else now
    return now <= session.expires_at


def approve(session: ApprovalSession, record_ref: str, now: Optional[int] = None) -> ApprovalSession:
    """Move ``session`` to approved, attaching ``record_ref``.

    Raises SessionAlreadyApproved or SessionExpired instead of succeeding twice.
    A pending session found past its deadline is marked expired first.
    """
    if not record_ref:
        raise ValueError("record_ref is required")
    with session._lock:
        now = now_ms() if now is None else now
        if session.status is SessionStatus.APPROVED:
            raise SessionAlreadyApproved(session.id)
        if session.status is SessionStatus.EXPIRED:
            raise SessionExpired(session.id)
        if now > session.expires_at:
            session.status = SessionStatus.EXPIRED
            observe_session_transition(SessionStatus.EXPIRED.value)
            log.info(f"session expired on approve attempt id={session.id}")
            raise SessionExpired(session.id)
        session.status = SessionStatus.APPROVED
        session.approved_at = now
        session.record_ref = record_ref
    observe_session_transition(SessionStatus.APPROVED.value)
    log.info(f"session approved id={session.id} record={record_ref}")
    return session


def expire(session: ApprovalSession) -> ApprovalSession:
    with session._lock:
        if session.status is SessionStatus.APPROVED:
            raise SessionAlreadyApproved(session.id)
        if session.status is SessionStatus.EXPIRED:
            return session
        session.status = SessionStatus.EXPIRED
    observe_session_transition(SessionStatus.EXPIRED.value)
    log.info(f"session expired id={session.id}")
    return session
