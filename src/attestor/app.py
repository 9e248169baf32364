from __future__ import annotations

import base64
import binascii
import os
import uuid
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .config import MAX_DOCUMENT_BYTES
from .crypto.keyloader import load_signing_key
from .errors import (
    AcknowledgmentsIncomplete,
    DuplicateItem,
    RecordFormatError,
    SessionError,
)
from .hashing import hash_document
from .obs.prom import prometheus_latest
from .presence import (
    Acknowledgments,
    PresenceRecord,
    create_presence_record,
    hash_presence,
    validate_acknowledgments,
)
from .records.codec import serialize
from .records.create import create_record
from .records.model import AttestationRecord
from .records.verify import verify
from .session.model import SessionStatus, approve, can_approve, create_session
from .session.store import MemoryStore, SessionStore, save_document
from .utils.clock import now_ms
from .utils.logging import get_logger

load_dotenv()

app = FastAPI(title="Attestor signed approval attestations")
log = get_logger()

# CORS (dev)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = SessionStore()
records: MemoryStore[AttestationRecord] = MemoryStore()
presence_records: MemoryStore[PresenceRecord] = MemoryStore()


class CreateApprovalBody(BaseModel):
    document_b64: str
    document_name: str = "document"
    intent: str


class ApproveBody(BaseModel):
    approver_ref: str
    approver_label: str
    acknowledgments: Acknowledgments
    presence_ref: Optional[str] = None
    assisted_flag: bool = False


class VerifyBody(BaseModel):
    document_b64: str
    record: Any


def error_response(code: str, message: str, status: int = 400) -> JSONResponse:
    return JSONResponse({"error": code, "message": message}, status_code=status)


def _decode_document(value: str) -> Optional[bytes]:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None


def _max_document_bytes() -> int:
    return int(os.getenv("MAX_DOCUMENT_BYTES", str(MAX_DOCUMENT_BYTES)))


@app.get("/__health")
async def health():
    return {"status": "ok"}


@app.post("/approvals")
async def create_approval(body: CreateApprovalBody):
    data = _decode_document(body.document_b64)
    if not data:
        return error_response("INVALID_FILE", "Document must be non-empty base64")
    if len(data) > _max_document_bytes():
        return error_response("FILE_TOO_LARGE", "Document exceeds maximum size")
    if not body.intent.strip():
        return error_response("INVALID_INTENT", "Intent text is required")
    digest = hash_document(data)
    path = save_document(data, body.document_name)
    session = sessions.add(create_session(digest, path, body.document_name, body.intent))
    return JSONResponse(
        {"session_id": session.id, "secure_token": session.secure_token, "document_digest": digest},
        status_code=201,
    )


@app.get("/approvals/{session_id}")
async def get_approval(session_id: str):
    session = sessions.get(session_id)
    if session is None:
        return error_response("SESSION_NOT_FOUND", "Approval session not found", 404)
    return session.public_view()


@app.post("/approvals/{session_id}/approve")
async def approve_session(session_id: str, body: ApproveBody):
    session = sessions.get(session_id)
    if session is None:
        return error_response("SESSION_NOT_FOUND", "Approval session not found", 404)
    if not can_approve(session):
        if session.status is SessionStatus.APPROVED:
            return error_response("SESSION_ALREADY_APPROVED", "Session already has a signature")
        return error_response("SESSION_EXPIRED", "Approval session has expired")

    approver_ref = body.approver_ref.strip()
    approver_label = body.approver_label.strip()
    if not approver_ref or not approver_label:
        return error_response("INVALID_APPROVER", "Approver reference and label are required")
    try:
        validate_acknowledgments(body.acknowledgments)
    except AcknowledgmentsIncomplete as e:
        return error_response("ACKNOWLEDGMENTS_INCOMPLETE", str(e))

    if body.presence_ref:
        presence = presence_records.get(body.presence_ref)
        if presence is None or presence.session_id != session.id:
            return error_response("PRESENCE_NOT_FOUND", "Referenced presence record not found")
    else:
        presence = create_presence_record(session.id, now_ms(), body.acknowledgments)
        presence_records.create(presence.id, presence)

    try:
        record = create_record(
            {
                "document_digest": session.document_digest,
                "intent_digest": session.intent_digest,
                "intent_text": session.intent_text,
                "approver_ref": approver_ref,
                "approver_label": approver_label,
                "event_time": now_ms(),
                "presence_ref": presence.id,
                "presence_digest": hash_presence(presence),
                "assisted_flag": body.assisted_flag,
            },
            load_signing_key(),
        )
    except RecordFormatError as e:
        return error_response("INVALID_RECORD", str(e))

    record_id = str(uuid.uuid4())
    try:
        # the session lock decides races; a losing record is never stored
        approve(session, record_id)
    except SessionError as e:
        return error_response(e.code, str(e))
    try:
        records.create(record_id, record)
    except DuplicateItem:  # pragma: no cover - uuid4 collision
        log.error(f"record id collision {record_id}")
        return error_response("INTERNAL_ERROR", "Failed to store record", 500)
    return Response(content=serialize(record), media_type="application/json")


@app.post("/verify")
async def verify_record(body: VerifyBody):
    data = _decode_document(body.document_b64)
    if data is None:
        return error_response("INVALID_FILE", "Document must be base64")
    outcome = verify(data, body.record)
    return JSONResponse(outcome.to_json_dict())


@app.get("/metrics")
async def metrics():
    payload, content_type = prometheus_latest()
    return Response(content=payload, media_type=content_type)
