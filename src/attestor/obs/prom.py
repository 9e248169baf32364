"""Prometheus instrumentation for attestor.

Labels stay low-cardinality: result and reason code only, never digests or
approver references.
"""
from __future__ import annotations

import os

from prometheus_client import (
    CollectorRegistry,
    Counter,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

from ..config import METRICS_ENABLED

REGISTRY = CollectorRegistry()

RECORDS_ISSUED = Counter(
    "attestor_records_issued_total",
    "Attestation records signed.",
    registry=REGISTRY,
)
VERIFICATIONS = Counter(
    "attestor_verifications_total",
    "Verification outcomes by result and reason code.",
    ["result", "reason"],
    registry=REGISTRY,
)
SESSION_TRANSITIONS = Counter(
    "attestor_session_transitions_total",
    "Approval session state transitions.",
    ["to_status"],
    registry=REGISTRY,
)


def _enabled() -> bool:
    val = os.getenv("METRICS_ENABLED")
    return METRICS_ENABLED if val is None else val.lower() == "true"


def observe_record_issued() -> None:
    if _enabled():
        RECORDS_ISSUED.inc()


def observe_verification(valid: bool, reason: str | None) -> None:
    if _enabled():
        VERIFICATIONS.labels(result="pass" if valid else "fail", reason=reason or "none").inc()


def observe_session_transition(to_status: str) -> None:
    if _enabled():
        SESSION_TRANSITIONS.labels(to_status=to_status).inc()


def prometheus_latest() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
