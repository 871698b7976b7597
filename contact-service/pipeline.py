"""
pipeline.py — Contact Submission Pipeline
===========================================
Runs one submission through a linear pipeline. Each step before transport
is a rejection point.

Steps:
1. Validate site, origin, required fields, email
2. Render subject / HTML / text
3. Hand off to transport layer
4. Return result

Nothing is persisted, so a failed step leaves nothing to roll back.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Mapping

import render
import transport
import validation
from errors import ContactError, DispatchFailure
from sites import SiteConfig

log = logging.getLogger(__name__)


@dataclass
class Submission:
    site_id: str | None
    fields: dict = field(default_factory=dict)
    origin: str | None = None


@dataclass
class ContactResult:
    status: str            # "sent" | "rejected" | "error"
    http_status: int
    error: str | None = None
    message_id: str | None = None


def _reject(message_id: str, err: ContactError) -> ContactResult:
    log.warning(f"[{message_id}] Request rejected [{err.code}]: {err.message}")
    return ContactResult(
        status="rejected",
        http_status=err.status_code,
        error=err.message,
        message_id=message_id,
    )


def from_body(body, origin: str | None) -> Submission:
    """Build a Submission from a decoded JSON body. Anything but an object counts as empty."""
    fields = body if isinstance(body, dict) else {}
    return Submission(site_id=fields.get("siteId"), fields=fields, origin=origin or None)


def process(sub: Submission, registry: Mapping[str, SiteConfig]) -> ContactResult:
    message_id = str(uuid.uuid4())
    log.info(f"[{message_id}] Processing submission for site {sub.site_id!r} origin={sub.origin or '-'}")

    # ── Step 1: Validate ──────────────────────────────────────────────────────
    try:
        site = validation.check(sub.site_id, sub.fields, sub.origin, registry)
    except ContactError as e:
        return _reject(message_id, e)

    # ── Step 2: Render ────────────────────────────────────────────────────────
    message = render.render(sub.fields, site)

    # ── Step 3: Hand off to transport ─────────────────────────────────────────
    transport_result = transport.deliver(transport.TransportMessage(
        sender=site.sender,
        recipients=list(site.recipients),
        reply_to=sub.fields["email"].strip(),
        subject=message.subject,
        body_text=message.text,
        body_html=message.html,
        message_id=message_id,
    ))

    if not transport_result.success:
        failure = DispatchFailure(transport_result.error)
        log.error(f"[{message_id}] Transport failed for site {site.site_id}: {failure.detail}")
        return ContactResult(
            status="error",
            http_status=failure.status_code,
            error=failure.message,
            message_id=message_id,
        )

    log.info(f"[{message_id}] Sent — site={site.site_id} recipients={len(site.recipients)}")
    return ContactResult(status="sent", http_status=200, message_id=message_id)
