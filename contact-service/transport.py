"""
transport.py — Email Transport Layer
=====================================
This is the ONLY file that knows about SMTP (or any delivery mechanism).
Everything above this layer is transport-agnostic.

Configuration (environment variables):
  SMTP_HOST      — SMTP server hostname (empty = log messages instead of sending)
  SMTP_PORT      — SMTP port (default: 465)
  SMTP_SECURE    — Implicit TLS (SMTP over SSL, default: true for port 465)
  SMTP_USE_TLS   — STARTTLS on a plain connection when SMTP_SECURE=false
  SMTP_USER      — Username for SMTP auth (optional)
  SMTP_PASSWORD  — Password for SMTP auth (SMTP_PASS also accepted)
  SMTP_FROM      — Sender used when a site has no "from" configured
  SMTP_TIMEOUT   — Socket timeout in seconds (default: 10)

Delivery is a single attempt. A failure is reported back, never retried.
"""

import os
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, parseaddr
from dataclasses import dataclass

log = logging.getLogger(__name__)

# ── SMTP Configuration ────────────────────────────────────────────────────────

SMTP_HOST     = os.environ.get('SMTP_HOST', '')
SMTP_PORT     = int(os.environ.get('SMTP_PORT', '465'))
SMTP_SECURE   = os.environ.get('SMTP_SECURE', 'true').lower() != 'false'
SMTP_USE_TLS  = os.environ.get('SMTP_USE_TLS', 'false').lower() == 'true'
SMTP_USER     = os.environ.get('SMTP_USER', '')
SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD') or os.environ.get('SMTP_PASS', '')
SMTP_FROM     = os.environ.get('SMTP_FROM', 'noreply@contact-relay.local')
SMTP_TIMEOUT  = float(os.environ.get('SMTP_TIMEOUT', '10'))


@dataclass
class TransportMessage:
    """Normalized message envelope. Transport layer speaks only this."""
    sender: str | None
    recipients: list[str]
    reply_to: str
    subject: str
    body_text: str
    body_html: str
    message_id: str


@dataclass
class TransportResult:
    success: bool
    error: str | None = None


def _sender(msg: TransportMessage) -> str:
    return msg.sender or SMTP_FROM


def _envelope_address(address: str) -> str:
    """'Acme <contact@acme.test>' → 'contact@acme.test'"""
    return parseaddr(address)[1] or address


def _header_address(address: str) -> str:
    """Re-encode only the display name, so the address itself stays parseable."""
    name, addr = parseaddr(address)
    if not addr:
        return address
    return formataddr((name, addr), 'utf-8')


def _build_mime(msg: TransportMessage) -> MIMEMultipart:
    """Build MIME message with text and HTML parts."""
    sender = _sender(msg)
    domain = _envelope_address(sender).split('@')[-1]

    mime = MIMEMultipart('alternative')
    mime['Subject']    = msg.subject
    mime['From']       = _header_address(sender)
    mime['To']         = ', '.join(_header_address(r) for r in msg.recipients)
    mime['Reply-To']   = _header_address(msg.reply_to)
    mime['Message-ID'] = f"<{msg.message_id}@{domain}>"

    mime.attach(MIMEText(msg.body_text, 'plain', 'utf-8'))
    mime.attach(MIMEText(msg.body_html, 'html', 'utf-8'))
    return mime


def _connect() -> smtplib.SMTP:
    if SMTP_SECURE:
        return smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT)
    return smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT)


def _smtp_send(msg: TransportMessage) -> TransportResult:
    """One SMTP session per message: connect, optional STARTTLS and login, send."""
    mime = _build_mime(msg)
    envelope_from = _envelope_address(_sender(msg))
    envelope_to = [_envelope_address(r) for r in msg.recipients]

    try:
        log.info(f"[{msg.message_id}] Connecting to SMTP {SMTP_HOST}:{SMTP_PORT} (secure={SMTP_SECURE})")
        with _connect() as server:
            if not SMTP_SECURE and SMTP_USE_TLS:
                server.starttls()
            if SMTP_USER and SMTP_PASSWORD:
                server.login(SMTP_USER, SMTP_PASSWORD)
            refused = server.sendmail(envelope_from, envelope_to, mime.as_string())

        if refused:
            log.warning(f"[{msg.message_id}] Some recipients refused: {', '.join(refused)}")
        log.info(f"[{msg.message_id}] Delivered: to={','.join(envelope_to)} subject='{msg.subject}'")
        return TransportResult(success=True)

    except smtplib.SMTPException as e:
        log.error(f"[{msg.message_id}] SMTP error: {e}")
        return TransportResult(success=False, error=f"SMTP error: {e}")
    except OSError as e:
        log.error(f"[{msg.message_id}] Connection failed to {SMTP_HOST}:{SMTP_PORT}: {e}")
        return TransportResult(success=False, error=f"Connection failed: {e}")


def _log_only(msg: TransportMessage) -> TransportResult:
    """Dev mode: no SMTP host, so the rendered text body goes to the log."""
    log.warning(f"[{msg.message_id}] SMTP_HOST not set, logging message instead of sending")
    log.info(
        f"[{msg.message_id}] {_sender(msg)} -> {', '.join(msg.recipients)} "
        f"(reply-to {msg.reply_to}) '{msg.subject}'\n{msg.body_text}"
    )
    return TransportResult(success=True)


def deliver(msg: TransportMessage) -> TransportResult:
    """Single delivery attempt. Failures come back as a result, never as an exception."""
    if not msg.recipients:
        log.error(f"[{msg.message_id}] No recipients configured")
        return TransportResult(success=False, error="No recipients configured")

    send = _smtp_send if SMTP_HOST else _log_only
    try:
        return send(msg)
    except Exception as e:
        log.error(f"[{msg.message_id}] Transport error: {e}")
        return TransportResult(success=False, error=str(e))


def describe() -> str:
    """Non-secret transport settings, for the startup log."""
    if not SMTP_HOST:
        return "log only (SMTP_HOST not set)"
    security = "ssl" if SMTP_SECURE else ("starttls" if SMTP_USE_TLS else "plain")
    auth = f" as {SMTP_USER}" if SMTP_USER else ""
    return f"smtp://{SMTP_HOST}:{SMTP_PORT} ({security}){auth}, default sender {SMTP_FROM}"
