"""
sites.py — Site Registry
=========================
Per-site configuration, keyed by site id. Loaded once at startup and
shared read-only by every request.

Configuration (environment variables):
  SITES_JSON  — JSON object of site id → site config (default: {})
  SITES_FILE  — path to a JSON file, takes precedence over SITES_JSON

Site config keys:
  allowedOrigins  — exact Origin header values allowed to post (empty = any)
  requiredFields  — field names that must be non-blank (default: email, message)
  fieldLabels     — field name → display label
  fieldOrder      — display order for rendered fields
  from            — sender address, e.g. "Acme Kontakt <contact@acme.test>"
  to              — recipient address or list of addresses
  subject         — full subject line
  subjectPrefix   — used as "{subjectPrefix} Anfrage" when no subject is set

Malformed input never crashes the service. It yields an empty registry,
so every lookup fails as an unknown site.
"""

import os
import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

log = logging.getLogger(__name__)

DEFAULT_REQUIRED_FIELDS = ("email", "message")


@dataclass(frozen=True)
class SiteConfig:
    site_id: str
    allowed_origins: frozenset = frozenset()
    required_fields: tuple[str, ...] = DEFAULT_REQUIRED_FIELDS
    field_labels: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    field_order: tuple[str, ...] = ()
    sender: str | None = None
    recipients: tuple[str, ...] = ()
    subject: str | None = None
    subject_prefix: str | None = None


def _as_tuple(value) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return (str(value),)


def _parse_site(site_id: str, raw: dict) -> SiteConfig:
    required = raw.get("requiredFields")
    labels = raw.get("fieldLabels") or {}
    return SiteConfig(
        site_id=site_id,
        allowed_origins=frozenset(_as_tuple(raw.get("allowedOrigins"))),
        required_fields=DEFAULT_REQUIRED_FIELDS if required is None else _as_tuple(required),
        field_labels=MappingProxyType({str(k): str(v) for k, v in labels.items() if v is not None}),
        field_order=_as_tuple(raw.get("fieldOrder")),
        sender=raw.get("from") or None,
        recipients=_as_tuple(raw.get("to")),
        subject=raw.get("subject") or None,
        subject_prefix=raw.get("subjectPrefix") or None,
    )


def load_sites(raw: str | None) -> Mapping[str, SiteConfig]:
    """Parse a JSON document into a read-only site registry."""
    try:
        data = json.loads(raw or "{}")
    except ValueError as e:
        log.warning(f"Site config is not valid JSON, no sites configured: {e}")
        return MappingProxyType({})

    if not isinstance(data, dict):
        log.warning(f"Site config must be a JSON object, got {type(data).__name__} — no sites configured")
        return MappingProxyType({})

    sites = {}
    for site_id, entry in data.items():
        if not isinstance(entry, dict):
            log.warning(f"Skipping site '{site_id}': config must be an object")
            continue
        try:
            sites[site_id] = _parse_site(site_id, entry)
        except (AttributeError, TypeError) as e:
            log.warning(f"Skipping site '{site_id}': {e}")

    return MappingProxyType(sites)


def load_from_env() -> Mapping[str, SiteConfig]:
    path = os.environ.get('SITES_FILE')
    if path:
        try:
            with open(path, encoding='utf-8') as f:
                raw = f.read()
        except OSError as e:
            log.warning(f"Could not read SITES_FILE {path}: {e} — no sites configured")
            return MappingProxyType({})
    else:
        raw = os.environ.get('SITES_JSON', '{}')

    registry = load_sites(raw)
    log.info(f"Loaded {len(registry)} site(s): {', '.join(sorted(registry)) or '(none)'}")
    return registry
