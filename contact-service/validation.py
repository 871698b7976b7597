"""
validation.py — Request Validation
====================================
Checks run in a fixed order and stop at the first failure:
  1. site exists
  2. origin is allowed for the site
  3. required fields are present (first missing field is reported)
  4. email field is syntactically valid

Each failure raises a ContactError subclass (see errors.py).
"""

import re
from typing import Mapping

from errors import UnknownSite, OriginRejected, MissingField, InvalidEmail
from sites import SiteConfig

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def is_email(value) -> bool:
    if not isinstance(value, str):
        return False
    return EMAIL_RE.match(value.strip()) is not None


def check(site_id, fields: dict, origin: str | None,
          registry: Mapping[str, SiteConfig]) -> SiteConfig:
    """Validate one submission. Returns the site config on success."""
    if not isinstance(site_id, str) or is_blank(site_id) or site_id not in registry:
        raise UnknownSite()
    site = registry[site_id]

    if origin and site.allowed_origins and origin not in site.allowed_origins:
        raise OriginRejected(origin)

    for name in site.required_fields:
        if is_blank(fields.get(name)):
            raise MissingField(name)

    if not is_email(fields.get("email")):
        raise InvalidEmail()

    return site
