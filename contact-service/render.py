"""
render.py — Message Renderer
==============================
Turns an arbitrary field mapping into one subject plus an HTML body and a
plain-text body. Layout is fixed: one labelled paragraph per field.

render() returns RenderedMessage(subject, html, text).
Internal fields (site id, consent, honeypot, captcha token, metadata) never
appear in the output.
"""

import html
import json
from dataclasses import dataclass

from sites import SiteConfig
from validation import is_blank

IGNORED_FIELDS = frozenset({"siteId", "consent", "hp", "captchaToken", "meta"})

DEFAULT_SUBJECT_WORD = "Kontakt"
SUBJECT_MAX_LEN = 160


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    html: str
    text: str


def visible_fields(fields: dict, site: SiteConfig) -> list[str]:
    """Field names to render, in display order."""
    names = [k for k, v in fields.items() if k not in IGNORED_FIELDS and not is_blank(v)]
    if not site.field_order:
        return names

    position = {name: i for i, name in enumerate(site.field_order)}
    unlisted = len(site.field_order)
    # sorted() is stable, so unlisted fields keep their input order
    return sorted(names, key=lambda k: position.get(k, unlisted))


def subject_for(site: SiteConfig) -> str:
    if site.subject:
        subject = site.subject
    else:
        subject = f"{site.subject_prefix or DEFAULT_SUBJECT_WORD} Anfrage"
    return subject[:SUBJECT_MAX_LEN]


def to_text(value) -> str:
    """Stringify a JSON value the way a browser would display it."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def _label(name: str, site: SiteConfig) -> str:
    return site.field_labels.get(name) or name


def _html_wrap(title: str, body_inner: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
</head>
<body style="font-family:system-ui,sans-serif;">
  <h2>{title}</h2>
  {body_inner}
</body>
</html>"""


def render(fields: dict, site: SiteConfig) -> RenderedMessage:
    names = visible_fields(fields, site)
    subject = subject_for(site)

    rows = [
        f"<p><strong>{html.escape(_label(k, site))}:</strong> {html.escape(to_text(fields[k]))}</p>"
        for k in names
    ]
    body_html = _html_wrap(html.escape(subject), "\n  ".join(rows))
    body_text = "\n".join(f"{_label(k, site)}: {to_text(fields[k])}" for k in names)

    return RenderedMessage(subject=subject, html=body_html, text=body_text)
