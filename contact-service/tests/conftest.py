import pytest

import sites
import transport


@pytest.fixture
def registry():
    return sites.load_sites("""{
        "x": {
            "requiredFields": ["email"],
            "allowedOrigins": [],
            "fieldOrder": ["name", "email"],
            "from": "X Kontakt <noreply@x.test>",
            "to": "owner@x.test"
        },
        "acme": {
            "allowedOrigins": ["https://acme.test"],
            "requiredFields": ["name", "email", "message"],
            "fieldLabels": {"name": "Name", "message": "Nachricht"},
            "from": "noreply@acme.test",
            "to": ["a@acme.test", "b@acme.test"],
            "subjectPrefix": "Acme"
        }
    }""")


@pytest.fixture
def sent(monkeypatch):
    """Capture outbound messages instead of talking to SMTP."""
    outbox = []

    def fake_deliver(msg):
        outbox.append(msg)
        return transport.TransportResult(success=True)

    monkeypatch.setattr(transport, "deliver", fake_deliver)
    return outbox
