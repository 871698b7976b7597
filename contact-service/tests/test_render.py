import json

import render
import sites


def _site(**overrides):
    raw = {"requiredFields": ["email"]}
    raw.update(overrides)
    return sites.load_sites(json.dumps({"s": raw}))["s"]


def test_internal_fields_and_blanks_are_excluded():
    fields = {"siteId": "s", "consent": True, "hp": "bot", "captchaToken": "t", "meta": {"a": 1},
              "email": "a@b.com", "phone": "  ", "company": None}
    assert render.visible_fields(fields, _site()) == ["email"]


def test_input_order_kept_without_field_order():
    fields = {"message": "hi", "email": "a@b.com", "name": "Ann"}
    assert render.visible_fields(fields, _site()) == ["message", "email", "name"]


def test_field_order_then_unlisted_in_input_order():
    site = _site(fieldOrder=["name", "email"])
    fields = {"zeta": "1", "email": "a@b.com", "alpha": "2", "name": "Ann"}
    assert render.visible_fields(fields, site) == ["name", "email", "zeta", "alpha"]


def test_scenario_two_rows_name_before_email():
    site = _site(fieldOrder=["name", "email"])
    msg = render.render({"siteId": "x", "email": "a@b.com", "name": "Ann", "hp": ""}, site)
    assert msg.text == "name: Ann\nemail: a@b.com"
    assert msg.html.count("<p>") == 2
    assert msg.html.index("<strong>name:</strong> Ann") < msg.html.index("<strong>email:</strong> a@b.com")


def test_labels_used_when_configured():
    site = _site(fieldLabels={"message": "Nachricht"})
    msg = render.render({"email": "a@b.com", "message": "Hallo"}, site)
    assert "Nachricht: Hallo" in msg.text
    assert "email: a@b.com" in msg.text
    assert "<strong>Nachricht:</strong> Hallo" in msg.html


def test_script_escaped_in_html_verbatim_in_text():
    value = "<script>alert('x & \"y\"')</script>"
    msg = render.render({"email": "a@b.com", "message": value}, _site())
    assert "<script>" not in msg.html
    assert "&lt;script&gt;alert(&#x27;x &amp; &quot;y&quot;&#x27;)&lt;/script&gt;" in msg.html
    assert f"message: {value}" in msg.text


def test_label_is_escaped_too():
    site = _site(fieldLabels={"message": "<b>Msg</b>"})
    msg = render.render({"email": "a@b.com", "message": "x"}, site)
    assert "<strong>&lt;b&gt;Msg&lt;/b&gt;:</strong>" in msg.html


def test_rendering_is_deterministic():
    site = _site(fieldOrder=["message"], fieldLabels={"email": "E-Mail"})
    fields = {"email": "a@b.com", "other": "o", "message": "m"}
    assert render.render(fields, site) == render.render(dict(fields), site)


def test_subject_defaults_and_prefix():
    assert render.subject_for(_site()) == "Kontakt Anfrage"
    assert render.subject_for(_site(subjectPrefix="Acme")) == "Acme Anfrage"
    assert render.subject_for(_site(subject="Custom", subjectPrefix="Acme")) == "Custom"


def test_subject_capped_at_160_chars():
    subject = render.subject_for(_site(subjectPrefix="x" * 300))
    assert len(subject) == 160
    assert len(render.subject_for(_site(subject="y" * 161))) == 160


def test_subject_escaped_in_html():
    msg = render.render({"email": "a@b.com"}, _site(subject="Q&A"))
    assert "<h2>Q&amp;A</h2>" in msg.html
    assert msg.subject == "Q&A"


def test_non_string_values_rendered_like_json():
    msg = render.render({"email": "a@b.com", "count": 3, "newsletter": False, "tags": ["a", "b"]}, _site())
    assert msg.text.splitlines()[1:] == ["count: 3", "newsletter: false", 'tags: ["a","b"]']
