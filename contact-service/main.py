"""
Contact Relay
=============
Language  : Python
Framework : Flask + Gunicorn

Shared contact-form backend for many static sites. No database.

Architecture: small isolated layers behind a single /v1/contact endpoint.
  sites.py       — per-site config registry (loaded once from env)
  validation.py  — site / origin / required field / email checks
  render.py      — label + order driven HTML and text bodies
  transport.py   — SMTP delivery (console fallback in dev)
  pipeline.py    — validate → render → deliver

Run: gunicorn main:app
"""

import os
import logging

from dotenv import load_dotenv
from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

load_dotenv()

import pipeline
import sites
import transport

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [contact-relay] %(levelname)s %(message)s'
)
log = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 200 * 1024
app.config['SITES'] = sites.load_from_env()

# Any origin may reach the endpoint; per-site allow-lists are enforced in validation
CORS(
    app,
    resources={r"/v1/*": {"origins": "*"}, r"/health": {"origins": "*"}},
    methods=["GET", "POST", "OPTIONS"],
)


@app.route('/health')
def health():
    return jsonify({"ok": True})


@app.route('/v1/contact', methods=['POST'])
def contact():
    body = request.get_json(silent=True)
    sub = pipeline.from_body(body, request.headers.get('Origin'))

    result = pipeline.process(sub, app.config['SITES'])

    if result.status == "sent":
        return jsonify({"ok": True}), 200
    return jsonify({"error": result.error}), result.http_status


@app.errorhandler(RequestEntityTooLarge)
def too_large(e):
    return jsonify({"error": "payload too large"}), 413


@app.errorhandler(Exception)
def internal_error(e):
    if isinstance(e, HTTPException):
        return jsonify({"error": e.description}), e.code
    log.exception(f"Unhandled error on {request.method} {request.path}: {e}")
    return jsonify({"error": "Internal error"}), 500


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 3000))
    log.info(f"Contact Relay (Python) starting on :{port}")
    log.info(f"  Transport: {transport.describe()}")
    log.info(f"  Sites:     {len(app.config['SITES'])} configured")
    app.run(host='0.0.0.0', port=port)
