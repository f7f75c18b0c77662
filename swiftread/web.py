from __future__ import annotations

import logging
import os
import tempfile
import uuid
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional

from flask import Flask, abort, jsonify, render_template_string, request, session

from swiftread.analytics import UsageLog
from swiftread.auth import AdminGate
from swiftread.config import MAX_WPM, MIN_WPM, RECORD_MIN_UNITS, WPM_STEP, Settings
from swiftread.extract import ExtractionError, allowed_file, extract_text_from_file, fetch_text_from_url
from swiftread.page import HTML_PAGE
from swiftread.pivot import PivotMode, decompose
from swiftread.playback import InvalidRateError, clamp_rate
from swiftread.tokenizer import tokenize

logger = logging.getLogger(__name__)

USER_COOKIE = "swiftread_uid"

DEFAULT_TEXT = (
    "Welcome to SwiftRead. This is an example of how speed reading works. "
    "Paste your own text below to get started. Rapid Serial Visual Presentation "
    "helps you focus on one word at a time, eliminating eye movements and "
    "dramatically increasing reading speed."
)


def build_payload(text: str, mode: Optional[PivotMode] = None, **extra: Any) -> dict:
    """Units plus their pivot splits, for one mode or (by default) every mode."""
    units = tokenize(text)
    modes = [mode] if mode is not None else list(PivotMode)
    payload = {
        "ok": True,
        "text": text,
        "units": units,
        "decompositions": {
            m.value: [list(decompose(u, m)) for u in units] for m in modes
        },
        "word_count": len(units),
        "char_count": len(text),
    }
    payload.update(extra)
    return payload


def _error(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _requested_mode() -> Optional[PivotMode]:
    raw = request.args.get("mode")
    return PivotMode.parse(raw) if raw else None


def create_app(settings: Optional[Settings] = None, usage_log: Optional[UsageLog] = None) -> Flask:
    settings = settings or Settings.from_env()
    usage_log = usage_log or UsageLog(settings.analytics_path)
    gate = AdminGate(settings.admin_password)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_mb * 1024 * 1024
    app.config["SECRET_KEY"] = settings.secret_key

    def admin_required(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any):
            if not gate.enabled:
                abort(404)
            if not session.get("admin"):
                return _error("Authentication required", 401)
            return view(*args, **kwargs)

        return wrapper

    @app.route("/", methods=["GET"])
    def index():
        return render_template_string(
            HTML_PAGE,
            default_text=DEFAULT_TEXT,
            default_wpm=clamp_rate(settings.default_wpm),
            min_wpm=MIN_WPM,
            max_wpm=MAX_WPM,
            wpm_step=WPM_STEP,
            record_min_units=RECORD_MIN_UNITS,
            admin_enabled=gate.enabled,
        )

    @app.route("/api/text", methods=["POST"])
    def api_text():
        data = _json_body()
        text = data.get("text", "")
        if not isinstance(text, str):
            return _error("Field 'text' must be a string", 400)
        try:
            mode = _requested_mode()
        except ValueError as e:
            return _error(str(e), 400)
        return jsonify(build_payload(text, mode))

    @app.route("/api/extract", methods=["POST"])
    def api_extract():
        if "file" not in request.files:
            return _error("No file uploaded", 400)

        f = request.files["file"]
        if not f or not f.filename:
            return _error("Missing file", 400)

        filename = f.filename
        if not allowed_file(filename):
            return _error("Unsupported file type (use .pdf, .epub or .txt)", 400)

        suffix = Path(filename).suffix.lower()

        try:
            with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
                temp_path = tmp.name
                f.save(temp_path)

            try:
                text = extract_text_from_file(temp_path, filename)
            finally:
                os.unlink(temp_path)

            if not text.strip():
                return _error("No extractable text found. (Scanned PDF likely needs OCR.)", 400)

            return jsonify(build_payload(text, filename=filename))

        except ExtractionError as e:
            return _error(str(e), 400)
        except Exception as e:
            logger.exception("Extraction of %s failed", filename)
            return _error(str(e), 500)

    @app.route("/api/fetch", methods=["POST"])
    def api_fetch():
        data = _json_body()
        url = data.get("url", "")
        if not isinstance(url, str) or not url.strip():
            return _error("Missing URL", 400)
        try:
            text = fetch_text_from_url(
                url,
                timeout=settings.fetch_timeout,
                allow_private=settings.allow_private_fetch,
            )
        except ExtractionError as e:
            return _error(str(e), 400)
        except Exception as e:
            logger.exception("Fetching %s failed", url)
            return _error(str(e), 500)
        return jsonify(build_payload(text, url=url))

    @app.route("/api/sessions", methods=["POST"])
    def api_sessions():
        data = _json_body()
        try:
            word_count = int(data.get("word_count", 0))
            wpm = clamp_rate(data.get("wpm"))
        except (TypeError, ValueError, InvalidRateError):
            return _error("Fields 'word_count' and 'wpm' must be numbers", 400)
        if word_count <= 0:
            return _error("Field 'word_count' must be positive", 400)

        user_id = request.cookies.get(USER_COOKIE) or uuid.uuid4().hex
        rec = usage_log.record(word_count, wpm, user_id=user_id)
        resp = jsonify({"ok": True, "id": rec.id})
        resp.set_cookie(USER_COOKIE, user_id, max_age=365 * 24 * 3600, samesite="Lax")
        return resp

    @app.route("/admin/login", methods=["POST"])
    def admin_login():
        if not gate.enabled:
            abort(404)
        data = _json_body()
        if not gate.check(data.get("password")):
            logger.warning("Rejected admin login from %s", request.remote_addr)
            return _error("Incorrect password", 401)
        session["admin"] = True
        return jsonify({"ok": True})

    @app.route("/admin/logout", methods=["POST"])
    def admin_logout():
        session.pop("admin", None)
        return jsonify({"ok": True})

    @app.route("/admin/stats", methods=["GET"])
    @admin_required
    def admin_stats():
        return jsonify(usage_log.summary())

    @app.route("/admin/clear", methods=["POST"])
    @admin_required
    def admin_clear():
        usage_log.clear()
        return jsonify({"ok": True})

    return app
