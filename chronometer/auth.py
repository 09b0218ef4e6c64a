from __future__ import annotations
import os
from functools import wraps
from flask import current_app, request, jsonify


def require_password(fn):
    """
    Krever X-Admin-Password KUN hvis admin_password er satt i konfigen
    og CHRONO_DISABLE_AUTH != '1'.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):
        if os.environ.get("CHRONO_DISABLE_AUTH") == "1":
            return fn(*args, **kwargs)

        cfg = current_app.config.get("CHRONO") or {}
        pw = str(cfg.get("admin_password") or "").strip()
        if pw == "":
            return fn(*args, **kwargs)

        if request.headers.get("X-Admin-Password", "") == pw:
            return fn(*args, **kwargs)
        return jsonify({"ok": False, "error": "Unauthorized"}), 401

    return wrapper
