from __future__ import annotations
from typing import Any, Dict, Optional
from flask import Flask, request, Response
from .chronometer import CountdownChronometer


def create_app(
    config: Optional[Dict[str, Any]] = None,
    chronometer: Optional[CountdownChronometer] = None,
) -> Flask:
    # static ligger på prosjektroten (../static i forhold til pakken)
    app = Flask(
        __name__,
        static_folder="../static",
        static_url_path="/static",
    )
    from .config import load_config
    from .demo import build_demo_chronometer

    cfg = config if config is not None else load_config()
    app.config["CHRONO"] = cfg
    app.extensions["chronometer"] = (
        chronometer if chronometer is not None else build_demo_chronometer(cfg)
    )

    from .routes import pages_bp, api_bp
    app.register_blueprint(pages_bp)
    app.register_blueprint(api_bp)

    @app.after_request
    def apply_common_headers(resp: Response) -> Response:
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        path = (request.path or "").lower()
        is_dynamic = path.startswith("/api/") or path in ("/state", "/health")
        is_prod = not app.debug and not app.testing
        if path.startswith("/static/"):
            if is_prod:
                resp.headers["Cache-Control"] = "public, max-age=31536000, immutable"
            else:
                resp.headers["Cache-Control"] = "no-store"
        elif is_dynamic:
            resp.headers["Cache-Control"] = "no-store"
        return resp

    return app
