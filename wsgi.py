# path: wsgi.py
"""
wsgi.py
"""
from __future__ import annotations

from chronometer import create_app

app = create_app()

if __name__ == "__main__":
    # Lokal dev: waitress om installert, ellers Flask dev-server.
    try:
        from waitress import serve
    except ImportError:
        app.run(host="0.0.0.0", port=5000, debug=True, use_reloader=False)
    else:
        serve(app, listen="0.0.0.0:5000", threads=8)
