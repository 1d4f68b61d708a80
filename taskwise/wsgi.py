from __future__ import annotations

import os

from whitenoise import WhiteNoise

from taskwise.app_factory import create_app

# Expose a module-level WSGI application for Gunicorn
app = create_app()

# WhiteNoise serves /static/ before requests reach Flask (no session work for assets)
static_root = os.path.join(os.path.dirname(__file__), "static")
app.wsgi_app = WhiteNoise(app.wsgi_app, root=static_root, prefix="static/")  # type: ignore[method-assign]
