"""Development runner.
Usage: python run.py  (reads .env if present)
"""

from __future__ import annotations

from dotenv import load_dotenv

from taskwise import create_app

load_dotenv()

app = create_app()

if __name__ == "__main__":  # pragma: no cover
    import os
    host = os.getenv("HOST", "0.0.0.0")
    port = int(app.config.get("PORT") or 4000)
    app.logger.info("TaskWise Web ouvindo em http://localhost:%s", port)
    app.run(debug=bool(int(os.getenv("FLASK_DEBUG", "0"))), host=host, port=port)
