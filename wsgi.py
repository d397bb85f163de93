"""WSGI entry point for the task backend."""

import atexit
import logging
import os

from eulist import create_app, get_store

logger = logging.getLogger(__name__)

app = create_app(os.getenv("FLASK_ENV", "production"))
atexit.register(get_store(app).close)


if __name__ == "__main__":
    port = app.config["PORT"]
    logger.info("Server running on port %s", port)
    logger.info("Try it at http://localhost:%s", port)
    app.run(host=app.config["HOST"], port=port)
