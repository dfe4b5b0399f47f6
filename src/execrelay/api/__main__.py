"""Run the relay with Uvicorn: ``python -m execrelay.api``."""

import uvicorn

from .main import app, config

uvicorn.run(app, host="0.0.0.0", port=config.port)
