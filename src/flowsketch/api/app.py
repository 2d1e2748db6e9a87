"""Flask app factory for the FlowSketch API."""

from __future__ import annotations

from typing import Optional

from flask import Flask
from flask_cors import CORS

from ..config.settings import Settings, get_settings
from ..generation.service import FlowchartService
from ..utils.logging import configure_logging
from .routes import register_routes


def create_app(
    service: Optional[FlowchartService] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    app = Flask(__name__)
    # Request bodies are capped at 1 MB.
    app.config["MAX_CONTENT_LENGTH"] = 1024 * 1024
    CORS(app, origins=settings.cors_origin_list())
    register_routes(app, service=service or FlowchartService())
    return app
