"""HTTP routes for the FlowSketch API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from flask import Flask, Response, jsonify, request

from ..core.exceptions import (
    FlowsketchError,
    MissingCredentialError,
    SchemaError,
    UnsupportedShapeError,
)
from ..flowchart.layout import Orientation, layout_document
from ..flowchart.repair import import_flowchart, repair_existing_flowchart
from ..generation.service import FlowchartService, is_credential_failure
from ..utils.logging import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "flowsketch-api"
MIN_PROMPT_LENGTH = 10
MIN_FOLLOW_UP_LENGTH = 5


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text_field(payload: Dict[str, Any], key: str, default: str = "") -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else default


def _error(message: str, status: int, **extra: Any) -> Tuple[Response, int]:
    return jsonify({"error": message, **extra}), status


def register_routes(app: Flask, *, service: FlowchartService) -> None:
    @app.before_request
    def log_request() -> None:
        logger.info(
            "HTTP %s %s from %s",
            request.method,
            request.path,
            request.remote_addr,
        )

    @app.errorhandler(SchemaError)
    def handle_schema_error(exc: SchemaError):
        return _error(exc.message, 400, details=(exc.context or {}).get("errors", []))

    @app.errorhandler(UnsupportedShapeError)
    def handle_unsupported_shape(exc: UnsupportedShapeError):
        return _error(exc.message, 400)

    @app.errorhandler(MissingCredentialError)
    def handle_missing_credential(exc: MissingCredentialError):
        logger.error("Completion provider is not configured", extra={"error": exc.message})
        return _error(exc.message, 500)

    @app.errorhandler(FlowsketchError)
    def handle_flowsketch_error(exc: FlowsketchError):
        logger.error("Request failed", extra={"error": str(exc), "path": request.path})
        return _error(exc.message, 502)

    @app.get("/api/health")
    def health() -> Any:
        return jsonify({"ok": True, "service": SERVICE_NAME, "timestamp": utc_now()})

    @app.post("/api/generate")
    def generate() -> Any:
        payload = request.get_json(force=True, silent=True) or {}
        prompt = _text_field(payload, "prompt")
        if len(prompt) < MIN_PROMPT_LENGTH:
            return _error(f"Prompt must contain at least {MIN_PROMPT_LENGTH} characters.", 400)

        try:
            result = service.generate(
                prompt,
                detail_level=_text_field(payload, "detailLevel", "balanced") or "balanced",
                audience=_text_field(payload, "audience"),
            )
        except FlowsketchError:
            raise
        except Exception as exc:
            return _unexpected(exc)
        return jsonify(result.to_dict())

    @app.post("/api/refine")
    def refine() -> Any:
        payload = request.get_json(force=True, silent=True) or {}
        current = payload.get("flowchart")
        if not isinstance(current, dict):
            return _error("A valid existing flowchart object is required.", 400)

        follow_up = _text_field(payload, "followUpPrompt")
        if len(follow_up) < MIN_FOLLOW_UP_LENGTH:
            return _error(
                f"Follow-up prompt must contain at least {MIN_FOLLOW_UP_LENGTH} characters.",
                400,
            )

        try:
            result = service.refine(
                current,
                follow_up,
                detail_level=_text_field(payload, "detailLevel", "balanced") or "balanced",
                audience=_text_field(payload, "audience"),
            )
        except FlowsketchError:
            raise
        except Exception as exc:
            return _unexpected(exc)
        return jsonify(result.to_dict())

    @app.post("/api/import")
    def import_document() -> Any:
        payload = request.get_json(force=True, silent=True)
        document = import_flowchart(payload)
        logger.info(
            "Flowchart imported",
            extra={"node_count": len(document.nodes), "edge_count": len(document.edges)},
        )
        return jsonify({"flowchart": document.to_dict()})

    @app.post("/api/layout")
    def layout() -> Any:
        payload = request.get_json(force=True, silent=True) or {}
        current = payload.get("flowchart")
        if not isinstance(current, dict):
            return _error("A valid existing flowchart object is required.", 400)

        document = repair_existing_flowchart(current)
        result = layout_document(document, Orientation.parse(payload.get("direction")))
        return jsonify(result.to_dict())


def _unexpected(exc: Exception) -> Tuple[Response, int]:
    if is_credential_failure(exc):
        return _error(str(exc), 500)
    logger.exception("Unexpected error while handling request")
    return _error(str(exc) or "Unexpected server error", 502)
