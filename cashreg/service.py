"""Flask service exposing change calculation over HTTP."""

import logging
from pathlib import Path
from typing import Any

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from cashreg.config import ConfigStore, load_policy, policy_from_dict, policy_to_dict
from cashreg.domain.batch import (
    build_response,
    parse_batch_payload,
    parse_change_lines,
    parse_change_payload,
    process_requests,
)
from cashreg.domain.change import RandomSource, calculate_change
from cashreg.domain.errors import ChangeError, MalformedInputError
from cashreg.logging_utils import configure_logging

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 1024 * 1024

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    store: ConfigStore | None = None,
    rng: RandomSource | None = None,
    config_path: Path | None = None,
) -> Flask:
    """Build the Flask app.

    Args:
        store: Shared policy store. If None, one is seeded from the config file.
        rng: Random source for randomized change.
        config_path: Config file used to seed a new store. If None, uses default location.
    """
    configure_logging()
    if store is None:
        store = ConfigStore(load_policy(config_path))

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES

    @app.errorhandler(ChangeError)
    def change_error(exc: ChangeError) -> Any:
        logger.info("Rejected %s %s: %s", request.method, request.path, exc.detail)
        return jsonify({"error": exc.code, "detail": exc.detail}), 400

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(exc: RequestEntityTooLarge) -> Any:
        logger.warning("Upload over %d bytes rejected", MAX_UPLOAD_BYTES)
        return jsonify({"error": "PAYLOAD_TOO_LARGE", "detail": f"limit is {MAX_UPLOAD_BYTES} bytes"}), 413

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers.update(CORS_HEADERS)
        return response

    @app.post("/api/change")
    def calculate() -> Any:
        change_request = parse_change_payload(_json_body())
        result = calculate_change(change_request, store.get(), rng)
        return jsonify(build_response(change_request, result).to_dict())

    @app.post("/api/change/batch")
    def calculate_batch() -> Any:
        requests = parse_batch_payload(_json_body())
        responses = process_requests(requests, store.get(), rng)
        return jsonify([r.to_dict() for r in responses])

    @app.post("/api/change/file")
    def calculate_file() -> Any:
        upload = request.files.get("file")
        if upload is None:
            raise MalformedInputError("Failed to read file")
        try:
            content = upload.read().decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInputError("Failed to read file content") from e
        if not content.strip():
            raise MalformedInputError("Failed to read file content")

        requests = parse_change_lines(content)
        responses = process_requests(requests, store.get(), rng)
        logger.info("Processed %d lines from %s", len(responses), upload.filename or "upload")
        return jsonify([r.to_dict() for r in responses])

    @app.get("/api/config")
    def get_config() -> Any:
        return jsonify(policy_to_dict(store.get()))

    @app.post("/api/config")
    def set_config() -> Any:
        policy = store.set(policy_from_dict(_json_body()))
        return jsonify(policy_to_dict(policy))

    @app.get("/health")
    def health() -> Any:
        return jsonify({"status": "healthy"})

    return app


def _json_body() -> Any:
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        raise MalformedInputError("Invalid request body")
    return payload
