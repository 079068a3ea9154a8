"""Flask application factory for the SmartFilter gateway."""

from __future__ import annotations

import logging
import sys

from flask import Flask, jsonify, request
from flask_cors import CORS

from .config import Config
from .errors import GatewayError
from .routes import photos_bp

logger = logging.getLogger(__name__)

ALLOWED_HEADERS = ["Origin", "X-Requested-With", "Content-Type", "Accept"]


def create_app(config: Config | None = None) -> Flask:
    """Create and configure the Flask application."""
    if config is None:
        config = Config.load()

    config.ensure_directories()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app = Flask(__name__)
    CORS(
        app,
        resources={r"/*": {"origins": "*"}},
        allow_headers=ALLOWED_HEADERS,
        send_wildcard=True,
    )

    app.config["backend"] = config.backend
    app.config["upload_dir"] = config.upload_dir.resolve()
    app.config["output_dir"] = config.output_dir.resolve()

    app.register_blueprint(photos_bp)

    @app.after_request
    def allow_headers(response):
        # flask-cors answers preflights itself
        if request.method != "OPTIONS":
            response.headers.setdefault(
                "Access-Control-Allow-Headers", ", ".join(ALLOWED_HEADERS)
            )
        return response

    @app.errorhandler(GatewayError)
    def handle_gateway_error(error: GatewayError):
        return jsonify(error.to_dict()), error.code

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info(
        "SmartFilter gateway initialized (worker at %s:%d)",
        config.backend_host, config.backend_port,
    )
    return app


def main() -> None:
    """Entry point for running the development server."""
    config = Config.load()
    app = create_app(config)
    app.run(host=config.http_host, port=config.http_port, threaded=True, use_reloader=False)


if __name__ == "__main__":
    main()
