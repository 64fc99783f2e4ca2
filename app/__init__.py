"""Application factory for the page extraction server."""

from __future__ import annotations

from typing import Any

import yaml
from flask import Flask
from werkzeug.exceptions import HTTPException

from common.errors import (
    AppError,
    InternalAppError,
    NotFoundAppError,
    PayloadTooLargeAppError,
    ValidationAppError,
)
from common.logging import get_logger, install_request_logging
from common.responses import fail, ok

from . import config as config_module
from .blueprints import load_manifests, register_plugin_blueprints

logger = get_logger("app")


def _load_yaml_config() -> dict[str, Any]:
    path = config_module.config_path()
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _apply_site_settings(app: Flask, site_settings: dict[str, Any]) -> None:
    app.config["SITE_SETTINGS"] = site_settings
    if "max_content_length_mb" in site_settings:
        try:
            max_bytes = int(float(site_settings["max_content_length_mb"]) * 1024 * 1024)
            app.config["MAX_CONTENT_LENGTH"] = max_bytes
        except (TypeError, ValueError):
            logger.warning(
                "ignoring invalid max_content_length_mb=%r", site_settings["max_content_length_mb"]
            )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def app_error(error: AppError):
        return fail(error)

    @app.errorhandler(400)
    def bad_request(error: HTTPException):
        return fail(ValidationAppError(message=error.description or "Bad request", code="bad_request"))

    @app.errorhandler(404)
    def not_found(error: HTTPException):
        return fail(NotFoundAppError(message="Resource not found"))

    @app.errorhandler(405)
    def method_not_allowed(error: HTTPException):
        return fail(AppError(message="Method not allowed", code="method_not_allowed", status_code=405))

    @app.errorhandler(413)
    def payload_too_large(error: HTTPException):
        limit = app.config.get("MAX_CONTENT_LENGTH")
        return fail(
            PayloadTooLargeAppError(
                message="Upload exceeds the maximum request size",
                details={"max_bytes": limit},
            )
        )

    @app.errorhandler(500)
    def server_error(error: Exception):
        return fail(InternalAppError(message="Internal server error"))


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)
    app.config.from_object(config_module.BaseConfig)

    yaml_config = _load_yaml_config()
    _apply_site_settings(app, yaml_config.get("site", {}) or {})
    plugin_settings = yaml_config.get("plugins", {}) or {}
    app.config["PLUGIN_SETTINGS"] = plugin_settings

    if config_name:
        config_obj = getattr(config_module, config_name, None)
        if config_obj:
            app.config.from_object(config_obj)

    install_request_logging(app)
    plugins = register_plugin_blueprints(app)
    _register_error_handlers(app)

    manifests = load_manifests(plugins)
    for manifest in manifests:
        blueprint = manifest.get("blueprint")
        plugin_config = plugin_settings.get(blueprint, {}) if blueprint else {}
        if plugin_config.get("summary"):
            manifest["summary"] = plugin_config["summary"]
    app.config["PLUGIN_MANIFESTS"] = manifests

    @app.after_request
    def apply_response_headers(response):
        """Attach strict security headers to every outgoing response."""

        configured = app.config.get("RESPONSE_HEADERS", {})
        for header, value in configured.items():
            if header not in response.headers:
                response.headers[header] = value
        return response

    @app.get("/")
    def home():
        site = app.config.get("SITE_SETTINGS", {})
        return ok(
            {
                "name": site.get("title", "Page Extract Server"),
                "plugins": app.config.get("PLUGIN_MANIFESTS", []),
            }
        )

    logger.info("registered %d plugin(s)", len(plugins))
    return app


__all__ = ["create_app"]
