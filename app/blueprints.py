"""Plugin discovery and blueprint registration."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Iterable, Iterator

from flask import Blueprint, Flask

PLUGIN_PACKAGE = "plugins"


def iter_plugins(package: str = PLUGIN_PACKAGE) -> Iterator[str]:
    """Yield dotted import paths for every plugin package."""

    package_path = Path(__file__).resolve().parent.parent / package
    if not package_path.exists():
        return
    for module_info in pkgutil.iter_modules([str(package_path)]):
        if module_info.ispkg:
            yield f"{package}.{module_info.name}"


def _plugin_blueprints(dotted: str) -> list[Blueprint]:
    module = importlib.import_module(f"{dotted}.api")
    module_blueprints = getattr(module, "blueprints", None)
    if module_blueprints:
        return list(module_blueprints)
    blueprint = getattr(module, "bp", None)
    return [blueprint] if blueprint is not None else []


def load_manifests(plugins: Iterable[str]) -> list[dict[str, str]]:
    manifests: list[dict[str, str]] = []
    for dotted in plugins:
        module = importlib.import_module(dotted)
        manifest = getattr(module, "manifest", None)
        if manifest:
            manifests.append(dict(manifest))
    manifests.sort(key=lambda item: item["title"].lower())
    return manifests


def register_plugin_blueprints(app: Flask) -> list[str]:
    plugins = list(iter_plugins())
    for dotted in plugins:
        for bp in _plugin_blueprints(dotted):
            app.register_blueprint(bp)
    return plugins


__all__ = ["iter_plugins", "load_manifests", "register_plugin_blueprints"]
