"""Utilities for declaratively registering application modules.

Each blueprint-backed module is described with a small piece of metadata so
that registration stays in one table instead of being spread over the app
factory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from flask import Blueprint, Flask
from werkzeug.utils import import_string


@dataclass(frozen=True)
class ModuleDefinition:
    """Describe how a blueprint-backed module is registered with the app."""

    import_path: str
    attribute: str
    url_prefix: Optional[str] = None
    version: str = "1.0"
    csrf_exempt: bool = False

    def load_blueprint(self) -> Blueprint:
        """Import and return the blueprint described by this definition."""

        module = import_string(self.import_path)
        blueprint = getattr(module, self.attribute, None)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(
                "Expected attribute '%s' in '%s' to be a Flask Blueprint, got %r instead"
                % (self.attribute, self.import_path, type(blueprint))
            )
        return blueprint


def register_modules(app: Flask, modules: Sequence[ModuleDefinition]) -> None:
    """Register all modules in the provided iterable with the Flask app."""

    from .extensions import csrf_protect

    for module in modules:
        blueprint = module.load_blueprint()
        if module.csrf_exempt:
            csrf_protect.exempt(blueprint)
        app.register_blueprint(blueprint, url_prefix=module.url_prefix)
        app.logger.debug(
            "Registered module %s (version %s) at prefix %s",
            module.import_path,
            module.version,
            module.url_prefix or "<root>",
        )


def register_default_modules(app: Flask) -> None:
    """Convenience helper that registers the built-in RecallStack modules."""

    register_modules(app, DEFAULT_MODULES)


DEFAULT_MODULES: Iterable[ModuleDefinition] = (
    ModuleDefinition(
        "recallstack_app.modules.reviews.routes.api",
        "reviews_api_bp",
        url_prefix="/api/reviews",
        version="1.0",
        csrf_exempt=True,
    ),
)
