"""Application-level helpers."""

import os
from typing import Mapping, Any

from flask import current_app, has_app_context


def get_application_config() -> Mapping[str, Any]:
    """
    Get the configuration for the current context.

    Inside a Flask application context this is the app config; elsewhere
    (scripts, workers) we fall back to the process environment. Mirrors
    ``arxiv.base.globals.get_application_config``.
    """
    if has_app_context():
        return current_app.config
    return os.environ
