"""Template rendering utilities."""

import logging
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError


logger = logging.getLogger(__name__)

# Missing variables must not silently render as empty strings
_environment = Environment(undefined=StrictUndefined, keep_trailing_newline=False)


def render_template(template_str: str, **context: Any) -> str:
    """Render a Jinja2 template string with given context."""
    try:
        return _environment.from_string(template_str).render(**context)
    except TemplateError as e:
        logger.error(f"Template rendering error: {e}")
        raise
