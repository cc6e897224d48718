"""Jinja2 rendering for email bodies.

Autoescaping is always on: every interpolated value (package labels,
metadata, form fields, email addresses) is HTML-escaped.
"""

from email.utils import parseaddr
from functools import lru_cache
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined

PLACEHOLDER = "—"


@lru_cache(maxsize=1)
def get_template_environment() -> Environment:
    """Shared template environment loading from ``storefront/templates``."""
    return Environment(
        loader=PackageLoader("storefront", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template(template_name: str, /, **context: Any) -> str:
    """Render a template by file name.

    The file name is positional-only so any context key (including ``name``)
    can be passed through.
    """
    return get_template_environment().get_template(template_name).render(**context)


def sender_address(sender: str) -> str:
    """Bare address from ``"Name <addr>"`` (or the input when already bare)."""
    _, address = parseaddr(sender)
    return address or sender.strip()
