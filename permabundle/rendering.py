"""Jinja environment for document templates."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

TEMPLATES_DIR = Path(__file__).with_name("templates")


@lru_cache(maxsize=None)
def template_environment(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    """Return a shared environment loading from ``templates_dir``."""
    loader = FileSystemLoader(str(templates_dir))
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def render(template_name: str, **context: object) -> str:
    return template_environment().get_template(template_name).render(**context)


__all__ = ["TEMPLATES_DIR", "render", "template_environment"]
