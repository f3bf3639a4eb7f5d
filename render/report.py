from __future__ import annotations

import pathlib
import re
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from schemas.analysis import ClassifiedError, FullAnalysisResult, ResponseCritique

TEMPLATE_DIR = pathlib.Path(__file__).resolve().parent.parent / "templates"

_NUMBERED_ITEM = re.compile(r"(?:^|\s)\d+\.\s+")


def list_templates() -> Dict[str, pathlib.Path]:
    return {p.stem: p for p in TEMPLATE_DIR.glob("*.md")}


def split_numbered(text: str) -> List[str]:
    """Split "1. foo 2. bar" style text into its items; plain text stays whole."""
    if not text:
        return []
    items = [item.strip() for item in _NUMBERED_ITEM.split(text)]
    return [item for item in items if item]


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["numbered"] = split_numbered
    return env


def render_template(template_name: str, context: dict) -> str:
    templates = list_templates()
    if template_name not in templates:
        raise ValueError(f"Template {template_name} not found. Available: {list(templates)}")
    template = _environment().get_template(f"{template_name}.md")
    return template.render(**context)


def render_analysis(result: FullAnalysisResult) -> str:
    return render_template("analysis", result.dict())


def render_critique(critique: ResponseCritique, question: str = "") -> str:
    return render_template("critique", {"question": question, **critique.dict()})


def render_error(error: ClassifiedError) -> str:
    return render_template("error", {"message": error.message, "source": error.source.value})
