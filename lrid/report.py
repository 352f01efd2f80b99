# lrid/report.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

REPORT_TEMPLATES = {
    "executive": "executive.html",
    "hr": "hr.html",
    "academic": "academic.html",
}

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


class UnknownReportError(KeyError):
    pass


def render_report(kind: str, payload: Dict[str, Any]) -> str:
    """Render one report kind to HTML. PDF conversion happens elsewhere."""
    name = REPORT_TEMPLATES.get(kind)
    if name is None:
        raise UnknownReportError(kind)
    return _env.get_template(name).render(p=payload)
