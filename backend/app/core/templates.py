"""
Template rendering utilities
"""
from datetime import datetime
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def time_ago(value: datetime | None, now: datetime | None = None) -> str:
    """Render a timestamp relative to now ("3 hours ago")."""
    if value is None:
        return ""
    now = now or datetime.utcnow()
    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "just now"

    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"


templates.env.filters["time_ago"] = time_ago


def render_template(
    request: Request,
    template_name: str,
    context: dict,
    status_code: int = 200,
):
    """Render template with context"""
    return templates.TemplateResponse(
        request, template_name, context, status_code=status_code
    )
