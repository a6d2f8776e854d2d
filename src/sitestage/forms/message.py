"""Plain-text and HTML bodies for submission emails."""

from html import escape

from .types import FormValues


def format_text(data: FormValues) -> str:
    """Render one "key: value" line per field; list values are comma-joined."""
    lines = []
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(value)
        lines.append(f"{key}: {value}")
    return "\n".join(lines)


def format_html(text: str) -> str:
    return "<p>" + escape(text).replace("\n", "<br>") + "</p>"


def normalize_recipients(recipients: object) -> list[str]:
    """Return recipients as a list; a bare string is one recipient."""
    if not recipients:
        return []
    if isinstance(recipients, (list, tuple)):
        return [str(item) for item in recipients]
    return [str(recipients)]
