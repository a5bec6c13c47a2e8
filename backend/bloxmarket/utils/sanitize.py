"""Input sanitization utilities."""
import html
from typing import Optional


def sanitize_string(value: Optional[str], max_length: int = 1000) -> Optional[str]:
    """
    Sanitize a free-text input.

    - Strip leading/trailing whitespace
    - HTML encode special characters
    - Truncate to max length (after escaping, respecting entity boundaries)
    """
    if value is None:
        return None

    value = html.escape(value.strip())

    if len(value) > max_length:
        value = value[:max_length]
        # Avoid leaving a half-cut entity at the end
        if '&' in value[-6:]:
            last_amp = value.rfind('&')
            if ';' not in value[last_amp:]:
                value = value[:last_amp]

    return value


def sanitize_optional(value: Optional[str], max_length: int = 1000) -> Optional[str]:
    """Like sanitize_string, but blank input becomes None."""
    value = sanitize_string(value, max_length)
    return value or None


def split_csv_field(value: Optional[str], max_items: int = 20) -> list[str]:
    """Split a comma-separated form field into trimmed, non-empty entries."""
    if not value:
        return []
    items = [part.strip() for part in value.split(",")]
    return [item for item in items if item][:max_items]


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user search terms match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
