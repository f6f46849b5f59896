import html
from typing import Optional

MAX_NOTES_LENGTH = 1000


def sanitize_string(value: Optional[str], max_length: int = MAX_NOTES_LENGTH) -> Optional[str]:
    """
    Escape HTML special characters in free-text input and cap its length.
    Returns None if input is None.
    """
    if value is None:
        return None
    return html.escape(str(value)[:max_length], quote=True)
