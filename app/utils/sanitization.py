import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def clean_text(value: Optional[str], max_length: int = 255) -> Optional[str]:
    """
    Normalize free-text input: trim, collapse internal whitespace and cap length.
    Returns None for None or blank input.
    """
    if value is None:
        return None
    cleaned = _WHITESPACE.sub(" ", str(value)).strip()
    if not cleaned:
        return None
    return cleaned[:max_length]
