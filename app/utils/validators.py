"""Validators."""

import re
from typing import List, Optional


def validate_password_strength(password: str) -> tuple[bool, List[str]]:
    """Validate password strength."""
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        errors.append("Password must contain at least one letter")

    if not re.search(r'\d', password):
        errors.append("Password must contain at least one digit")

    return len(errors) == 0, errors

def parse_positive_id(value) -> Optional[int]:
    """Parse a surrogate id from user input; None when it is not a positive integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and re.fullmatch(r'\s*\d+\s*', value):
        parsed = int(value)
        return parsed if parsed > 0 else None
    return None

def validate_mime_type(mime_type: Optional[str], allowed: List[str]) -> bool:
    """Validate declared MIME type (parameters such as charset are ignored)."""
    if not mime_type:
        return False
    base = mime_type.split(';', 1)[0].strip().lower()
    return base in [m.lower() for m in allowed]
