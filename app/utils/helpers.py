"""Helper utilities."""

import re
from typing import Dict


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for storage: lower-case, anything outside [a-z0-9.-_] becomes '_'."""
    return re.sub(r'[^a-z0-9.\-_]', '_', (filename or "file").lower())


def paginate_query(page: int = 1, page_size: int = 20) -> Dict:
    """Offset/limit for a 1-based page number."""
    page = max(page, 1)
    return {
        "offset": (page - 1) * page_size,
        "limit": page_size,
        "page": page,
        "page_size": page_size,
    }
