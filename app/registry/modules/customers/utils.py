from __future__ import annotations

import math
import re
from typing import Any

# Loose check used to gate create requests before any DB work.
BASIC_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Stricter syntax enforced at write time.
EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def is_basic_email(value: str) -> bool:
    return bool(BASIC_EMAIL_RE.match(value or ""))


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally (escape char is backslash)."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def total_pages_for(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


def build_pagination(*, page: int, page_size: int, total: int) -> dict[str, Any]:
    return {
        "currentPage": page,
        "totalPages": total_pages_for(total, page_size),
        "totalItems": total,
        "itemsPerPage": page_size,
    }
