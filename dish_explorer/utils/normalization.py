from typing import Iterable, List


def fold(s) -> str:
    """Case-folded, trimmed form used for every case-insensitive comparison."""
    if s is None: return ""
    return str(s).strip().lower()


def clean_tokens(values: Iterable[str] | None) -> List[str]:
    if not values: return []
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


def split_comma_list(s) -> List[str]:
    if not s: return []
    return clean_tokens(str(s).split(","))
