import math
import re
import unicodedata

from forum.config import settings

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", str(text or "")).encode("ascii", "ignore").decode("ascii")
    value = _NON_WORD.sub("", normalized.lower())
    return _SEPARATORS.sub("-", value).strip("-")


def clamp_page(page: int, limit: int) -> tuple[int, int, int]:
    """(page, limit, offset) 를 설정 범위 안으로 보정한다."""
    page = max(1, int(page or 1))
    limit = int(limit or settings.DEFAULT_PAGE_SIZE)
    limit = max(1, min(limit, settings.MAX_PAGE_SIZE))
    return page, limit, (page - 1) * limit


def pagination_meta(total: int, page: int, limit: int) -> dict:
    return {
        "total": int(total),
        "page": int(page),
        "pages": int(math.ceil(total / limit)) if limit else 0,
    }


def like_pattern(text: str) -> str:
    """사용자 입력을 부분 일치 ILIKE 패턴으로 만든다. ``escape="\\\\"`` 와 함께 쓴다."""
    escaped = str(text).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
