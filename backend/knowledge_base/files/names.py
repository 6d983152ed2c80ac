"""Finding upload filenames referenced by article content and attachments."""

import logging
import re
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp"})

GENERATED_NAME_RE = re.compile(r"^image-\d+-\d+\.[A-Za-z0-9]+$")
SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")

_URL_TAIL = r"([^\"'\s?#<>/\\]+)"
CONTENT_PATTERNS = (
    # /api/uploads/<name>
    re.compile(r"/api/uploads/" + _URL_TAIL, re.IGNORECASE),
    # /uploads/<name>, absolute or relative
    re.compile(r"/uploads/" + _URL_TAIL, re.IGNORECASE),
)
ATTRIBUTE_PATTERNS = (
    re.compile(r"\bsrc\s*=\s*[\"']([^\"']*uploads/[^\"']*)[\"']", re.IGNORECASE),
    re.compile(r"\bdata-image\s*=\s*[\"']([^\"']*uploads/[^\"']*)[\"']", re.IGNORECASE),
)


def is_valid_filename(filename: Any) -> bool:
    if not isinstance(filename, str) or not filename:
        return False
    if "." not in filename:
        return False
    ext = filename.rsplit(".", 1)[1].lower()
    if ext not in ALLOWED_IMAGE_EXTS:
        return False
    return bool(GENERATED_NAME_RE.match(filename) or SAFE_NAME_RE.match(filename))


def _last_segment(value: str) -> str:
    value = value.split("?", 1)[0].split("#", 1)[0]
    return value.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


def extract_from_content(content: Any) -> set[str]:
    if not isinstance(content, str) or not content:
        return set()

    candidates: list[str] = []
    for pattern in CONTENT_PATTERNS:
        candidates.extend(pattern.findall(content))
    for pattern in ATTRIBUTE_PATTERNS:
        candidates.extend(_last_segment(v) for v in pattern.findall(content))

    return {name for name in candidates if is_valid_filename(name)}


def _field(name: str) -> Callable[[Any], str | None]:
    def _get(attachment: Any) -> str | None:
        if isinstance(attachment, dict):
            value = attachment.get(name)
        else:
            value = getattr(attachment, name, None)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    _get.__name__ = f"get_{name}"
    return _get


# Tried in order; the first populated string wins.
REFERENCE_ACCESSORS: tuple[Callable[[Any], str | None], ...] = tuple(
    _field(n) for n in ("filename", "fileName", "name", "filePath", "path", "url")
)


def reference_from_attachment(attachment: Any) -> str | None:
    for accessor in REFERENCE_ACCESSORS:
        value = accessor(attachment)
        if value is None:
            continue
        if ".." in value:
            return None
        name = _last_segment(value)
        if not name or ".." in name:
            return None
        return name
    return None


def extract_from_attachments(attachments: Iterable[Any] | None) -> set[str]:
    found: set[str] = set()
    for attachment in attachments or []:
        try:
            name = reference_from_attachment(attachment)
        except Exception:
            logger.exception("Failed to read attachment reference")
            continue
        if name:
            found.add(name)
    return found


def extract_from_article(article) -> set[str]:
    """Filenames referenced from an article's images and files fields."""
    return extract_from_attachments(article.image_list) | extract_from_attachments(article.file_list)


def referenced_filenames(article) -> set[str]:
    return extract_from_content(article.content) | extract_from_article(article)
