"""Attachment records stored inline (base64) in an article's files/images columns."""

import json
import logging
import uuid
from typing import Any, Iterable
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class Attachment(BaseModel):
    # Unknown keys (filename, path, url, ...) are kept for the reference scanner.
    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    # Loosely typed: stored records may hold any JSON value here.
    name: Any = None
    type: Any = None
    size: Any = None
    data: Any = None
    is_new: bool = False


def _coerce(item: Any) -> Attachment | None:
    if isinstance(item, Attachment):
        return item
    if not isinstance(item, dict):
        return None
    try:
        return Attachment.model_validate(item)
    except ValidationError as e:
        # Never dropped: an entry leaves the list only through a removal id.
        logger.warning("Keeping attachment with unexpected field types: %s", e)
        return Attachment.model_construct(**{k: v for k, v in item.items() if k != "is_new"})


def load_attachments(raw: Any) -> list[Attachment]:
    """Normalize a stored files/images value into a list of attachments.

    Accepts JSON text, an already-parsed list, or None. Malformed JSON and
    non-list payloads yield an empty list.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            logger.warning("Attachment JSON parse error: %s", e)
            return []
    if not isinstance(raw, list):
        return []
    items = []
    for item in raw:
        attachment = _coerce(item)
        if attachment is not None:
            items.append(attachment)
    return items


def dump_attachments(items: Iterable[Attachment]) -> str:
    return json.dumps([a.model_dump(exclude={"is_new"}, exclude_none=True) for a in items], ensure_ascii=False)


def new_attachment_id() -> str:
    return str(uuid.uuid4())


def prepare_new(items: Iterable[Attachment], with_size: bool = True) -> list[Attachment]:
    """Server-side ids for attachments supplied at article creation."""
    prepared = []
    for a in items:
        update = {"id": new_attachment_id(), "is_new": False}
        if not with_size:
            update["size"] = None
        prepared.append(a.model_copy(update=update))
    return prepared


def reconcile_attachments(
    current: Iterable[Attachment],
    remove_ids: Iterable[str] | None,
    new: Iterable[Attachment] | None,
) -> list[Attachment]:
    """Survivors of ``current`` (ids not in ``remove_ids``) followed by ``new``.

    Unknown removal ids are ignored. New entries get a fresh id when they have
    none or when theirs is already taken, and are marked ``is_new``. Inputs
    are not mutated.
    """
    removed = {str(x) for x in (remove_ids or [])}
    survivors = [a for a in current if a.id is None or str(a.id) not in removed]
    taken = {str(a.id) for a in survivors if a.id is not None}

    result = list(survivors)
    for a in new or []:
        aid = a.id
        if aid is None or aid == "" or str(aid) in taken:
            aid = new_attachment_id()
        taken.add(str(aid))
        result.append(a.model_copy(update={"id": aid, "is_new": True}))
    return result
