"""Media library store interface and the file-backed library."""

from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import yaml

from mbar_cli.core.constants import ATTACHMENT_STATUS, IMAGE_MIME_TYPE, RATIO_META_KEY
from mbar_cli.core.models import MediaItem
from mbar_cli.core.ratios import ratio_key

logger = logging.getLogger("mbar.store")

Dimensions = Tuple[Optional[int], Optional[int]]


class StorageUnavailable(RuntimeError):
    """Raised when the media library cannot be read or written."""


class MediaStore(Protocol):
    """What the classifier and the filter listing need from a media library."""

    def unmeasured_image_ids(self) -> List[int]:
        """Image attachment ids with no stored ratio, ascending."""

    def get_dimensions(self, item_id: int) -> Dimensions:
        """Width and height from the attachment metadata (None when absent)."""

    def set_ratio(self, item_id: int, ratio: Decimal) -> None:
        """Persist the measured ratio for an attachment."""

    def get_ratio(self, item_id: int) -> Optional[Decimal]:
        """Stored ratio, or None when the attachment is unmeasured."""

    def query(self, constraints: Mapping[str, Any]) -> List[MediaItem]:
        """Attachments matching mapped filter constraints."""


def as_dimension(value: Any) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def as_ratio(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _meta_matches(meta: Mapping[str, Any], clause: Mapping[str, Any]) -> bool:
    key = clause.get("key")
    compare = str(clause.get("compare") or "=").upper()
    present = key in meta and meta[key] not in (None, "")
    if compare == "NOT EXISTS":
        return not present
    if compare == "EXISTS":
        return present
    if not present:
        return False

    expected = as_ratio(clause.get("value"))
    actual = as_ratio(meta[key])
    if expected is not None and actual is not None:
        return expected == actual
    return str(meta[key]) == str(clause.get("value"))


def matches_constraints(item: MediaItem, meta: Mapping[str, Any], constraints: Mapping[str, Any]) -> bool:
    """Evaluate host-style query arguments against one attachment."""
    mime = constraints.get("post_mime_type")
    if mime and not (item.mime_type == mime or item.mime_type.startswith(f"{mime}/")):
        return False

    status = constraints.get("post_status")
    if status and item.status != status:
        return False

    month = constraints.get("m")
    if month:
        digits = item.date.replace("-", "")[:6]
        if digits != str(month):
            return False

    for clause in constraints.get("meta_query") or []:
        if not _meta_matches(meta, clause):
            return False
    return True


def unmeasured_constraints() -> Dict[str, Any]:
    """Query arguments selecting images that have not been measured yet."""
    return {
        "post_type": "attachment",
        "post_mime_type": IMAGE_MIME_TYPE,
        "post_status": ATTACHMENT_STATUS,
        "meta_query": [{"key": RATIO_META_KEY, "compare": "NOT EXISTS"}],
        "orderby": "ID",
        "order": "ASC",
        "fields": "ids",
    }


class FileMediaStore:
    """Media library kept in a local JSON or YAML file.

    The file holds a list of attachments (or ``{"attachments": [...]}``), each
    with ``id``, ``mime_type``, ``status``, ``date``, ``title``, a ``metadata``
    table carrying ``width``/``height`` and a ``meta`` table of stored values.
    Every write is flushed to disk immediately so an interrupted batch keeps
    the items it already measured.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._document: Any = None
        self._records: Optional[List[Dict[str, Any]]] = None

    def _load(self) -> List[Dict[str, Any]]:
        if self._records is not None:
            return self._records
        if not self.path.exists():
            raise StorageUnavailable(f"Media library not found: {self.path}")

        try:
            text = self.path.read_text()
            if self.path.suffix.lower() in {".yaml", ".yml"}:
                document = yaml.safe_load(text)
            else:
                document = json.loads(text) if text.strip() else []
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise StorageUnavailable(f"Unable to read media library {self.path}: {exc}") from exc

        attachments = document.get("attachments", []) if isinstance(document, dict) else document
        if not isinstance(attachments, list):
            raise StorageUnavailable(f"Media library {self.path} must contain a list of attachments")

        # Records stay references into the loaded document, which is what _save writes.
        records = [record for record in attachments if isinstance(record, dict) and "id" in record]
        logger.debug("Loaded %d attachments from %s", len(records), self.path)
        self._document = document
        self._records = records
        return records

    def _save(self) -> None:
        self._load()
        try:
            if self.path.suffix.lower() in {".yaml", ".yml"}:
                self.path.write_text(yaml.safe_dump(self._document, sort_keys=False))
            else:
                self.path.write_text(json.dumps(self._document, indent=2) + "\n")
        except OSError as exc:
            raise StorageUnavailable(f"Unable to write media library {self.path}: {exc}") from exc

    def _record(self, item_id: int) -> Dict[str, Any]:
        for record in self._load():
            if int(record["id"]) == item_id:
                return record
        raise StorageUnavailable(f"Attachment {item_id} not found in {self.path}")

    @staticmethod
    def _item(record: Mapping[str, Any]) -> MediaItem:
        metadata = record.get("metadata") or {}
        meta = record.get("meta") or {}
        return MediaItem(
            id=int(record["id"]),
            width=as_dimension(metadata.get("width")),
            height=as_dimension(metadata.get("height")),
            mime_type=str(record.get("mime_type") or ""),
            status=str(record.get("status") or ATTACHMENT_STATUS),
            date=str(record.get("date") or ""),
            title=str(record.get("title") or ""),
            ratio=as_ratio(meta.get(RATIO_META_KEY)),
        )

    def unmeasured_image_ids(self) -> List[int]:
        return [item.id for item in self.query(unmeasured_constraints())]

    def get_dimensions(self, item_id: int) -> Dimensions:
        metadata = self._record(item_id).get("metadata") or {}
        return as_dimension(metadata.get("width")), as_dimension(metadata.get("height"))

    def get_ratio(self, item_id: int) -> Optional[Decimal]:
        meta = self._record(item_id).get("meta") or {}
        return as_ratio(meta.get(RATIO_META_KEY))

    def set_ratio(self, item_id: int, ratio: Decimal) -> None:
        record = self._record(item_id)
        meta = record.get("meta")
        if not isinstance(meta, dict):
            meta = {}
            record["meta"] = meta
        meta[RATIO_META_KEY] = ratio_key(ratio)
        self._save()

    def query(self, constraints: Mapping[str, Any]) -> List[MediaItem]:
        items = []
        for record in self._load():
            item = self._item(record)
            if matches_constraints(item, record.get("meta") or {}, constraints):
                items.append(item)
        reverse = str(constraints.get("order") or "ASC").upper() == "DESC"
        items.sort(key=lambda item: item.id, reverse=reverse)
        return items
