"""WordPress REST API client and the media store built on it."""

from __future__ import annotations

import logging
import time
from calendar import monthrange
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from mbar_cli.core.constants import API_BASE_PATH, IMAGE_MIME_TYPE, RATIO_META_KEY
from mbar_cli.core.models import MediaItem
from mbar_cli.core.ratios import ratio_key
from mbar_cli.core.store import (
    Dimensions,
    StorageUnavailable,
    as_dimension,
    as_ratio,
    matches_constraints,
    unmeasured_constraints,
)

logger = logging.getLogger("mbar.api")


class APIError(RuntimeError):
    """Raised for API failures after retries."""


class WordPressAPI:
    """Thin wrapper around the WordPress REST API."""

    def __init__(
        self,
        site_url: str,
        username: Optional[str] = None,
        app_password: Optional[str] = None,
        rate_limit_delay: float = 0.0,
        max_retries: int = 3,
        timeout_seconds: int = 30,
    ) -> None:
        self.base_url = f"{site_url.rstrip('/')}{API_BASE_PATH}"
        self.auth = (username, app_password) if username and app_password else None
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.timeout_seconds = timeout_seconds
        self._has_sent_request = False

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        include_headers: bool = False,
    ) -> Any:
        url = f"{self.base_url}{path}"
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                if self.rate_limit_delay > 0 and self._has_sent_request:
                    time.sleep(self.rate_limit_delay)

                self._has_sent_request = True
                response = requests.request(
                    method=method,
                    url=url,
                    headers=self._headers,
                    params=params,
                    json=json_data,
                    auth=self.auth,
                    timeout=self.timeout_seconds,
                )
                if response.status_code in (429, 500, 502, 503, 504):
                    raise requests.HTTPError(response.text, response=response)
                response.raise_for_status()

                payload = response.json() if response.text else {}
                if include_headers:
                    return payload, response.headers
                return payload
            except (requests.RequestException, ValueError) as exc:
                last_error = exc
                logger.debug("%s %s failed (attempt %d/%d): %s", method, path, attempt, self.max_retries, exc)
                if attempt >= self.max_retries:
                    break
                time.sleep(min(2**attempt, 8))

        raise APIError(f"API request failed for {method} {path}: {last_error}")

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._request("POST", path, json_data=payload)

    def list_media(self, params: Dict[str, Any]) -> Tuple[Any, Optional[int]]:
        """One page of media plus the X-WP-TotalPages count (None when absent)."""
        payload, headers = self._request("GET", "/media", params=params, include_headers=True)
        return payload, _total_pages(headers)

    def get_media(self, media_id: int) -> Any:
        return self.get(f"/media/{media_id}", params={"context": "edit"})

    def update_media_meta(self, media_id: int, meta: Dict[str, Any]) -> Any:
        return self.post(f"/media/{media_id}", {"meta": meta})


def _total_pages(headers: Mapping[str, Any]) -> Optional[int]:
    raw = headers.get("X-WP-TotalPages") if headers else None
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def _month_bounds(month: str) -> Dict[str, str]:
    year, number = int(month[:4]), int(month[4:6])
    last_day = monthrange(year, number)[1]
    return {
        "after": f"{year:04d}-{number:02d}-01T00:00:00",
        "before": f"{year:04d}-{number:02d}-{last_day:02d}T23:59:59",
    }


class RestMediaStore:
    """Media store backed by a site's ``/wp/v2/media`` endpoint.

    The REST API cannot select on a missing meta value, so image attachments
    are paged through in id order and filtered here.
    """

    def __init__(self, api: WordPressAPI, per_page: int = 100) -> None:
        self.api = api
        self.per_page = max(1, min(int(per_page), 100))

    def _call(self, description: str, func: Any, *args: Any) -> Any:
        try:
            return func(*args)
        except APIError as exc:
            raise StorageUnavailable(f"Unable to {description}: {exc}") from exc

    @staticmethod
    def _item(payload: Mapping[str, Any]) -> MediaItem:
        details = payload.get("media_details") or {}
        meta = payload.get("meta") or {}
        title = payload.get("title") or {}
        return MediaItem(
            id=int(payload["id"]),
            width=as_dimension(details.get("width")),
            height=as_dimension(details.get("height")),
            mime_type=str(payload.get("mime_type") or ""),
            status=str(payload.get("status") or ""),
            date=str(payload.get("date") or ""),
            title=str((title.get("rendered") if isinstance(title, dict) else title) or ""),
            ratio=as_ratio(meta.get(RATIO_META_KEY)) if isinstance(meta, dict) else None,
        )

    def _pages(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch, total_pages = self._call("list media", self.api.list_media, {**params, "page": page})
            if not isinstance(batch, list):
                raise StorageUnavailable(f"Unexpected media listing payload: {type(batch).__name__}")
            records.extend(item for item in batch if isinstance(item, dict))
            # Requesting past the last page is a 400 on WordPress.
            if total_pages is not None:
                if page >= total_pages:
                    return records
            elif len(batch) < self.per_page:
                return records
            page += 1

    def query(self, constraints: Mapping[str, Any]) -> List[MediaItem]:
        params: Dict[str, Any] = {
            "context": "edit",
            "per_page": self.per_page,
            "orderby": "id",
            "order": str(constraints.get("order") or "ASC").lower(),
            "status": constraints.get("post_status") or "inherit",
        }
        if constraints.get("post_mime_type") == IMAGE_MIME_TYPE:
            params["media_type"] = IMAGE_MIME_TYPE
        if constraints.get("m"):
            params.update(_month_bounds(str(constraints["m"])))

        items = []
        for record in self._pages(params):
            item = self._item(record)
            meta = record.get("meta") if isinstance(record.get("meta"), dict) else {}
            if matches_constraints(item, meta, constraints):
                items.append(item)
        return items

    def unmeasured_image_ids(self) -> List[int]:
        return [item.id for item in self.query(unmeasured_constraints())]

    def get_dimensions(self, item_id: int) -> Dimensions:
        item = self._item(self._call(f"read attachment {item_id}", self.api.get_media, item_id))
        return item.width, item.height

    def get_ratio(self, item_id: int) -> Optional[Decimal]:
        return self._item(self._call(f"read attachment {item_id}", self.api.get_media, item_id)).ratio

    def set_ratio(self, item_id: int, ratio: Decimal) -> None:
        self._call(
            f"update attachment {item_id}",
            self.api.update_media_meta,
            item_id,
            {RATIO_META_KEY: ratio_key(ratio)},
        )
