"""HTTP backend: delegates every operation to another prompt manager service."""

import logging
import time
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from ..exceptions import ERROR_FACTORIES, ErrorCode, RemoteBackendError
from ..schemas.item import Item, ItemDraft, ItemMoveRequest, ItemUpdate, Version
from ..schemas.search import SearchFilters, SearchResult
from ..services.forest_codec import forest_from_records, forest_to_records
from .base import ItemBackend

logger = logging.getLogger(__name__)

# Retry configuration for transient failures (connection errors, 5xx).
MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0  # seconds; exponential: 1s, 2s, 4s


def _item_path(item_id: str) -> str:
    return f"/api/items/{quote(item_id, safe='')}"


class RemoteBackend(ItemBackend):
    """Synchronous client over the REST API of a remote prompt manager.

    Structured error payloads (``{"error", "message", "details"}``) are turned
    back into the matching exception class, so callers see the same errors
    as with a local backend. Transport failures that outlast the retries raise
    RemoteBackendError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: str = "",
        timeout: float = 30.0,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = RETRY_BASE_DELAY,
        client: Optional[httpx.Client] = None,
    ):
        if client is None:
            if not base_url:
                raise ValueError("RemoteBackend needs a base_url or a client")
            headers: dict[str, str] = {}
            if token:
                headers["Authorization"] = f"Bearer {token}"
            client = httpx.Client(base_url=base_url, headers=headers, timeout=timeout)
        self._client = client
        self.max_retries = max(1, max_retries)
        self.retry_base_delay = retry_base_delay

    def _request_with_retry(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Execute an HTTP request with retry on transient failures.

        Retries on connection errors, timeouts and 5xx responses with
        exponential backoff. 4xx responses are returned to the caller.
        """
        last_error = ""
        upstream_status = 0

        for attempt in range(self.max_retries):
            try:
                resp = self._client.request(method, path, **kwargs)
                if resp.status_code < 500:
                    return resp
                # 5xx: a structured storage error is final, anything else is retried
                if self._error_code(resp) == ErrorCode.STORAGE_ERROR:
                    return resp
                upstream_status = resp.status_code
                last_error = f"Server error {resp.status_code}"
            except (httpx.ConnectError, httpx.TimeoutException) as exc:
                last_error = str(exc) or type(exc).__name__

            if attempt < self.max_retries - 1:
                delay = self.retry_base_delay * (2 ** attempt)
                logger.warning(
                    "Request %s %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    method, path, attempt + 1, self.max_retries, delay, last_error,
                )
                time.sleep(delay)

        raise RemoteBackendError(
            f"{method} {path} failed after {self.max_retries} attempts: {last_error}",
            status_code=upstream_status,
        )

    @staticmethod
    def _error_code(resp: httpx.Response) -> Optional[ErrorCode]:
        try:
            return ErrorCode(resp.json().get("error"))
        except (ValueError, AttributeError):
            return None

    def _call(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Request and raise the mapped exception for any error status."""
        resp = self._request_with_retry(method, path, **kwargs)
        self._raise_for_error(resp)
        return resp

    def _raise_for_error(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return

        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        code = self._error_code(resp)
        factory = ERROR_FACTORIES.get(code) if code else None
        message = payload.get("message") or f"Remote returned {resp.status_code}"
        if factory is not None:
            raise factory(payload.get("details") or {}, message)
        raise RemoteBackendError(message, status_code=resp.status_code)

    # ------------------------------------------------------------------
    # ItemBackend
    # ------------------------------------------------------------------

    def list_items(self) -> List[Item]:
        return forest_from_records(self._call("GET", "/api/items").json())

    def get_item(self, item_id: str) -> Optional[Item]:
        resp = self._request_with_retry("GET", _item_path(item_id))
        if resp.status_code == 404:
            return None
        self._raise_for_error(resp)
        return Item.model_validate(resp.json())

    def add_item(self, parent_id: Optional[str], draft: ItemDraft) -> Item:
        body = draft.model_dump(mode="json", by_alias=True, exclude_none=True)
        body["parentId"] = parent_id
        resp = self._call("POST", "/api/items", json=body)
        return Item.model_validate(resp.json())

    def update_item(self, item_id: str, updates: ItemUpdate) -> Item:
        resp = self._call(
            "PATCH", _item_path(item_id),
            json=updates.model_dump(mode="json", by_alias=True, exclude_unset=True),
        )
        return Item.model_validate(resp.json())

    def delete_item(self, item_id: str) -> None:
        self._call("DELETE", _item_path(item_id))

    def move_item(self, item_id: str, new_parent_id: Optional[str]) -> Item:
        body = ItemMoveRequest(parent_id=new_parent_id)
        resp = self._call(
            "PUT", f"{_item_path(item_id)}/move",
            json=body.model_dump(mode="json", by_alias=True),
        )
        return Item.model_validate(resp.json())

    def search_items(self, query: str, filters: Optional[SearchFilters] = None) -> List[SearchResult]:
        params: dict[str, str] = {"q": query}
        if filters is not None:
            if filters.kinds:
                params["kinds"] = ",".join(k.value for k in filters.kinds)
            params["date"] = filters.date.value
        resp = self._call("GET", "/api/search/", params=params)
        return [SearchResult.model_validate(r) for r in resp.json()]

    def list_versions(self, item_id: str) -> List[Version]:
        resp = self._call("GET", f"{_item_path(item_id)}/versions")
        return [Version.model_validate(v) for v in resp.json()]

    def create_version(self, item_id: str, label: Optional[str] = None) -> Version:
        body = {"label": label} if label is not None else {}
        resp = self._call("POST", f"{_item_path(item_id)}/versions", json=body)
        return Version.model_validate(resp.json())

    def restore_version(self, item_id: str, version_id: str) -> Item:
        resp = self._call(
            "POST", f"{_item_path(item_id)}/versions/{quote(version_id, safe='')}/restore",
        )
        return Item.model_validate(resp.json())

    def export_forest(self) -> List[Item]:
        return forest_from_records(self._call("GET", "/api/export").json())

    def import_forest(self, forest: List[Item]) -> int:
        resp = self._call("PUT", "/api/import", json=forest_to_records(forest))
        return int(resp.json()["imported"])

    def close(self) -> None:
        self._client.close()
