"""Firestore REST client — the document store behind the hosted app.

Both store adapters talk to Firestore through one explicitly constructed
`FirestoreClient`; nothing here is a process-wide singleton.

Endpoints used:
  runQuery   — POST {base}/documents:runQuery  {"structuredQuery": ...}
               Response: [{"document": {...}}, ...] or [{"readTime": ...}]
  get        — GET  {base}/documents/{collection}/{doc_id}
               Response: {"name": ..., "fields": {...}}; 404 when absent

Documents carry typed values ({"stringValue": "x"}, {"integerValue": "3"},
{"mapValue": {"fields": {...}}}, ...). `decode_document` flattens them into
plain dicts that the pydantic models validate.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from questly.errors import StoreUnavailable

logger = logging.getLogger(__name__)

FIRESTORE_URL = "https://firestore.googleapis.com/v1"


# ---------------------------------------------------------------------------
# Value codec
# ---------------------------------------------------------------------------

def decode_value(value: dict[str, Any]) -> Any:
    """Convert one Firestore typed value into a plain Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    for key in ("stringValue", "timestampValue", "referenceValue", "bytesValue"):
        if key in value:
            return value[key]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    raise ValueError(f"Unsupported Firestore value: {sorted(value)}")


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {name: decode_value(v) for name, v in fields.items()}


def decode_document(document: dict[str, Any]) -> dict[str, Any]:
    """Flatten a Firestore document; the record id is exposed as ``docId``."""
    data = decode_fields(document.get("fields", {}))
    name = document.get("name", "")
    if name:
        data["docId"] = name.rsplit("/", 1)[-1]
    return data


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class FirestoreClient:
    """Async Firestore REST client for one project.

    Args:
        project_id: Google Cloud project id.
        api_key:    Web API key, sent as the ``key`` query parameter.
        token:      Firebase ID token, sent as a bearer token when set.
        base_url:   Override for the REST root, e.g. an emulator at
                    "http://localhost:8080/v1".
        database:   Database id. Defaults to "(default)".
        timeout:    HTTP timeout in seconds.
        client:     Optional shared ``httpx.AsyncClient``; a short-lived one
                    is opened per request otherwise.
    """

    def __init__(
        self,
        project_id: str,
        api_key: str = "",
        token: str = "",
        base_url: str = FIRESTORE_URL,
        database: str = "(default)",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._root = (
            f"{base_url.rstrip('/')}/projects/{project_id}/databases/{database}/documents"
        )
        self._api_key = api_key
        self._token = token
        self._timeout = timeout
        self._client = client

    @property
    def documents_url(self) -> str:
        return self._root

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _params(self) -> dict[str, str]:
        return {"key": self._api_key} if self._api_key else {}

    async def _send(self, method: str, url: str, body: dict | None = None) -> httpx.Response:
        kwargs: dict[str, Any] = {"headers": self._headers(), "params": self._params()}
        if body is not None:
            kwargs["json"] = body
        try:
            if self._client is not None:
                return await self._client.request(method, url, **kwargs)
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                if method == "POST":
                    return await client.post(url, **kwargs)
                return await client.get(url, **kwargs)
        except httpx.ConnectError as e:
            raise StoreUnavailable(f"Cannot connect to Firestore at {url}") from e
        except httpx.TimeoutException as e:
            raise StoreUnavailable(f"Firestore timed out after {self._timeout}s") from e
        except httpx.TransportError as e:
            raise StoreUnavailable(f"Firestore request failed: {type(e).__name__}: {e}") from e

    @staticmethod
    def _check(resp: httpx.Response) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreUnavailable(
                f"Firestore returned HTTP {e.response.status_code}"
            ) from e

    async def query_equal(
        self, collection: str, field: str, value: str, limit: int = 1
    ) -> list[dict[str, Any]]:
        """Documents whose ``field`` equals ``value``, ordered by document name."""
        url = f"{self._root}:runQuery"
        body = {
            "structuredQuery": {
                "from": [{"collectionId": collection}],
                "where": {
                    "fieldFilter": {
                        "field": {"fieldPath": field},
                        "op": "EQUAL",
                        "value": {"stringValue": value},
                    }
                },
                "orderBy": [{"field": {"fieldPath": "__name__"}, "direction": "ASCENDING"}],
                "limit": limit,
            }
        }
        logger.debug("firestore query collection=%s %s=%s", collection, field, value)
        resp = await self._send("POST", url, body)
        self._check(resp)
        try:
            rows = resp.json()
            if not isinstance(rows, list):
                raise TypeError(f"expected a list, got {type(rows).__name__}")
            return [decode_document(row["document"]) for row in rows if "document" in row]
        except (ValueError, TypeError, KeyError) as e:
            raise StoreUnavailable("Unexpected response format from Firestore") from e

    async def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """A single document by record id, or None when it does not exist."""
        url = f"{self._root}/{collection}/{doc_id}"
        logger.debug("firestore get %s/%s", collection, doc_id)
        resp = await self._send("GET", url)
        if resp.status_code == 404:
            return None
        self._check(resp)
        try:
            return decode_document(resp.json())
        except (ValueError, TypeError, KeyError) as e:
            raise StoreUnavailable("Unexpected response format from Firestore") from e
