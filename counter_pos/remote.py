"""HTTP client backend talking to ``counter_pos.server``."""

from __future__ import annotations

import logging
from typing import Any

import requests

from counter_pos.catalog import CachedMenuCatalog
from counter_pos.config import BILL_NUMBER_WIDTH, REMOTE_TIMEOUT_SECONDS
from counter_pos.errors import DuplicateBillNumberError, StorageError, ValidationError
from counter_pos.models import BillRecord, MenuItem

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin JSON wrapper; anything that goes wrong becomes a ``PosError``."""

    def __init__(self, base_url: str, session: Any = None, timeout: float = REMOTE_TIMEOUT_SECONDS) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def request(self, method: str, path: str, payload: Any = None) -> Any:
        url = f"{self.base_url}/api{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("api_unreachable method=%s path=%s error=%s", method, path, exc)
            raise StorageError(f"server unreachable: {exc}") from exc

        if response.status_code >= 400:
            self._raise_for_status(method, path, response)

        try:
            return response.json()
        except ValueError as exc:
            raise StorageError(f"{method} {path} returned invalid JSON") from exc

    def _raise_for_status(self, method: str, path: str, response: Any) -> None:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("error") or f"{response.status_code} {response.text[:200]}"
        logger.error("api_error method=%s path=%s status=%d error=%s", method, path, response.status_code, message)

        if response.status_code == 409:
            raise DuplicateBillNumberError(str(body.get("billNumber", "")), str(body.get("date", "")))
        if response.status_code in {400, 404, 422}:
            raise ValidationError(message)
        raise StorageError(f"{method} {path} failed: {message}")


class RemoteCatalog:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self) -> list[MenuItem]:
        return [MenuItem.from_dict(row) for row in self.client.request("GET", "/items")]

    def create(self, name: str, price: object, category: str) -> MenuItem:
        payload = {"name": name, "price": str(price), "category": category}
        return MenuItem.from_dict(self.client.request("POST", "/items", payload))

    def update(self, item_id: int, name: str, price: object, category: str) -> MenuItem:
        payload = {"name": name, "price": str(price), "category": category}
        return MenuItem.from_dict(self.client.request("PUT", f"/items/{item_id}", payload))

    def delete(self, item_id: int) -> None:
        self.client.request("DELETE", f"/items/{item_id}")


class RemoteLedger:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def append(self, bill: BillRecord) -> int:
        return int(self.client.request("POST", "/bills", bill.to_dict())["id"])

    def list_all(self) -> list[BillRecord]:
        return [BillRecord.from_dict(row) for row in self.client.request("GET", "/bills")]

    def clear_all(self, expected: int | None = None) -> int:
        path = "/bills" if expected is None else f"/bills?expected={expected}"
        return int(self.client.request("DELETE", path).get("removed", 0))


class RemoteSequence:
    """The server owns the counter; this only forwards calls."""

    def __init__(self, client: ApiClient, width: int = BILL_NUMBER_WIDTH) -> None:
        self.client = client
        self.width = width

    def issue_next(self) -> str:
        return str(self.client.request("POST", "/settings/bill-number")["billNumber"])

    def peek(self) -> str:
        return str(self.client.request("GET", "/settings/bill-number")["billNumber"])

    def reset(self) -> None:
        self.client.request("POST", "/settings/reset-bill-number")


class RemoteBackend:
    name = "remote"

    def __init__(self, base_url: str, session: Any = None, timeout: float = REMOTE_TIMEOUT_SECONDS) -> None:
        self.client = ApiClient(base_url, session=session, timeout=timeout)
        self.catalog = CachedMenuCatalog(RemoteCatalog(self.client))
        self.ledger = RemoteLedger(self.client)
        self.sequence = RemoteSequence(self.client)

    def healthy(self) -> bool:
        try:
            return self.client.request("GET", "/health").get("status") == "ok"
        except StorageError:
            return False
