# blog/storage/remote.py

"""
Удаленное хранилище: key-value сервис по HTTP.

GET {base_url}/{key}  -> JSON-список записей, 404 если коллекции нет
PUT {base_url}/{key}  -> заменить коллекцию целиком
"""

import logging
from typing import List, Optional

import requests

from blog.storage.base import StorageAdapter
from blog.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class RemoteStorage(StorageAdapter):
    name = "remote"

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 5.0,
        session=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        # session - requests.Session или совместимый клиент
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _request(self, method: str, key: str, **kwargs):
        url = f"{self.base_url}/{key}"
        try:
            return self._session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.exception("Remote storage %s %s failed", method, url)
            raise StorageError() from exc

    def read(self, key: str) -> Optional[List[dict]]:
        response = self._request("GET", key)
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.error("Remote storage read %s returned %s", key, response.status_code)
            raise StorageError()
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Remote storage returned invalid JSON for %s", key)
            raise StorageError() from exc
        if not isinstance(data, list):
            logger.error("Remote storage returned %s instead of a list for %s", type(data).__name__, key)
            raise StorageError()
        return data

    def write(self, key: str, records: List[dict]) -> None:
        response = self._request("PUT", key, json=list(records))
        if response.status_code >= 400:
            logger.error("Remote storage write %s returned %s", key, response.status_code)
            raise StorageError()

    def close(self) -> None:
        close = getattr(self._session, "close", None)
        if close is not None:
            close()
