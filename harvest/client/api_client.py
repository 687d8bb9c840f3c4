# harvest/client/api_client.py
import requests

from harvest.utils.retry import http_retry
from harvest.utils.settings import HARVEST_API_URL
from harvest.utils.logging import get_logger

logger = get_logger(__name__)

IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


class ApiError(Exception):
    """The API answered with `ok: false`."""

    def __init__(self, status: int, message: str, data=None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.data = data


class HarvestClient:
    """
    Thin HTTP client for the Harvest REST API.

    Every call returns the whole response envelope; an envelope with
    `ok: false` is raised as ApiError. Only transport errors are retried,
    and a POST only when the connection could not be made.
    """

    def __init__(self, base_url: str | None = None, token: str | None = None, timeout: int = 5, session=None):
        self.base_url = (base_url or HARVEST_API_URL).rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, json=None, params=None) -> dict:
        if method in IDEMPOTENT_METHODS:
            return self._send_idempotent(method, path, json, params)
        return self._send_unsafe(method, path, json, params)

    @http_retry()
    def _send_idempotent(self, method, path, json, params) -> dict:
        return self._send(method, path, json, params)

    # a POST is only resent when it never reached the server; after a read
    # timeout it may already be committed (an order placed, a cart line added)
    @http_retry(requests.ConnectionError)
    def _send_unsafe(self, method, path, json, params) -> dict:
        return self._send(method, path, json, params)

    def _send(self, method, path, json, params) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.info(f"HarvestClient {method} {url}")

        resp = self.session.request(
            method,
            url,
            json=json,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
        )
        try:
            body = resp.json()
        except ValueError:
            raise ApiError(resp.status_code, f"Unexpected response from server ({resp.status_code})")

        if resp.status_code >= 400 or not body.get("ok", False):
            message = body.get("message") or body.get("error") or "Request failed"
            raise ApiError(resp.status_code, message, body.get("data"))
        return body

    def get(self, path: str, params=None) -> dict:
        return self.request("GET", path, params=params)

    def post(self, path: str, json=None) -> dict:
        return self.request("POST", path, json=json)

    def put(self, path: str, json=None) -> dict:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> dict:
        return self.request("DELETE", path)

    def login(self, email: str, password: str) -> dict:
        """Log in and keep the bearer token for the following calls."""
        body = self.post("/auth/login", json={"email": email, "password": password})
        self.token = body["data"]["token"]
        return body["data"]
