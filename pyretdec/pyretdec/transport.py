"""HTTP transport shared by the retdec services."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from pyretdec.errors import (
    MalformedResponseError,
    RetdecAPIError,
    RetdecAuthenticationError,
    RetdecConnectionError,
)
from pyretdec.files import InputFile
from pyretdec.settings import ServiceConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class Transport:
    """Authenticated access to the retdec.com API.

    Every call issues exactly one HTTP request; nothing is retried. The API key
    is sent as the user name of HTTP basic auth with an empty password.
    """

    def __init__(
        self,
        config: ServiceConfig,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.config = config
        self._http = httpx.Client(
            base_url=config.api_url,
            auth=httpx.BasicAuth(config.secret_key, ""),
            headers={"User-Agent": config.user_agent},
            timeout=timeout,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
        files: dict[str, InputFile] | None = None,
    ) -> httpx.Response:
        multipart = None
        if files:
            multipart = {field: (f.name, f.content) for field, f in files.items()}
        logger.debug("%s %s%s", method, self.config.api_url, path)
        try:
            resp = self._http.request(method, path, params=params, data=data, files=multipart)
        except httpx.TransportError as e:
            raise RetdecConnectionError(
                f"cannot reach retdec at {self.config.api_url}: {e}"
            ) from e
        logger.debug("%s %s -> %d", method, path, resp.status_code)
        return self._handle(resp)

    def get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        return self.send("GET", path, params=params)

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return self._json(self.get(path, params=params))

    def post_json(
        self,
        path: str,
        data: dict[str, str] | None = None,
        files: dict[str, InputFile] | None = None,
    ) -> dict[str, Any]:
        return self._json(self.send("POST", path, data=data, files=files))

    # ── Response handling ────────────────────────────────────────────────

    @staticmethod
    def _json(resp: httpx.Response) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{resp.request.url} returned a response that is not valid JSON"
            ) from e
        if not isinstance(data, dict):
            raise MalformedResponseError(f"{resp.request.url} returned a non-object JSON response")
        return data

    @staticmethod
    def _handle(resp: httpx.Response) -> httpx.Response:
        if resp.is_success:
            return resp
        # Structured error: {"code": 400, "message": "...", "description": "..."}
        msg = resp.reason_phrase or "request failed"
        description = None
        try:
            err = resp.json()
        except ValueError:
            err = None
        if isinstance(err, dict):
            msg = str(err.get("message") or err.get("error") or msg)
            description = err.get("description")
        if resp.status_code == 401:
            raise RetdecAuthenticationError(resp.status_code, msg, description)
        raise RetdecAPIError(resp.status_code, msg, description)
