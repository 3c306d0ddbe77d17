from __future__ import annotations

import logging
import time

import httpx
from pydantic import ValidationError

from pfsense_exporter.config import TargetConfig
from pfsense_exporter.schemas import Envelope

logger = logging.getLogger("pfsense_exporter.http")

API_KEY_HEADER = "X-API-Key"
SUCCESS_CODE = 200


class APIError(Exception):
    """Base class for every failure reported by :class:`APIClient`."""


class APITransportError(APIError):
    pass


class APIBodyReadError(APIError):
    pass


class APIDecodeError(APIError):
    pass


class APIStatusError(APIError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"received non-200 status code {code}: {message}")
        self.code = code
        self.message = message


class APIClient:
    """Performs single, unretried requests against one pfSense target.

    A new httpx client is built for every call so that certificate
    validation and timeout always follow the target's settings.
    """

    def __init__(self, target: TargetConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.target = target
        self._transport = transport

    def url_for(self, path: str) -> str:
        return f"{self.target.scheme}://{self.target.host}:{self.target.port}{path}"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        if self.target.auth_method == "key":
            headers[API_KEY_HEADER] = str(self.target.key)
        return headers

    def _auth(self) -> httpx.BasicAuth | None:
        if self.target.auth_method == "basic":
            return httpx.BasicAuth(str(self.target.username), str(self.target.password))
        return None

    def _new_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=float(self.target.timeout),
            verify=self.target.validate_cert,
            auth=self._auth(),
            transport=self._transport,
        )

    def _check_deadline(self, deadline: float, url: str) -> None:
        if time.monotonic() > deadline:
            raise APITransportError(f"request to {url} timed out after {self.target.timeout}s")

    def fetch(self, method: str, path: str) -> Envelope:
        """Send one request and decode the API envelope.

        ``target.timeout`` bounds the whole exchange, body included. httpx
        only bounds each network operation, so the body is read chunk by
        chunk against an overall deadline.
        """
        url = self.url_for(path)
        deadline = time.monotonic() + self.target.timeout
        logger.debug("sending %s request to %s", method, url)

        with self._new_client() as client:
            request = client.build_request(method, url, headers=self._headers())
            try:
                response = client.send(request, stream=True)
            except httpx.HTTPError as exc:
                raise APITransportError(f"error making request to {url}: {exc}") from exc

            chunks: list[bytes] = []
            try:
                self._check_deadline(deadline, url)
                for chunk in response.iter_bytes():
                    self._check_deadline(deadline, url)
                    chunks.append(chunk)
            except httpx.HTTPError as exc:
                raise APIBodyReadError(f"error reading response body from {url}: {exc}") from exc
            finally:
                response.close()
            body = b"".join(chunks)

        logger.debug("received %d response from %s: %s", response.status_code, url, body[:2048])

        try:
            envelope = Envelope.model_validate_json(body)
        except ValidationError as exc:
            raise APIDecodeError(f"error decoding response body from {url}: {exc}") from exc

        if envelope.code != SUCCESS_CODE:
            raise APIStatusError(envelope.code, envelope.message)
        return envelope


def fetch(target: TargetConfig, method: str, path: str) -> Envelope:
    return APIClient(target).fetch(method, path)
