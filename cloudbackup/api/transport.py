"""
Signed HTTP Transport.

Wraps a synchronous httpx client: builds each request, applies caller
headers, signs it, and sends it under a fixed timeout. Status codes and
bodies are not interpreted here (see envelope.py).

Usage:
    transport = SignedTransport(Signer(credentials), timeout=10.0)
    response = transport.post("https://example.com/api/servers", body)
"""

from typing import Any

import httpx

from cloudbackup.api.signer import HEADER_AUTHORIZATION, Signer
from cloudbackup.core.exceptions import TransportError
from cloudbackup.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

DEFAULT_HEADERS = {
    "Content-type": "application/json",
}


class SignedTransport:
    """
    HTTP transport that signs every request.

    Features:
    - Fixed per-request timeout (no retries)
    - Signature headers on every request
    - Structured debug logging with the Authorization header masked
    - Optional injected httpx transport for offline use (tests)
    """

    def __init__(
        self,
        signer: Signer,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            signer: Signer holding the account credentials
            timeout: Request timeout in seconds
            transport: httpx transport to send through. If None, the
                default network transport is used.
        """
        self.signer = signer
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "SignedTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        """Send a signed GET request."""
        return self.request("GET", url, headers=headers)

    def delete(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        """Send a signed DELETE request."""
        return self.request("DELETE", url, headers=headers)

    def post(
        self,
        url: str,
        body: bytes,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a signed POST request with the given body bytes."""
        return self.request("POST", url, body=body, headers=headers)

    def request(
        self,
        method: str,
        url: str,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Build, sign and send a request.

        Args:
            method: HTTP method (GET, POST, DELETE)
            url: Fully-qualified URL
            body: Exact bytes to send, or None
            headers: Extra headers, merged over DEFAULT_HEADERS

        Returns:
            httpx.Response, whatever its status code

        Raises:
            TransportError: On malformed URL, connection failure or timeout
        """
        try:
            request = self._client.build_request(
                method,
                url,
                content=body,
                headers={**DEFAULT_HEADERS, **(headers or {})},
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise TransportError(f"Invalid URL {url}: {e}") from e

        self.signer.sign(request)

        log_with_source(
            logger,
            "api",
            "debug",
            "API request",
            method=request.method,
            url=str(request.url),
            headers=_loggable_headers(request.headers),
        )

        try:
            response = self._client.send(request)
        except httpx.TimeoutException as e:
            log_with_source(logger, "api", "error", "API request timed out",
                            method=method, url=url, timeout=self.timeout)
            raise TransportError(f"Request to {url} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            log_with_source(logger, "api", "error", "API request failed",
                            method=method, url=url, error=str(e))
            raise TransportError(f"{e}, while sending {method} {url}") from e

        log_with_source(
            logger,
            "api",
            "debug",
            "API response",
            method=method,
            url=url,
            status_code=response.status_code,
        )

        return response


def _loggable_headers(headers: httpx.Headers) -> dict[str, str]:
    """Headers for logging, with the signature hidden."""
    loggable = dict(headers)
    for key in loggable:
        if key.lower() == HEADER_AUTHORIZATION.lower():
            loggable[key] = "BL ****"
    return loggable
