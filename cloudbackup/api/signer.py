"""
Request Signing.

Every API request is authenticated with an HMAC-SHA256 signature over a
canonical message built from the request:

    METHOD\\n
    URL\\n
    DATE\\n
    ACCESS_KEY\\n
    MD5_HEX(BODY)\\n          (only when the request has a body)

The signature is sent as "Authorization: BL <base64 signature>", together
with the date and access key headers the service needs to rebuild the
message, and a "bl-msg" header holding the canonical message with newlines
escaped (for auditing on the server side).
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime

import httpx

from cloudbackup.core.exceptions import TransportError
from cloudbackup.core.utils import utc_now

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

HEADER_DATE = "date"
HEADER_ACCESS_KEY = "bl-access-key"
HEADER_AUTHORIZATION = "Authorization"
HEADER_MESSAGE = "bl-msg"

AUTHORIZATION_SCHEME = "BL"


def format_timestamp(moment: datetime) -> str:
    """Render a UTC timestamp at second precision with explicit offset."""
    return moment.strftime(TIMESTAMP_FORMAT)


def canonical_message(
    method: str,
    url: str,
    timestamp: str,
    access_key: str,
    body: bytes | None = None,
) -> str:
    """Build the newline-terminated message that gets signed."""
    parts = [method, url, timestamp, access_key]
    if body is not None:
        parts.append(hashlib.md5(body).hexdigest())
    return "".join(f"{part}\n" for part in parts)


@dataclass(frozen=True)
class Credentials:
    """API access key pair. Never mutated once the client is built."""

    access_key: str
    secret_key: str

    def __repr__(self) -> str:
        return f"Credentials(access_key={self.access_key!r}, secret_key='****')"


@dataclass(frozen=True)
class Signature:
    """Result of signing one request."""

    timestamp: str
    message: str
    signature: str

    @property
    def authorization(self) -> str:
        return f"{AUTHORIZATION_SCHEME} {self.signature}"

    @property
    def escaped_message(self) -> str:
        return self.message.replace("\n", "\\n")


class Signer:
    """
    Signs outgoing requests with the account's credentials.

    Usage:
        signer = Signer(Credentials("AKIA...", "secret"))
        request = httpx.Request("POST", url, content=body)
        signer.sign(request)
    """

    def __init__(self, credentials: Credentials) -> None:
        self.credentials = credentials

    def compute(
        self,
        method: str,
        url: str,
        timestamp: str,
        body: bytes | None = None,
    ) -> Signature:
        """Compute the signature for a request. Pure and deterministic."""
        message = canonical_message(method, url, timestamp, self.credentials.access_key, body)
        digest = hmac.new(
            self.credentials.secret_key.encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return Signature(
            timestamp=timestamp,
            message=message,
            signature=base64.b64encode(digest).decode("ascii"),
        )

    def sign(self, request: httpx.Request, now: datetime | None = None) -> Signature:
        """
        Add the signing headers to a request.

        The body is read from the request's buffered content, so the bytes
        that get hashed are the bytes that get sent.

        Raises:
            TransportError: If the request body cannot be read
        """
        body = _read_body(request)
        timestamp = format_timestamp(now or utc_now())

        signature = self.compute(request.method, str(request.url), timestamp, body)

        request.headers[HEADER_DATE] = timestamp
        request.headers[HEADER_ACCESS_KEY] = self.credentials.access_key
        request.headers[HEADER_AUTHORIZATION] = signature.authorization
        request.headers[HEADER_MESSAGE] = signature.escaped_message
        return signature


def _read_body(request: httpx.Request) -> bytes | None:
    """Return the request body, or None when the request has no body."""
    try:
        content = request.read()
    except httpx.StreamError as e:
        raise TransportError(f"{e}, while reading request body for signing") from e
    return content if content else None
