"""
Response Envelope Parsing.

The service answers with a JSON object whose "status" key decides the
outcome:

    {"status": "ok", ...}                        -> Success
    {"status": "error", "message": "not found"}  -> Failure
    anything else                                -> Anomaly

Responses are turned into one of these three tagged results here, so the
raw mapping never travels past this module except as Success.data.
unwrap() converts Failure and Anomaly into RemoteError and ProtocolAnomaly.
"""

import json
from dataclasses import dataclass, field
from typing import Any, NoReturn, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from cloudbackup.api.models import Record
from cloudbackup.core.exceptions import (
    DecodeError,
    ProtocolAnomaly,
    RemoteError,
    TransportError,
)

STATUS_KEY = "status"
MESSAGE_KEY = "message"
STATUS_OK = "ok"

RecordT = TypeVar("RecordT", bound=Record)


@dataclass(frozen=True)
class Success:
    data: dict[str, Any]


@dataclass(frozen=True)
class Failure:
    message: str
    status_code: int
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Anomaly:
    reason: str
    body: str
    status_code: int


Envelope = Success | Failure | Anomaly


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def read_body(response: httpx.Response) -> bytes:
    """
    Drain the response body.

    Raises:
        TransportError: If the stream cannot be read
    """
    try:
        return response.read()
    except (httpx.HTTPError, httpx.StreamError) as e:
        raise TransportError(f"{e}, while reading body") from e
    finally:
        response.close()


def decode_mapping(body: bytes) -> dict[str, Any]:
    """
    Decode a body as a JSON object.

    Raises:
        DecodeError: If the body is not JSON or not a JSON object
    """
    text = body.decode("utf-8", errors="replace")
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"{e}, while unmarshalling body {text}", body=text) from e

    if not isinstance(value, dict):
        raise DecodeError(f"Expected a JSON object, while unmarshalling body {text}", body=text)
    return value


def classify(data: dict[str, Any], body: str, status_code: int) -> Envelope:
    """Classify a decoded mapping by its status key."""
    status = data.get(STATUS_KEY)

    if not isinstance(status, str):
        return Anomaly(reason=f"Unexpected response {body}", body=body, status_code=status_code)

    if status != STATUS_OK:
        message = data.get(MESSAGE_KEY)
        return Failure(
            message=str(message) if message is not None else f"Request failed with status {status!r}",
            status_code=status_code,
            data=data,
        )

    return Success(data=data)


def _classify_error_response(body: bytes, status_code: int) -> Envelope:
    """
    Classify a non-2xx response.

    Only a conventional failure envelope is accepted; everything else,
    including a body claiming status "ok", is an anomaly.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        data = decode_mapping(body)
    except DecodeError:
        return Anomaly(
            reason=f"Server returned HTTP {status_code} but there is no error "
                   f"in response '{text}' (this should not happen!)",
            body=text,
            status_code=status_code,
        )

    result = classify(data, text, status_code)
    if isinstance(result, Failure):
        return result

    return Anomaly(
        reason=f"Server returned HTTP {status_code} but there is no error "
               f"in response '{text}' (this should not happen!)",
        body=text,
        status_code=status_code,
    )


def parse_envelope(response: httpx.Response) -> Envelope:
    """
    Parse and classify a response to a write operation.

    Raises:
        TransportError: If the body cannot be read
        DecodeError: If a 2xx body is not a JSON object
    """
    body = read_body(response)

    if not is_success_status(response.status_code):
        return _classify_error_response(body, response.status_code)

    data = decode_mapping(body)
    return classify(data, body.decode("utf-8", errors="replace"), response.status_code)


def unwrap(result: Envelope) -> dict[str, Any]:
    """
    Return the data of a Success, raise for anything else.

    Raises:
        RemoteError: For a Failure
        ProtocolAnomaly: For an Anomaly
    """
    if isinstance(result, Success):
        return result.data
    raise_for(result)


def raise_for(result: Envelope) -> NoReturn:
    """Raise the error matching a non-success result."""
    if isinstance(result, Failure):
        raise RemoteError(result.message, status_code=result.status_code)
    if isinstance(result, Anomaly):
        raise ProtocolAnomaly(result.reason, body=result.body, status_code=result.status_code)
    raise ProtocolAnomaly(f"Unexpected success result {result!r}")


def parse_record(response: httpx.Response, record_type: type[RecordT]) -> RecordT:
    """
    Parse a read response directly into a record.

    Raises:
        TransportError: If the body cannot be read
        DecodeError: If a 2xx body does not decode into the record
        RemoteError: If the service reports a failure
        ProtocolAnomaly: If a non-2xx response has no error envelope
    """
    body = read_body(response)

    if not is_success_status(response.status_code):
        raise_for(_classify_error_response(body, response.status_code))

    data = decode_mapping(body)
    text = body.decode("utf-8", errors="replace")

    if STATUS_KEY in data:
        result = classify(data, text, response.status_code)
        if isinstance(result, Failure):
            raise_for(result)

    try:
        return record_type.model_validate(data)
    except PydanticValidationError as e:
        raise DecodeError(f"{e}, while unmarshalling body {text}", body=text) from e


def parse_payload(response: httpx.Response) -> bytes:
    """
    Return the raw body of a successful response (install scripts, key lists).

    Raises:
        TransportError: If the body cannot be read
        RemoteError: If a non-2xx response carries a failure envelope
        ProtocolAnomaly: If a non-2xx response has no error envelope
    """
    body = read_body(response)

    if not is_success_status(response.status_code):
        raise_for(_classify_error_response(body, response.status_code))

    return body
