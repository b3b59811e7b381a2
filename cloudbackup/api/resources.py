"""
Resource Operations.

One generic create/get/update/delete engine for every resource kind.
Each kind is a small subclass naming its record type, its collection
path and its local validation rules:

    class ScheduleResource(Resource[Schedule]):
        record = Schedule
        path = "/schedules"
        label = "schedule"

Record lifecycle: id 0 (unassigned) -> create -> id > 0 -> get/update
-> delete. Every call round-trips to the service; nothing is cached.
"""

import math
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, ClassVar, Generic, TypeVar

from cloudbackup.api.envelope import parse_envelope, parse_payload, parse_record, unwrap
from cloudbackup.api.models import Record, Retention, Schedule, Server, Storage
from cloudbackup.api.transport import SignedTransport
from cloudbackup.core.exceptions import (
    DecodeError,
    ProtocolAnomaly,
    RemoteError,
    TransportError,
    ValidationError,
)
from cloudbackup.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=Record)

ID_KEY = "id"


@contextmanager
def operation_context(context: str) -> Iterator[None]:
    """Annotate network-path errors with the operation they happened in."""
    try:
        yield
    except (TransportError, DecodeError, RemoteError) as e:
        e.add_context(context)
        raise


def extract_id(data: dict[str, Any], label: str) -> int:
    """
    Read the identifier assigned by the service on create.

    JSON numbers may arrive as floats, including NaN and Infinity;
    booleans are not identifiers.

    Raises:
        ProtocolAnomaly: If the id is missing, not numeric or not positive
    """
    value = data.get(ID_KEY)
    identifier = 0
    if isinstance(value, int) and not isinstance(value, bool):
        identifier = value
    elif isinstance(value, float) and math.isfinite(value):
        identifier = int(value)

    if identifier <= 0:
        raise ProtocolAnomaly(f"Missing ID from {label} response {data}")
    return identifier


def validate_id(identifier: Any, label: str) -> int:
    """
    Raises:
        ValidationError: If identifier is not a positive integer
    """
    if isinstance(identifier, bool) or not isinstance(identifier, int) or identifier <= 0:
        raise ValidationError(
            f"Invalid ID {identifier} for {label}",
            details={"id": identifier},
        )
    return identifier


def require(value: str, message: str) -> None:
    """Raise ValidationError if a required text field is blank."""
    if not value or not value.strip():
        raise ValidationError(message)


class Resource(Generic[RecordT]):
    """
    Generic CRUD operations over one resource kind.

    Subclasses set:
        record: the record model
        path: collection path relative to the API root (e.g. "/servers")
        label: lowercase kind name used in messages
        immutable_fields: fields that cannot change after creation

    and may extend validate() with kind-specific rules.
    """

    record: ClassVar[type[Record]]
    path: ClassVar[str]
    label: ClassVar[str]
    immutable_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, transport: SignedTransport, base_url: str) -> None:
        self.transport = transport
        self.base_url = base_url

    def collection_url(self) -> str:
        return f"{self.base_url}{self.path}"

    def item_url(self, identifier: int) -> str:
        return f"{self.base_url}{self.path}/{identifier}"

    def validate(self, record: RecordT) -> None:
        """Check required fields. Runs before every create and update."""
        require(record.name, f"{self.label.capitalize()} name cannot be empty")

    def check_immutable(self, previous: RecordT, record: RecordT) -> None:
        """
        Raises:
            ValidationError: If an immutable field differs between the two records
        """
        for field_name in self.immutable_fields:
            old = getattr(previous, field_name)
            new = getattr(record, field_name)
            if old != new:
                raise ValidationError(
                    f"Can't change {field_name} from {_display(old)} to {_display(new)}",
                    details={"field": field_name},
                )

    def create(self, record: RecordT) -> RecordT:
        """
        Create a record on the service.

        Args:
            record: Unassigned record (id 0)

        Returns:
            Copy of the record carrying the identifier assigned by the service

        Raises:
            ValidationError: If the record already has an id or misses required fields
            ProtocolAnomaly: If the service reports success without a usable id
        """
        if record.id != 0:
            raise ValidationError(f"Cannot create {self.label} with preassigned ID {record.id}")
        self.validate(record)

        with operation_context(f"while creating {self.label}"):
            response = self.transport.post(self.collection_url(), record.to_wire())
            data = unwrap(parse_envelope(response))

        created = record.model_copy(update={"id": extract_id(data, self.label)})

        log_with_source(logger, "api", "info", "Resource created",
                        kind=self.label, id=created.id)
        return created

    def get(self, identifier: int) -> RecordT:
        """
        Fetch a record by id.

        Raises:
            ValidationError: If identifier is not a positive integer
            RemoteError: If the service reports an error
            ProtocolAnomaly: If an HTTP failure carries no error envelope
        """
        validate_id(identifier, self.label)

        with operation_context(f"while getting {self.label} {identifier}"):
            response = self.transport.get(self.item_url(identifier))
            return parse_record(response, self.record)

    def update(self, record: RecordT, previous: RecordT | None = None) -> RecordT:
        """
        Send a modified record to the service.

        The record is not re-fetched afterwards: once the call succeeds the
        caller's copy is authoritative.

        Args:
            record: Persisted record (id > 0) with the new values
            previous: The record as last fetched; when given, changes to
                immutable fields are rejected before any request is sent

        Raises:
            ValidationError: On bad id, missing fields or immutable field change
        """
        validate_id(record.id, self.label)
        self.validate(record)
        if previous is not None:
            self.check_immutable(previous, record)

        with operation_context(f"while updating {self.label} {record.id}"):
            response = self.transport.post(self.item_url(record.id), record.to_wire())
            unwrap(parse_envelope(response))

        log_with_source(logger, "api", "info", "Resource updated",
                        kind=self.label, id=record.id)
        return record

    def delete(self, identifier: int) -> None:
        """
        Delete a record. Deleting twice surfaces whatever the service answers.

        Raises:
            ValidationError: If identifier is not a positive integer
            RemoteError: If the service reports an error
        """
        validate_id(identifier, self.label)

        with operation_context(f"while deleting {self.label} {identifier}"):
            response = self.transport.delete(self.item_url(identifier))
            unwrap(parse_envelope(response))

        log_with_source(logger, "api", "info", "Resource deleted",
                        kind=self.label, id=identifier)


def _display(value: Any) -> str:
    return getattr(value, "label", str(value))


class ServerResource(Resource[Server]):
    record = Server
    path = "/servers"
    label = "server"
    immutable_fields = ("db_type",)

    def validate(self, record: Server) -> None:
        super().validate(record)
        require(record.db_host, "Database host cannot be empty")
        require(record.db_port, "Database port cannot be empty")

    def install(self, identifier: int) -> bytes:
        """
        Fetch the agent install script for a server.

        Returns:
            Script bytes, meant to be piped into a shell
        """
        validate_id(identifier, self.label)

        with operation_context(f"while getting install script for {self.label} {identifier}"):
            response = self.transport.get(f"{self.item_url(identifier)}/install")
            return parse_payload(response)


class ScheduleResource(Resource[Schedule]):
    record = Schedule
    path = "/schedules"
    label = "schedule"


class RetentionResource(Resource[Retention]):
    record = Retention
    path = "/retentions"
    label = "retention"

    def validate(self, record: Retention) -> None:
        super().validate(record)
        if record.count <= 0:
            raise ValidationError("Retention count cannot be <= 0", details={"count": record.count})


class StorageResource(Resource[Storage]):
    record = Storage
    path = "/storages"
    label = "storage"
    immutable_fields = ("storage_type",)

    def validate(self, record: Storage) -> None:
        super().validate(record)
        if not record.storage_type.is_cloud:
            require(record.local_path, "Local path cannot be empty")
            return

        require(record.bucket, "Storage bucket cannot be empty")
        require(record.access_key, "Storage access key cannot be empty")
        require(record.secret_key, "Storage secret key cannot be empty")
        require(record.region_endpoint, "Storage region endpoint cannot be empty")
