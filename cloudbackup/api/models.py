"""
Domain Records.

Pydantic models for the four remotely persisted resource kinds and their
type enumerations. Field aliases are the service's JSON keys; Python code
uses the snake_case field names.

Identifiers are assigned by the service: 0 means "not created yet".
Secrets (database password, storage secret key) are sent verbatim and
masked whenever a record is rendered for display.
"""

import json
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from cloudbackup.core.exceptions import ClassificationError
from cloudbackup.core.utils import mask_secret


def _parse_enum(enum_cls: type[IntEnum], kind: str, aliases: dict[str, Any], value: str) -> Any:
    """Resolve a user-supplied type name, ignoring case and surrounding whitespace."""
    member = aliases.get(value.strip().lower())
    if member is None:
        raise ClassificationError(kind, value)
    return enum_cls(member)


# =============================================================================
# Enumerations
# =============================================================================


class DatabaseType(IntEnum):
    MYSQL = 1
    MONGODB = 2
    POSTGRESQL = 3

    @property
    def label(self) -> str:
        return {
            DatabaseType.MYSQL: "MySQL",
            DatabaseType.MONGODB: "MongoDB",
            DatabaseType.POSTGRESQL: "PostgreSQL",
        }[self]

    @classmethod
    def parse(cls, value: str) -> "DatabaseType":
        """Parse names like 'mysql', 'MariaDB', ' postgres '."""
        return _parse_enum(cls, "Database", {
            "mysql": cls.MYSQL,
            "mariadb": cls.MYSQL,
            "percona_server": cls.MYSQL,
            "mongodb": cls.MONGODB,
            "mongo": cls.MONGODB,
            "postgresql": cls.POSTGRESQL,
            "postgre_sql": cls.POSTGRESQL,
            "postgre": cls.POSTGRESQL,
            "postgres": cls.POSTGRESQL,
        }, value)


class ScheduleType(IntEnum):
    ON_DEMAND = 1
    HOURLY = 2
    DAILY = 3
    WEEKLY = 4
    MONTHLY = 5

    @property
    def label(self) -> str:
        if self is ScheduleType.ON_DEMAND:
            return "On Demand"
        return self.name.title()

    @classmethod
    def parse(cls, value: str) -> "ScheduleType":
        return _parse_enum(cls, "Schedule", {
            "ondemand": cls.ON_DEMAND,
            "hourly": cls.HOURLY,
            "daily": cls.DAILY,
            "weekly": cls.WEEKLY,
            "monthly": cls.MONTHLY,
        }, value)


class RetentionType(IntEnum):
    BY_DAYS = 1
    BY_COUNT = 2

    @property
    def label(self) -> str:
        return "By Days" if self is RetentionType.BY_DAYS else "By Count"

    @classmethod
    def parse(cls, value: str) -> "RetentionType":
        return _parse_enum(cls, "Retention", {
            "bydays": cls.BY_DAYS,
            "bycount": cls.BY_COUNT,
        }, value)


class StorageType(IntEnum):
    LOCAL = 1
    S3 = 2
    GOOGLE = 5
    DIGITALOCEAN = 6
    ALIBABA = 7

    @property
    def label(self) -> str:
        return {
            StorageType.LOCAL: "Local Storage",
            StorageType.S3: "AWS S3",
            StorageType.GOOGLE: "Google Cloud Storage",
            StorageType.DIGITALOCEAN: "DigitalOcean Spaces",
            StorageType.ALIBABA: "Alibaba Object Storage",
        }[self]

    @property
    def is_cloud(self) -> bool:
        return self is not StorageType.LOCAL

    @classmethod
    def parse(cls, value: str) -> "StorageType":
        return _parse_enum(cls, "Storage", {
            "local": cls.LOCAL,
            "s3": cls.S3,
            "google": cls.GOOGLE,
            "digitalocean": cls.DIGITALOCEAN,
            "alibaba": cls.ALIBABA,
        }, value)


# =============================================================================
# Records
# =============================================================================


class Record(BaseModel, ABC):
    """
    Base for all resource records.

    Records are immutable; use model_copy(update={...}) to derive a
    modified copy (e.g. before calling update()).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    secret_fields: ClassVar[tuple[str, ...]] = ()

    id: int = Field(default=0, description="Assigned by the service, 0 until created")
    name: str = Field(default="", description="Display name in the control panel")

    def to_wire(self) -> bytes:
        """Exact JSON bytes sent to the service (secrets unmasked)."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    def render_json(self) -> str:
        """JSON for display, with secrets masked."""
        data = self.model_dump(mode="json", by_alias=True)
        for field_name in self.secret_fields:
            alias = type(self).model_fields[field_name].alias or field_name
            value = data.get(alias)
            if value:
                data[alias] = mask_secret(value)
        return json.dumps(data)

    @abstractmethod
    def render(self) -> str:
        """Human-readable rendering, with secrets masked."""

    def __str__(self) -> str:
        return self.render()


class Server(Record):
    """A database server with a backup agent."""

    secret_fields: ClassVar[tuple[str, ...]] = ("db_pass",)

    db_type: DatabaseType = Field(alias="dbTypeId")
    readonly: bool = False
    db_host: str = Field(default="", alias="dbHost")
    db_port: str = Field(default="", alias="dbPort")
    db_user: str = Field(default="", alias="dbUser")
    db_pass: str = Field(default="", alias="dbPass", repr=False)

    def render(self) -> str:
        db_pass = mask_secret(self.db_pass) if self.db_pass else ""
        return (
            f"ID: {self.id}\n"
            f"Name: {self.name}\n"
            f"DB Type: {self.db_type.label}\n"
            f"Readonly: {str(self.readonly).lower()}\n"
            f"DB Host: {self.db_host}\n"
            f"DB Port: {self.db_port}\n"
            f"DB User: {self.db_user}\n"
            f"DB Pass: {db_pass}"
        )


class Schedule(Record):
    """When backups run."""

    schedule_type: ScheduleType = Field(alias="scheduleType")
    schedule_hours: str = Field(default="", alias="scheduleHours")
    schedule_days: str = Field(default="", alias="scheduleDays")

    def render(self) -> str:
        lines = [
            f"ID: {self.id}",
            f"Name: {self.name}",
            f"Schedule Type: {self.schedule_type.label}",
        ]
        if self.schedule_days:
            lines.append(f"Days: {self.schedule_days}")
        if self.schedule_hours:
            lines.append(f"Hours: {self.schedule_hours}")
        return "\n".join(lines)


class Retention(Record):
    """How long backups are kept."""

    retention_type: RetentionType = Field(alias="retentionType")
    count: int = 0

    def render(self) -> str:
        return (
            f"ID: {self.id}\n"
            f"Name: {self.name}\n"
            f"Retention Type: {self.retention_type.label}\n"
            f"Count: {self.count}"
        )


class Storage(Record):
    """Where backups are stored: a local path or a cloud bucket."""

    secret_fields: ClassVar[tuple[str, ...]] = ("secret_key",)

    storage_type: StorageType = Field(alias="storageType")
    local_path: str = Field(default="", alias="localPath")
    bucket: str = ""
    access_key: str = Field(default="", alias="storage-access-key")
    secret_key: str = Field(default="", alias="storage-secret-key", repr=False)
    region_endpoint: str = Field(default="", alias="region-endpoint")

    def render(self) -> str:
        header = f"ID: {self.id}\nName: {self.name}\nStorage Type: {self.storage_type.label}"
        if not self.storage_type.is_cloud:
            return f"{header}\nPath: {self.local_path}"

        secret = mask_secret(self.secret_key) if self.secret_key else ""
        return (
            f"{header}\n"
            f"Bucket: {self.bucket}\n"
            f"Region Endpoint: {self.region_endpoint}\n"
            f"Access Key: {self.access_key}\n"
            f"Secret Key: {secret}"
        )
