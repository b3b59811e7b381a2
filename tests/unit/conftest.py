"""
Unit Test Fixtures.

Fixtures for unit tests - the service is always the in-process fake.
Unit tests should be fast and isolated, never touching the network.
"""

import pytest

from cloudbackup.api.models import (
    DatabaseType,
    Retention,
    RetentionType,
    Schedule,
    ScheduleType,
    Server,
    Storage,
    StorageType,
)


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def server() -> Server:
    """Unsaved MySQL server record."""
    return Server(
        name="db1",
        db_type=DatabaseType.MYSQL,
        db_host="localhost",
        db_port="3306",
        db_user="backup",
        db_pass="hunter2pass",
    )


@pytest.fixture
def schedule() -> Schedule:
    return Schedule(name="nightly", schedule_type=ScheduleType.DAILY, schedule_hours="03:00")


@pytest.fixture
def retention() -> Retention:
    return Retention(name="week", retention_type=RetentionType.BY_DAYS, count=7)


@pytest.fixture
def local_storage() -> Storage:
    return Storage(name="disk", storage_type=StorageType.LOCAL, local_path="/data/backups")


@pytest.fixture
def s3_storage() -> Storage:
    return Storage(
        name="bucket",
        storage_type=StorageType.S3,
        bucket="my-backups",
        access_key="AKIAS3",
        secret_key="s3secretvalue",
        region_endpoint="s3.ap-south-1.amazonaws.com",
    )
