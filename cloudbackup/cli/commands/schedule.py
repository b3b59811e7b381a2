"""
Schedule Commands.

Create, update, remove and get information for backup schedules.
"""

from typing import Optional

import typer

from cloudbackup.api.models import Schedule, ScheduleType
from cloudbackup.cli.client import api_client
from cloudbackup.cli.output import handle_errors, print_record, print_success

app = typer.Typer(help="Create, update, remove and get information for schedules")

SCHEDULE_ID_HELP = "Schedule ID"
SCHEDULE_TYPE_HELP = "The schedule type (ondemand, hourly, daily, weekly or monthly)"
HOURS_HELP = (
    "For hourly schedule, every how many hours it should run. "
    "For others, at what time of the day will run (00:00 format)"
)
DAYS_HELP = "For weekly and monthly schedules, on which days it should run"


@app.command()
def new(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="The schedule name to show in the control panel"),
    schedule_type: str = typer.Option(..., "--schedule-type", help=SCHEDULE_TYPE_HELP),
    hours: str = typer.Option("", "--hours", help=HOURS_HELP),
    days: str = typer.Option("", "--days", help=DAYS_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Add a new schedule.

    Examples:
        cloudbackup-cli schedule new --name nightly --schedule-type daily --hours 03:00
    """
    with handle_errors(), api_client(ctx) as client:
        schedule = client.schedules.create(Schedule(
            name=name,
            schedule_type=ScheduleType.parse(schedule_type),
            schedule_hours=hours,
            schedule_days=days,
        ))

    print_success("Schedule created successfully")
    print_record(schedule, as_json)


@app.command()
def update(
    ctx: typer.Context,
    schedule_id: int = typer.Option(..., "--schedule-id", help=SCHEDULE_ID_HELP),
    name: Optional[str] = typer.Option(None, "--name", help="The schedule name to show in the control panel"),
    schedule_type: Optional[str] = typer.Option(None, "--schedule-type", help=SCHEDULE_TYPE_HELP),
    hours: Optional[str] = typer.Option(None, "--hours", help=HOURS_HELP),
    days: Optional[str] = typer.Option(None, "--days", help=DAYS_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Update a schedule. Only the options given are changed.
    """
    changes = {
        "name": name,
        "schedule_hours": hours,
        "schedule_days": days,
    }

    with handle_errors(), api_client(ctx) as client:
        current = client.schedules.get(schedule_id)
        if schedule_type is not None:
            changes["schedule_type"] = ScheduleType.parse(schedule_type)

        schedule = client.schedules.update(
            current.model_copy(update={k: v for k, v in changes.items() if v is not None}),
            previous=current,
        )

    print_success("Schedule updated successfully")
    print_record(schedule, as_json)


@app.command()
def delete(
    ctx: typer.Context,
    schedule_id: int = typer.Option(..., "--schedule-id", help=SCHEDULE_ID_HELP),
) -> None:
    """
    Delete a schedule.
    """
    with handle_errors(), api_client(ctx) as client:
        client.schedules.delete(schedule_id)

    print_success("Schedule deleted successfully")


@app.command()
def info(
    ctx: typer.Context,
    schedule_id: int = typer.Option(..., "--schedule-id", help=SCHEDULE_ID_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Get information for a schedule.
    """
    with handle_errors(), api_client(ctx) as client:
        schedule = client.schedules.get(schedule_id)

    print_record(schedule, as_json)
