"""The time tools served by Timeserver.

Each handler takes the validated argument mapping and returns a ToolResult.
Parsing or timezone failures are raised and left to the executor, which turns
them into error results.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from . import clock
from .models import ToolResult
from .registry import ToolRegistry, ToolSpec
from .validation import ArgumentField, ArgumentSchema


class TimeToolbox:
    """Handlers for the time tools, bound to a default timezone and a clock."""

    def __init__(
        self,
        default_timezone: str = "UTC",
        default_format: str = clock.DEFAULT_FORMAT,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the toolbox.

        Args:
            default_timezone: IANA zone used for naive inputs and for "now".
            default_format: Format used by ``current_time`` when none is given.
            now: Clock returning an aware datetime. Defaults to the system clock.

        Raises:
            ValueError: If ``default_timezone`` is not a known timezone.
        """
        self.default_timezone = default_timezone
        self.default_zone = clock.get_zone(default_timezone)
        self.default_format = default_format
        self._now = now or (lambda: datetime.now(UTC))

    def now(self) -> datetime:
        return self._now().astimezone(self.default_zone)

    def _resolve(self, text: str | None) -> datetime:
        return clock.parse_datetime(text, self.default_zone) if text else self.now()

    def current_time(self, args: dict[str, Any]) -> ToolResult:
        fmt = args.get("format") or self.default_format
        timezone_name = args.get("timezone") or self.default_timezone
        utc_time = self._now().astimezone(UTC)
        local_time = utc_time.astimezone(clock.get_zone(timezone_name))
        return ToolResult.from_text(
            f"Current UTC time is {clock.format_datetime(utc_time, fmt)}, "
            f"and the time in {timezone_name} is {clock.format_datetime(local_time, fmt)}."
        )

    def relative_time(self, args: dict[str, Any]) -> ToolResult:
        target = clock.parse_datetime(args["time"], self.default_zone)
        return ToolResult.from_text(clock.humanize_relative(target, self.now()))

    def days_in_month(self, args: dict[str, Any]) -> ToolResult:
        days = clock.days_in_month(self._resolve(args.get("date")))
        return ToolResult.from_text(f"The number of days in month is {days}.")

    def get_timestamp(self, args: dict[str, Any]) -> ToolResult:
        time_text = args.get("time")
        timestamp = round(self._resolve(time_text).timestamp() * 1000)
        return ToolResult.from_text(f"The timestamp of {time_text or 'now'} is {timestamp} ms.")

    def convert_time(self, args: dict[str, Any]) -> ToolResult:
        source_name = args["sourceTimezone"]
        target_name = args["targetTimezone"]
        source_zone = clock.get_zone(source_name)
        target_zone = clock.get_zone(target_name)

        source_time = clock.parse_datetime(args["time"], source_zone).astimezone(source_zone)
        target_time = source_time.astimezone(target_zone)
        offset_minutes = clock.utc_offset_minutes(target_time) - clock.utc_offset_minutes(source_time)
        hours = clock.round_half_up(offset_minutes / 60)

        if hours > 0:
            relation = f"{target_name} is {hours} hours ahead of {source_name}."
        elif hours < 0:
            relation = f"{target_name} is {-hours} hours behind {source_name}."
        else:
            relation = f"{target_name} and {source_name} are 0 hours apart."

        return ToolResult.from_text(
            f"Time {args['time']} in {source_name} converts to "
            f"{clock.format_datetime(target_time, clock.DEFAULT_FORMAT)} in {target_name}. {relation}"
        )

    def get_week_year(self, args: dict[str, Any]) -> ToolResult:
        date_text = args.get("date")
        value = self._resolve(date_text)
        return ToolResult.from_text(
            f"The week of the year for {date_text or 'today'} is {clock.week_of_year(value)}, "
            f"and the isoWeek of the year is {clock.iso_week(value)}."
        )


def build_time_registry(toolbox: TimeToolbox) -> ToolRegistry:
    """Register the time tools, in the order ``tools/list`` reports them."""
    registry = ToolRegistry()

    registry.register(
        ToolSpec(
            name="current_time",
            title="Get Current Time",
            description="Returns the current time in UTC and a specified or default timezone.",
            arguments=ArgumentSchema(
                {
                    "format": ArgumentField(
                        type="string",
                        default=toolbox.default_format,
                        description="The format of the returned time, e.g. YYYY-MM-DD HH:mm:ss",
                    ),
                    "timezone": ArgumentField(
                        type="string",
                        description="The IANA timezone name, e.g. Asia/Shanghai. Defaults to the server timezone.",
                    ),
                }
            ),
            handler=toolbox.current_time,
        )
    )
    registry.register(
        ToolSpec(
            name="relative_time",
            title="Get Relative Time",
            description="Calculates the relative time from now to a given time string.",
            arguments=ArgumentSchema(
                {
                    "time": ArgumentField(
                        type="string",
                        required=True,
                        description="The time to compare. Format: YYYY-MM-DD HH:mm:ss",
                    ),
                }
            ),
            handler=toolbox.relative_time,
        )
    )
    registry.register(
        ToolSpec(
            name="days_in_month",
            title="Get Days in Month",
            description="Returns the number of days in the month of a given date.",
            arguments=ArgumentSchema(
                {
                    "date": ArgumentField(type="string", description="The date to check. Format: YYYY-MM-DD"),
                }
            ),
            handler=toolbox.days_in_month,
        )
    )
    registry.register(
        ToolSpec(
            name="get_timestamp",
            title="Get Timestamp",
            description="Converts a date-time string to a Unix timestamp in milliseconds.",
            arguments=ArgumentSchema(
                {
                    "time": ArgumentField(type="string", description="The time to convert. Format: YYYY-MM-DD HH:mm:ss"),
                }
            ),
            handler=toolbox.get_timestamp,
        )
    )
    registry.register(
        ToolSpec(
            name="convert_time",
            title="Convert Timezone",
            description="Converts a time from a source timezone to a target timezone.",
            arguments=ArgumentSchema(
                {
                    "sourceTimezone": ArgumentField(
                        type="string",
                        required=True,
                        description="The source IANA timezone name, e.g. Asia/Shanghai",
                    ),
                    "targetTimezone": ArgumentField(
                        type="string",
                        required=True,
                        description="The target IANA timezone name, e.g. Europe/London",
                    ),
                    "time": ArgumentField(
                        type="string",
                        required=True,
                        description="Date and time in 24-hour format, e.g. 2025-03-23 12:30:00",
                    ),
                }
            ),
            handler=toolbox.convert_time,
        )
    )
    registry.register(
        ToolSpec(
            name="get_week_year",
            title="Get Week of Year",
            description="Returns the week and ISO week number for a given date.",
            arguments=ArgumentSchema(
                {
                    "date": ArgumentField(type="string", description="The date to check, e.g. 2025-03-23"),
                }
            ),
            handler=toolbox.get_week_year,
        )
    )

    return registry
