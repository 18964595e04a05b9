"""The tools exposed to agents, registered into the default :data:`TOOLS` registry."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..domain import ParameterKind, ResultCode, ToolResult
from .registry import ToolContext, ToolParameter, ToolRegistry

TOOLS = ToolRegistry()

AUTH_TOOL = "auth"

CALENDAR_ID = ToolParameter(
    "calendar_id",
    description="The calendar ID (use 'primary' for primary calendar)",
    default="primary",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@TOOLS.tool(
    AUTH_TOOL,
    description=(
        "Authenticate with Google Calendar to use the other tools. Pass the name of the tool "
        "that asked for authentication as for_method; a notification arrives once the user "
        "has completed the browser flow."
    ),
    parameters=(
        ToolParameter(
            "for_method",
            description="Name of the tool to retry once authentication completes",
            required=True,
        ),
    ),
    requires_auth=False,
)
async def auth(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    url = ctx.auth.begin_authorization(args["for_method"], ctx.invocation.session_id)
    return ToolResult.success(f"Please visit this URL to authenticate: {url}")


@TOOLS.tool(
    "get_current_time",
    description="Get the current date and time in RFC3339 format",
    parameters=(
        ToolParameter(
            "timezone",
            description="IANA timezone name, e.g. 'Europe/Berlin'",
            default="UTC",
        ),
    ),
    requires_auth=False,
)
async def get_current_time(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    name = args["timezone"]
    try:
        zone = ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ToolResult.error(ResultCode.INVALID_ARGUMENTS, f"Unknown timezone: {name}")
    current = _now().astimezone(zone)
    return ToolResult.success(f"Current time in {name}: {current.isoformat(timespec='seconds')}")


@TOOLS.tool("list_calendars", description="List all accessible Google Calendars")
async def list_calendars(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    return ToolResult.from_reply(await ctx.calendar.list_calendars())


@TOOLS.tool(
    "list_events",
    description="List events from a Google Calendar",
    parameters=(
        CALENDAR_ID,
        ToolParameter(
            "time_min",
            description="Lower bound for event start time (RFC3339 format, e.g., '2024-01-01T00:00:00Z')",
        ),
        ToolParameter(
            "time_max",
            description="Upper bound for event start time (RFC3339 format, e.g., '2024-12-31T23:59:59Z')",
        ),
        ToolParameter(
            "max_results",
            ParameterKind.NUMBER,
            description="Maximum number of events to return",
            default=10,
        ),
    ),
)
async def list_events(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    reply = await ctx.calendar.list_events(
        args["calendar_id"],
        max_results=int(args["max_results"]),
        time_min=args.get("time_min"),
        time_max=args.get("time_max"),
    )
    return ToolResult.from_reply(reply)


@TOOLS.tool(
    "create_event",
    description="Create a new event in Google Calendar",
    parameters=(
        CALENDAR_ID,
        ToolParameter("summary", description="Event title/summary", required=True),
        ToolParameter("description", description="Event description (optional)"),
        ToolParameter(
            "start_time",
            description="Event start time (RFC3339 format, e.g., '2024-01-01T10:00:00Z')",
            required=True,
        ),
        ToolParameter(
            "end_time",
            description="Event end time (RFC3339 format, e.g., '2024-01-01T11:00:00Z')",
            required=True,
        ),
        ToolParameter("location", description="Event location (optional)"),
    ),
)
async def create_event(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    reply = await ctx.calendar.create_event(
        args["calendar_id"],
        summary=args["summary"],
        start_time=args["start_time"],
        end_time=args["end_time"],
        description=args.get("description"),
        location=args.get("location"),
    )
    return ToolResult.from_reply(reply)


@TOOLS.tool(
    "get_event",
    description="Get details of a specific event",
    parameters=(CALENDAR_ID, ToolParameter("event_id", description="The event ID", required=True)),
)
async def get_event(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    return ToolResult.from_reply(await ctx.calendar.get_event(args["calendar_id"], args["event_id"]))


@TOOLS.tool(
    "delete_event",
    description="Delete an event from Google Calendar",
    parameters=(CALENDAR_ID, ToolParameter("event_id", description="The event ID to delete", required=True)),
)
async def delete_event(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    return ToolResult.from_reply(await ctx.calendar.delete_event(args["calendar_id"], args["event_id"]))
