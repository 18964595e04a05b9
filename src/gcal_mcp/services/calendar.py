from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..config import CalendarSettings
from ..domain import ServiceReply
from .credentials import CredentialReader

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _event_time(slot: Optional[Dict[str, Any]]) -> str:
    if not slot:
        return ""
    return slot.get("dateTime") or slot.get("date") or ""


class CalendarServiceError(Exception):
    """Non-2xx answer or transport failure from the calendar API."""


class CalendarProxy:
    """Stateless adapter from validated tool arguments to Google Calendar v3 calls.

    Every public method makes exactly one request and always returns a
    :class:`ServiceReply`; failures are rendered as text instead of raised.
    """

    def __init__(
        self,
        *,
        settings: CalendarSettings,
        credentials: CredentialReader,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._credentials = credentials
        self._transport = transport

    async def list_calendars(self) -> ServiceReply:
        try:
            payload = await self._request("GET", "/users/me/calendarList")
        except CalendarServiceError as exc:
            return ServiceReply.failure(f"Error listing calendars: {exc}")

        lines = ["Available Calendars:"]
        for item in payload.get("items", []):
            lines.append(f"- {item.get('summary', '')} (ID: {item.get('id', '')})")
        return ServiceReply("\n".join(lines) + "\n")

    async def list_events(
        self,
        calendar_id: str,
        *,
        max_results: int = 10,
        time_min: Optional[str] = None,
        time_max: Optional[str] = None,
    ) -> ServiceReply:
        params: Dict[str, Any] = {
            "maxResults": max_results,
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        if time_min:
            params["timeMin"] = time_min
        if time_max:
            params["timeMax"] = time_max

        try:
            payload = await self._request("GET", f"/calendars/{_segment(calendar_id)}/events", params=params)
        except CalendarServiceError as exc:
            return ServiceReply.failure(f"Error listing events: {exc}")

        items = payload.get("items", [])
        if not items:
            return ServiceReply("No events found.")
        lines = [f"Events in calendar {calendar_id}:"]
        for item in items:
            lines.append(f"- {item.get('summary', '')} ({_event_time(item.get('start'))})")
        return ServiceReply("\n".join(lines) + "\n")

    async def create_event(
        self,
        calendar_id: str,
        *,
        summary: str,
        start_time: str,
        end_time: str,
        description: Optional[str] = None,
        location: Optional[str] = None,
    ) -> ServiceReply:
        body: Dict[str, Any] = {
            "summary": summary,
            "start": {"dateTime": start_time},
            "end": {"dateTime": end_time},
        }
        if description:
            body["description"] = description
        if location:
            body["location"] = location

        try:
            created = await self._request("POST", f"/calendars/{_segment(calendar_id)}/events", json=body)
        except CalendarServiceError as exc:
            return ServiceReply.failure(f"Error creating event: {exc}")

        return ServiceReply(
            "Event created successfully!\n"
            f"Title: {created.get('summary', '')}\n"
            f"ID: {created.get('id', '')}\n"
            f"HTML Link: {created.get('htmlLink', '')}"
        )

    async def get_event(self, calendar_id: str, event_id: str) -> ServiceReply:
        path = f"/calendars/{_segment(calendar_id)}/events/{_segment(event_id)}"
        try:
            event = await self._request("GET", path)
        except CalendarServiceError as exc:
            return ServiceReply.failure(f"Error getting event: {exc}")

        return ServiceReply(
            "Event Details:\n"
            f"Title: {event.get('summary', '')}\n"
            f"Description: {event.get('description', '')}\n"
            f"Start: {_event_time(event.get('start'))}\n"
            f"End: {_event_time(event.get('end'))}\n"
            f"Location: {event.get('location', '')}\n"
            f"Status: {event.get('status', '')}\n"
            f"HTML Link: {event.get('htmlLink', '')}"
        )

    async def delete_event(self, calendar_id: str, event_id: str) -> ServiceReply:
        path = f"/calendars/{_segment(calendar_id)}/events/{_segment(event_id)}"
        try:
            await self._request("DELETE", path)
        except CalendarServiceError as exc:
            return ServiceReply.failure(f"Error deleting event: {exc}")
        return ServiceReply(f"Event {event_id} deleted successfully from calendar {calendar_id}")

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        credential = self._credentials.require()
        headers = {"Authorization": credential.authorization_header, "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.api_base_url,
                headers=headers,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Calendar %s %s failed: %s", method, path, exc)
            raise CalendarServiceError(str(exc) or exc.__class__.__name__) from exc

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.info("Calendar %s %s returned %d: %s", method, path, response.status_code, detail)
            raise CalendarServiceError(f"googleapi: Error {response.status_code}: {detail}")

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise CalendarServiceError(f"invalid JSON in response: {exc}") from exc
        return payload if isinstance(payload, dict) else {}


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return response.reason_phrase
