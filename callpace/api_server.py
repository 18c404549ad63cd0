"""HTTP API for the call pacing board.

Exposes a team's daily view, entry editing, settings, monthly progress with
override/reset, what-if simulation and the AI helpers as JSON endpoints.

Validation failures map to ``400``, edits of historical days to ``409``.
Storage write failures never fail a request; they add a ``notice`` field to
the response body instead.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from aiohttp import web

from . import calendar_service
from .ai_client import GeminiClient
from .config import Settings
from .dashboard import PacingDashboard
from .models import EntryValidationError, ReadOnlyDayError
from .record_store import RecordStore
from .simulator import OVERALL

LOGGER = logging.getLogger("callpace.api")

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def domain_error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except ReadOnlyDayError as exc:
        return web.json_response({"error": str(exc)}, status=409)
    except EntryValidationError as exc:
        return web.json_response({"error": str(exc)}, status=400)


def _parse_day(request: web.Request) -> date:
    try:
        return calendar_service.to_date(request.match_info["date"])
    except ValueError as exc:
        raise web.HTTPBadRequest(text=f"Invalid date: {exc}") from exc


def _parse_month(request: web.Request) -> str:
    value = request.match_info["month"]
    try:
        datetime.strptime(value, "%Y-%m")
    except ValueError as exc:
        raise web.HTTPBadRequest(text=f"Invalid month: {value}") from exc
    return value


async def _json_body(request: web.Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise web.HTTPBadRequest(text=f"Invalid JSON payload: {exc}") from exc
    if not isinstance(payload, dict):
        raise web.HTTPBadRequest(text="JSON payload must be an object")
    return payload


class PacingApplication:
    """Encapsulates the aiohttp application and its handlers."""

    def __init__(
        self,
        store: RecordStore,
        *,
        teams: Optional[list] = None,
        ai_client: Optional[GeminiClient] = None,
        legacy_team: Optional[str] = None,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        self.dashboard = PacingDashboard(store, ai_client=ai_client, legacy_team=legacy_team)
        self.teams = set(teams or ["team1", "team2"])
        self.clock = clock or date.today
        self.app = web.Application(middlewares=[domain_error_middleware])
        self.app.router.add_get("/health", self.handle_health)
        self._register_day_routes()
        self._register_month_routes()

    def _register_day_routes(self) -> None:
        day = "/teams/{team}/days/{date}"
        self.app.router.add_get(day, self.get_day)
        self.app.router.add_post(f"{day}/entries", self.post_entry)
        self.app.router.add_delete(f"{day}/entries", self.delete_entries)
        self.app.router.add_delete(f"{day}/entries/{{time}}", self.delete_entry)
        self.app.router.add_put(f"{day}/settings", self.put_settings)
        self.app.router.add_post(f"{day}/settings/reset-weights", self.post_reset_weights)
        self.app.router.add_post(f"{day}/simulate", self.post_simulate)
        self.app.router.add_post(f"{day}/smart-input", self.post_smart_input)
        self.app.router.add_post(f"{day}/coaching", self.post_coaching)

    def _register_month_routes(self) -> None:
        month = "/teams/{team}/months/{month}/progress"
        self.app.router.add_get(month, self.get_month_progress)
        self.app.router.add_put(month, self.put_month_override)
        self.app.router.add_delete(month, self.delete_month_override)

    def _team(self, request: web.Request) -> str:
        team = request.match_info["team"]
        if team not in self.teams:
            raise web.HTTPNotFound(text=f"Unknown team: {team}")
        return team

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": "healthy",
            "teams": sorted(self.teams),
            "ai": self.dashboard.ai_client.health(),
            "timestamp": datetime.now().isoformat(),
        })

    async def get_day(self, request: web.Request) -> web.Response:
        team = self._team(request)
        return web.json_response(self.dashboard.day_view(team, _parse_day(request), today=self.clock()))

    async def post_entry(self, request: web.Request) -> web.Response:
        team = self._team(request)
        payload = await _json_body(request)
        editing = request.query.get("editing")
        editing_time = int(editing) if editing and editing.isdigit() else None
        result = self.dashboard.upsert_entry(
            team, _parse_day(request), payload, editing_time=editing_time, today=self.clock()
        )
        return web.json_response(result, status=200 if result["replaced"] else 201)

    async def delete_entry(self, request: web.Request) -> web.Response:
        team = self._team(request)
        try:
            reporting_time = int(request.match_info["time"])
        except ValueError as exc:
            raise web.HTTPBadRequest(text="Invalid reporting time") from exc
        result = self.dashboard.delete_entry(team, _parse_day(request), reporting_time, today=self.clock())
        if not result["removed"]:
            raise web.HTTPNotFound(text=f"No entry at {reporting_time}")
        return web.json_response(result)

    async def delete_entries(self, request: web.Request) -> web.Response:
        team = self._team(request)
        return web.json_response(self.dashboard.reset_day(team, _parse_day(request), today=self.clock()))

    async def put_settings(self, request: web.Request) -> web.Response:
        team = self._team(request)
        payload = await _json_body(request)
        try:
            result = self.dashboard.update_settings(team, _parse_day(request), payload, today=self.clock())
        except (KeyError, ValueError) as exc:
            raise web.HTTPBadRequest(text=f"Invalid setting: {exc}") from exc
        return web.json_response(result)

    async def post_reset_weights(self, request: web.Request) -> web.Response:
        team = self._team(request)
        return web.json_response(self.dashboard.reset_weights(team, _parse_day(request), today=self.clock()))

    async def post_simulate(self, request: web.Request) -> web.Response:
        team = self._team(request)
        payload = await _json_body(request)
        adjustment = payload.get("adjustment", 0)
        if isinstance(adjustment, bool) or not isinstance(adjustment, int):
            raise web.HTTPBadRequest(text="adjustment must be an integer")
        scope = payload.get("scope") or OVERALL
        if not isinstance(scope, str):
            raise web.HTTPBadRequest(text="scope must be a string")
        return web.json_response(self.dashboard.simulate(team, _parse_day(request), scope, adjustment))

    async def post_smart_input(self, request: web.Request) -> web.Response:
        team = self._team(request)
        payload = await _json_body(request)
        text = payload.get("text")
        if not isinstance(text, str) or not text.strip():
            raise web.HTTPBadRequest(text="Missing text")
        result = await asyncio.to_thread(self.dashboard.smart_input, team, _parse_day(request), text)
        return web.json_response(result)

    async def post_coaching(self, request: web.Request) -> web.Response:
        team = self._team(request)
        result = await asyncio.to_thread(self.dashboard.coaching, team, _parse_day(request))
        return web.json_response(result)

    async def get_month_progress(self, request: web.Request) -> web.Response:
        team = self._team(request)
        month = _parse_month(request)
        day = request.query.get("date") or None
        try:
            snapshot = self.dashboard.month_progress(team, month, day)
        except ValueError as exc:
            raise web.HTTPBadRequest(text=f"Invalid date: {exc}") from exc
        return web.json_response({**snapshot.to_dict(), "overridden": snapshot.overridden})

    async def put_month_override(self, request: web.Request) -> web.Response:
        team = self._team(request)
        month = _parse_month(request)
        payload = await _json_body(request)
        return web.json_response(self.dashboard.override_month(team, month, payload))

    async def delete_month_override(self, request: web.Request) -> web.Response:
        team = self._team(request)
        return web.json_response(self.dashboard.clear_month_override(team, _parse_month(request)))


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> web.Application:
    settings = settings or Settings.from_environment()
    configure_logging(settings.log_level)
    store = store or settings.build_store()
    LOGGER.info("Using %s record store", type(store).__name__)
    server = PacingApplication(
        store,
        teams=settings.teams,
        ai_client=GeminiClient.from_settings(settings),
        legacy_team=settings.legacy_team,
    )
    return server.app


def main() -> None:
    settings = Settings.from_environment()
    app = create_app(settings)
    web.run_app(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
