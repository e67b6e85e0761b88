from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from dispatch import CycleCoordinator, DispatchConfig, InvariantViolation, get_engine
from dispatch.interface import Command
from dispatch.schemas import ActionRequest, ActionResponse, OnCallsResponse, StartResponse

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Auth-Token"

Model = TypeVar("Model", bound=BaseModel)


def _decode(response: httpx.Response, model: Type[Model]) -> Model:
    """Parse a response body, reporting malformed payloads as transport errors."""

    try:
        return model.model_validate(response.json())
    except ValueError as exc:
        raise httpx.DecodingError(
            f"malformed {model.__name__} from {response.request.url.path}: {exc}", request=response.request
        ) from exc


class AuthorityClient:
    """Thin HTTP client for the elevator authority API."""

    def __init__(self, base_url: str, http: Optional[httpx.Client] = None) -> None:
        self.http = http or httpx.Client(base_url=base_url)
        self.token: Optional[str] = None

    def start(self, user: str, problem: int, elevator_count: int) -> StartResponse:
        response = self.http.post(f"/start/{user}/{problem}/{elevator_count}")
        response.raise_for_status()
        started = _decode(response, StartResponse)
        self.token = started.token
        self.http.headers[TOKEN_HEADER] = started.token
        return started

    def on_calls(self) -> OnCallsResponse:
        response = self.http.get("/oncalls")
        response.raise_for_status()
        return _decode(response, OnCallsResponse)

    def action(self, commands: List[Command]) -> ActionResponse:
        body = ActionRequest.from_commands(commands).to_wire()
        response = self.http.post("/action", json=body)
        response.raise_for_status()
        return _decode(response, ActionResponse)

    def close(self) -> None:
        self.http.close()


@dataclass
class SessionSummary:
    cycles: int
    timestamp: int
    ended: bool


def run_session(
    client: AuthorityClient,
    user: str,
    problem: int,
    elevator_count: int,
    engine_name: str = "look",
) -> SessionSummary:
    """Fetch snapshots and submit commands until the authority ends the session.

    Any transport failure or invariant violation is logged once and ends the
    loop; nothing is retried.
    """

    cycles = 0
    timestamp = 0
    try:
        started = client.start(user, problem, elevator_count)
        config = DispatchConfig(max_height=started.max_height)
        coordinator = CycleCoordinator(get_engine(engine_name, config))
        logger.info("session started for problem %s with %s elevators", problem, elevator_count)

        while True:
            on_calls = client.on_calls()
            timestamp = on_calls.timestamp
            if on_calls.is_end:
                logger.info("authority ended the session at timestamp %s", timestamp)
                return SessionSummary(cycles=cycles, timestamp=timestamp, ended=True)
            commands = coordinator.run_cycle(on_calls.to_snapshot())
            client.action(commands)
            cycles += 1
    except httpx.HTTPError:
        logger.exception("transport failure after %d cycles", cycles)
    except InvariantViolation:
        logger.exception("dispatch aborted after %d cycles", cycles)
    return SessionSummary(cycles=cycles, timestamp=timestamp, ended=False)
