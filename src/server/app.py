from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import asdict
from typing import Dict, Optional

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from dispatch.config import DispatchConfig
from dispatch.schemas import ActionRequest, ActionResponse, ElevatorPayload, OnCallsResponse, StartResponse
from simulation import CommandRejected, ScenarioSettings, Simulation

logger = logging.getLogger(__name__)


class SessionManager:
    """Holds one simulated authority per issued token."""

    def __init__(self, max_ticks: int = 2000) -> None:
        self.max_ticks = max_ticks
        self.sessions: Dict[str, Simulation] = {}
        self._lock = asyncio.Lock()

    async def start(
        self, user: str, problem: int, count: int, call_count: int, seed: Optional[int]
    ) -> StartResponse:
        settings = ScenarioSettings(
            problem=problem,
            elevator_count=count,
            call_count=call_count,
            random_seed=seed,
            max_ticks=self.max_ticks,
        )
        simulation = Simulation(settings)
        token = uuid.uuid4().hex
        async with self._lock:
            self.sessions[token] = simulation
        logger.info("started session %s for %s (problem %s, %s elevators)", token, user, problem, count)
        return StartResponse(
            token=token,
            problem=problem,
            elevator_count=count,
            max_height=simulation.config.max_height,
            timestamp=simulation.current_time,
        )

    async def on_calls(self, token: str) -> OnCallsResponse:
        async with self._lock:
            simulation = self._get(token)
            return OnCallsResponse.from_snapshot(token, simulation.on_calls())

    async def action(self, token: str, request: ActionRequest) -> ActionResponse:
        async with self._lock:
            simulation = self._get(token)
            if simulation.is_end:
                raise ValueError("session already ended")
            simulation.step([payload.to_command() for payload in request.commands])
            snapshot = simulation.on_calls()
            return ActionResponse(
                token=token,
                timestamp=snapshot.timestamp,
                elevators=[ElevatorPayload.from_snapshot(e) for e in snapshot.elevators],
                is_end=snapshot.is_end,
            )

    async def state(self, token: str) -> dict:
        async with self._lock:
            simulation = self._get(token)
            return {
                "time": simulation.current_time,
                "building": simulation.building.snapshot(),
                "metrics": asdict(simulation.metrics.snapshot(simulation.current_time)),
                "is_end": simulation.is_end,
            }

    def _get(self, token: str) -> Simulation:
        simulation = self.sessions.get(token)
        if simulation is None:
            raise KeyError(token)
        return simulation


manager = SessionManager()
app = FastAPI(title="LiftCall Authority API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _unknown_token() -> HTTPException:
    return HTTPException(status_code=401, detail="Unknown or missing X-Auth-Token")


@app.post("/start/{user}/{problem}/{count}")
async def start_session(
    user: str, problem: int, count: int, call_count: int = 50, seed: Optional[int] = None
) -> StartResponse:
    try:
        DispatchConfig.for_problem(problem)
        return await manager.start(user, problem, count, call_count, seed)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.get("/oncalls")
async def on_calls(x_auth_token: str = Header(default="")) -> OnCallsResponse:
    try:
        return await manager.on_calls(x_auth_token)
    except KeyError:
        raise _unknown_token()


@app.post("/action")
async def action(request: ActionRequest, x_auth_token: str = Header(default="")) -> ActionResponse:
    try:
        return await manager.action(x_auth_token, request)
    except KeyError:
        raise _unknown_token()
    except CommandRejected as exc:
        logger.warning("rejected action for %s: %s", x_auth_token, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.get("/state")
async def get_state(x_auth_token: str = Header(default="")) -> dict:
    try:
        return await manager.state(x_auth_token)
    except KeyError:
        raise _unknown_token()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
