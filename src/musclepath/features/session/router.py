from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, model_validator

from ...core.errors import ConfigError, InvalidStateError, InvalidTransitionError, NotFoundError
from ...workout import FeedbackLevel
from .schemas import (
    ClaimResponse,
    FeedbackResponse,
    MapResponse,
    NodePayload,
    SelectResponse,
    SessionPayload,
    TickResponse,
)
from .service import TrainerManager

__all__ = ["FeedbackRequest", "create_trainer_router"]

_T = TypeVar("_T")


class FeedbackRequest(BaseModel):
    level: FeedbackLevel
    stars: int | None = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: dict[str, object]) -> dict[str, object]:
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, object] = dict(data)
        level = cleaned.get("level")
        if isinstance(level, str):
            cleaned["level"] = level.strip().lower()
        if cleaned.get("stars") in ("", None):
            cleaned["stars"] = None
        return cleaned


class _TrainerEndpoints:
    def __init__(self, manager: TrainerManager) -> None:
        self.manager = manager

    # ------------------------------------------------------------------ helpers
    async def _call(self, pending: Awaitable[_T]) -> _T:
        try:
            return await pending
        except NotFoundError as exc:
            raise HTTPException(404, str(exc)) from exc
        except (InvalidStateError, InvalidTransitionError) as exc:
            raise HTTPException(409, str(exc)) from exc
        except ConfigError as exc:
            raise HTTPException(400, str(exc)) from exc

    def _json_response(
        self,
        payload: (
            MapResponse
            | NodePayload
            | SelectResponse
            | ClaimResponse
            | SessionPayload
            | TickResponse
            | FeedbackResponse
        ),
    ) -> JSONResponse:
        response = JSONResponse(payload.to_dict())
        response.headers.setdefault("Cache-Control", "no-store")
        return response

    # ------------------------------------------------------------------ actions
    async def map_view(self) -> Response:
        return self._json_response(await self._call(self.manager.map_view_async()))

    async def node(self, node_id: int) -> Response:
        return self._json_response(await self._call(self.manager.node_async(node_id)))

    async def select(self, node_id: int) -> Response:
        return self._json_response(await self._call(self.manager.select_async(node_id)))

    async def claim(self, node_id: int) -> Response:
        return self._json_response(await self._call(self.manager.claim_async(node_id)))

    async def session(self, sid: str) -> Response:
        return self._json_response(await self._call(self.manager.session_async(sid)))

    async def start(self, sid: str) -> Response:
        return self._json_response(await self._call(self.manager.start_async(sid)))

    async def tick(self, sid: str) -> Response:
        return self._json_response(await self._call(self.manager.tick_async(sid)))

    async def feedback(self, sid: str, body: FeedbackRequest) -> Response:
        result = await self._call(self.manager.feedback_async(sid, body.level, body.stars))
        return self._json_response(result)

    async def cancel(self, sid: str) -> Response:
        return self._json_response(await self._call(self.manager.cancel_async(sid)))


def create_trainer_router(manager: TrainerManager) -> APIRouter:
    endpoints = _TrainerEndpoints(manager)
    router = APIRouter(prefix="/api/v1", tags=["trainer"])

    @router.get("/map")
    async def get_map() -> Response:
        return await endpoints.map_view()

    @router.get("/nodes/{node_id}")
    async def get_node(node_id: int) -> Response:
        return await endpoints.node(node_id)

    @router.post("/nodes/{node_id}/select")
    async def select_node(node_id: int) -> Response:
        return await endpoints.select(node_id)

    @router.post("/nodes/{node_id}/claim")
    async def claim_node(node_id: int) -> Response:
        return await endpoints.claim(node_id)

    @router.get("/session/{sid}")
    async def get_session(sid: str) -> Response:
        return await endpoints.session(sid)

    @router.post("/session/{sid}/start")
    async def start_session(sid: str) -> Response:
        return await endpoints.start(sid)

    @router.post("/session/{sid}/tick")
    async def tick_session(sid: str) -> Response:
        return await endpoints.tick(sid)

    @router.post("/session/{sid}/feedback")
    async def post_feedback(sid: str, body: FeedbackRequest) -> Response:
        return await endpoints.feedback(sid, body)

    @router.post("/session/{sid}/cancel")
    async def cancel_session(sid: str) -> Response:
        return await endpoints.cancel(sid)

    return router
