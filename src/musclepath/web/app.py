from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..features.session import TrainerManager, create_trainer_router

__all__ = ["create_app", "main"]


def create_app(manager: TrainerManager | None = None) -> FastAPI:
    trainer = manager if manager is not None else TrainerManager()
    application = FastAPI(title="MusclePath")
    application.state.manager = trainer
    application.include_router(create_trainer_router(trainer))

    @application.get("/healthz")
    def healthz() -> JSONResponse:
        return JSONResponse({"status": "ok", "nodes": len(trainer.graph)})

    return application


def main(
    host: str | None = None,
    port: int | None = None,
    application: FastAPI | None = None,
) -> None:  # pragma: no cover - runner
    import uvicorn

    bind = host or os.environ.get("BIND", "127.0.0.1")
    listen = port or int(os.environ.get("PORT", "8000"))
    if application is None:
        uvicorn.run("musclepath.web.app:create_app", host=bind, port=listen, factory=True)
    else:
        uvicorn.run(application, host=bind, port=listen)


if __name__ == "__main__":  # pragma: no cover
    main()
