"""FastAPI host for the Tin ledger: one invoke route per ledger command."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from tin.config import Settings, get_settings
from tin.db.database import Database
from tin.errors import CardNotFound, InvalidAmount, LedgerError, TodoNotFound
from tin.services.archiver import ArchivalScheduler
from tin.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


# Request Models
class NoArgs(BaseModel):
    pass


class CardIdArgs(BaseModel):
    card_id: str


class CreateCardArgs(BaseModel):
    title: Optional[str] = None
    amount: str


class UpdateCardArgs(BaseModel):
    card_id: str
    title: Optional[str] = None
    amount: Optional[str] = None


class AddTodoArgs(BaseModel):
    card_id: str
    title: str = Field(min_length=1)
    amount: Optional[str] = None
    use_current_time: bool = False
    scheduled_at: Optional[str] = None


class UpdateTodoArgs(BaseModel):
    todo_id: str
    title: Optional[str] = None
    amount: Optional[str] = None
    done: Optional[bool] = None
    scheduled_at: Optional[str] = None
    order_index: Optional[int] = None


class TodoIdArgs(BaseModel):
    todo_id: str


class SearchArgs(BaseModel):
    query: str


class RecentChangesArgs(BaseModel):
    limit: Optional[int] = Field(default=None, ge=1)


# command name -> (argument model, LedgerService method name)
COMMANDS: dict[str, tuple[type[BaseModel], str]] = {
    "list_cards": (NoArgs, "list_cards"),
    "list_archived_cards": (NoArgs, "list_archived_cards"),
    "get_card": (CardIdArgs, "get_card"),
    "create_card": (CreateCardArgs, "create_card"),
    "update_card": (UpdateCardArgs, "update_card"),
    "delete_card": (CardIdArgs, "delete_card"),
    "add_todo": (AddTodoArgs, "add_todo"),
    "update_todo": (UpdateTodoArgs, "update_todo"),
    "delete_todo": (TodoIdArgs, "delete_todo"),
    "search": (SearchArgs, "search"),
    "recent_changes": (RecentChangesArgs, "recent_changes"),
    "archive_card": (CardIdArgs, "archive_card"),
    "unarchive_card": (CardIdArgs, "unarchive_card"),
    "archive_old_cards": (NoArgs, "archive_old_cards"),
}


def _serialize(result: Any) -> Any:
    if isinstance(result, list):
        return [item.to_dict() for item in result]
    return result.to_dict()


def _error_status(exc: LedgerError) -> int:
    if isinstance(exc, (CardNotFound, TodoNotFound)):
        return 404
    if isinstance(exc, InvalidAmount):
        return 422
    return 500


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store and start the archival sweep; undo both on shutdown."""
        db = Database(path=settings.DATABASE_PATH)
        db.init()
        service = LedgerService.from_settings(db, settings)
        scheduler = ArchivalScheduler(service, settings.ARCHIVE_INTERVAL_SECONDS)
        if settings.ARCHIVER_ENABLED:
            scheduler.start()

        app.state.db = db
        app.state.ledger = service
        app.state.scheduler = scheduler
        logger.info(f"Server started - DB: {db.path}")
        yield

        scheduler.stop()
        db.close()
        logger.info("Server shutting down")

    app = FastAPI(
        title="Tin Ledger API",
        description="Budget cards, todos, change log and search",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        return JSONResponse(status_code=_error_status(exc), content={"error": str(exc)})

    @app.get("/api/status")
    def get_status(request: Request):
        """Get system status."""
        scheduler: ArchivalScheduler = request.app.state.scheduler
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": str(request.app.state.db.path),
            "archiver_running": scheduler.running,
        }

    @app.post("/api/invoke/{command}")
    def invoke(command: str, request: Request, body: dict[str, Any] = Body(default={})):
        """Dispatch one ledger command with keyword arguments from the JSON body."""
        if command not in COMMANDS:
            return JSONResponse(status_code=404, content={"error": f"Unknown command: {command}"})

        model, method_name = COMMANDS[command]
        try:
            args = model.model_validate(body)
        except ValidationError as e:
            return JSONResponse(
                status_code=422,
                content={
                    "error": "Invalid arguments",
                    "detail": e.errors(include_url=False, include_context=False),
                },
            )

        method: Callable[..., Any] = getattr(request.app.state.ledger, method_name)
        return _serialize(method(**args.model_dump()))

    return app


app = create_app()
