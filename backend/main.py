import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import assistant
from auth import AuthService
from completion import CompletionClient
from config import Settings
from database import Database, TaskStore, UserStore
from errors import NotFound, TaskTrackerError
from logging_setup import setup_logging
from models import (
    ClassifyRequest,
    ImproveRequest,
    ImprovedTask,
    LoginRequest,
    MessageResponse,
    ParseRequest,
    ParsedTask,
    RegisterRequest,
    Task,
    TaskClassification,
    TaskCreate,
    TaskUpdate,
    TokenResponse,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, completion_client=None) -> FastAPI:
    """Build the app. Components are created here once and shared through app.state."""
    settings = settings or Settings.from_env()
    db = Database(settings.database_path)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        # Startup
        setup_logging(settings.log_level)
        if settings.auth_enabled and not settings.jwt_secret:
            raise RuntimeError("TODO_JWT_SECRET is required when auth is enabled")
        db.init_db()
        logger.info(
            "startup database=%s auth_enabled=%s completion_configured=%s",
            settings.database_path,
            settings.auth_enabled,
            app.state.completion.configured,
        )
        yield
        # Shutdown (nothing to do)

    app = FastAPI(title="todo-assistant", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.tasks = TaskStore(db)
    app.state.auth = AuthService(UserStore(db), settings)
    app.state.completion = completion_client or CompletionClient(settings)

    @app.exception_handler(TaskTrackerError)
    async def handle_app_error(request: Request, exc: TaskTrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request event=failed path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.exception_handler(sqlite3.Error)
    async def handle_store_error(request: Request, exc: sqlite3.Error) -> JSONResponse:
        logger.error("request event=failed path=%s store_error=%s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": f"Database error: {exc}"})

    def current_owner(authorization: Annotated[Optional[str], Header()] = None) -> Optional[str]:
        """Caller's user id, or None when auth is disabled (tasks are then unscoped)."""
        if not settings.auth_enabled:
            return None
        return app.state.auth.authenticate(authorization)

    Owner = Annotated[Optional[str], Depends(current_owner)]

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # Auth (only mounted when enabled)

    if settings.auth_enabled:
        @app.post("/auth/register", response_model=MessageResponse)
        def register(payload: RegisterRequest) -> MessageResponse:
            app.state.auth.register(payload.name, payload.email, payload.password)
            return MessageResponse(message="Registered")

        @app.post("/auth/login", response_model=TokenResponse)
        def login(payload: LoginRequest) -> TokenResponse:
            return TokenResponse(token=app.state.auth.login(payload.email, payload.password))

    # Tasks

    @app.get("/todos", response_model=list[Task])
    def list_todos(owner_id: Owner) -> list[Task]:
        return app.state.tasks.list_tasks(owner_id)

    @app.post("/todos", response_model=Task)
    def create_todo(task_data: TaskCreate, owner_id: Owner) -> Task:
        return app.state.tasks.create_task(task_data.to_document(), owner_id)

    @app.put("/todos/{task_id}", response_model=Task)
    def update_todo(task_id: str, task_data: TaskUpdate, owner_id: Owner) -> Task:
        result = app.state.tasks.update_task(task_id, task_data.to_document(), owner_id)
        if not result:
            raise NotFound("Task not found")
        return result

    @app.delete("/todos/{task_id}", status_code=204)
    def delete_todo(task_id: str, owner_id: Owner) -> Response:
        app.state.tasks.delete_task(task_id, owner_id)
        return Response(status_code=204)

    @app.post("/todos/from-text", response_model=Task)
    async def create_todo_from_text(payload: ParseRequest, owner_id: Owner) -> Task:
        """Parse free text with the assistant and store the result as a new task."""
        parsed = await assistant.parse_task(app.state.completion, payload.text, payload.current_date)
        return await run_in_threadpool(
            app.state.tasks.create_task, parsed.model_dump(by_alias=True), owner_id
        )

    @app.post("/todos/{task_id}/improve", response_model=Task)
    async def improve_todo(task_id: str, owner_id: Owner) -> Task:
        """Rewrite a stored task's title and description in place."""
        task = await run_in_threadpool(app.state.tasks.get_task, task_id, owner_id)
        if not task:
            raise NotFound("Task not found")

        improved = await assistant.improve_task(
            app.state.completion, task.title or "", task.description or ""
        )
        result = await run_in_threadpool(
            app.state.tasks.update_task,
            task_id,
            {"title": improved.improved_title, "description": improved.improved_description},
            owner_id,
        )
        if not result:
            # Deleted while the completion call was in flight
            raise NotFound("Task not found")
        return result

    # Assistant

    @app.post("/ai/parse", response_model=ParsedTask)
    async def ai_parse(payload: ParseRequest, _owner_id: Owner) -> ParsedTask:
        return await assistant.parse_task(app.state.completion, payload.text, payload.current_date)

    @app.post("/ai/improve", response_model=ImprovedTask)
    async def ai_improve(payload: ImproveRequest, _owner_id: Owner) -> ImprovedTask:
        return await assistant.improve_task(app.state.completion, payload.title, payload.description)

    @app.post("/ai/classify", response_model=TaskClassification)
    async def ai_classify(payload: ClassifyRequest, _owner_id: Owner) -> TaskClassification:
        return await assistant.classify_task(app.state.completion, payload.title, payload.description)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
