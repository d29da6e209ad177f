"""
FastAPI HTTP server for the Agentic user service.

Exposes the user CRUD API and the conversational agent endpoint.
"""

import asyncio
import logging
import time
from typing import Annotated, AsyncContextManager, Callable, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from agentic.core.config import Config
from agentic.core.contracts import AgentResponse
from agentic.core.users.directory import UserDirectory
from agentic.core.users.tools import UserTools
from agentic.skills.chat import ChatAgent

logger = logging.getLogger("server")


class UserRegistrationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100, description="The full name of the user.")
    age: int = Field(..., ge=1, le=150, description="The age of the user in years.")
    job_title: str = Field(..., alias="jobTitle", min_length=1, max_length=100, description="The user's job title.")


class UserUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100, description="The new full name of the user.")
    age: Optional[int] = Field(None, ge=1, le=150, description="The new age of the user in years.")
    job_title: Optional[str] = Field(None, alias="jobTitle", max_length=100, description="The new job title of the user.")


class AgentRequest(BaseModel):
    prompt: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]


async def get_directory(request: Request) -> UserDirectory:
    """Get or create the user directory for this app."""
    directory = getattr(request.app.state, "directory", None)
    if directory is None:
        # schema setup touches the database file, keep it off the event loop
        directory = await asyncio.to_thread(Config.get_user_directory)
        request.app.state.directory = directory
    return directory


async def get_agent(request: Request) -> ChatAgent:
    """Get or create the conversational agent for this app."""
    agent = getattr(request.app.state, "agent", None)
    if agent is None:
        agent = ChatAgent(UserTools(await get_directory(request)))
        request.app.state.agent = agent
    return agent


def create_app(
    directory: Optional[UserDirectory] = None,
    agent: Optional[ChatAgent] = None,
    lifespan: Optional[Callable[[FastAPI], AsyncContextManager]] = None,
) -> FastAPI:
    """
    Create FastAPI app.

    Args:
        directory: User directory to serve; built from Config on first use if omitted
        agent: Conversational agent; built over the directory on first use if omitted
        lifespan: Optional lifespan context manager for startup/shutdown

    Returns:
        FastAPI app instance
    """
    app_kwargs = {
        "title": "Agentic API (Local AI)",
        "description": "User management API with a conversational agent and a rule-based fallback",
        "version": "0.1.0",
    }

    if lifespan:
        app_kwargs["lifespan"] = lifespan

    app = FastAPI(**app_kwargs)
    app.state.directory = directory
    app.state.agent = agent

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "title": "One or more validation errors occurred.",
                "status": 400,
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.get("/health")
    async def health_check(directory: UserDirectory = Depends(get_directory)):
        """Health check endpoint."""
        healthy = await directory.ping()
        return {
            "status": "ok" if healthy else "degraded",
            "service": "agentic-users",
            "database": "ok" if healthy else "unavailable",
        }

    @app.post("/api/user/register", status_code=201)
    async def register_user(body: UserRegistrationRequest, directory: UserDirectory = Depends(get_directory)):
        """Registers a new user in the system."""
        try:
            user = await directory.create(body.name, body.age, body.job_title)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return PlainTextResponse(
            f"User '{user.name}' was registered successfully with ID {user.id}.",
            status_code=201,
            headers={"Location": f"/api/user/{user.id}"},
        )

    @app.get("/api/user")
    async def list_users(
        directory: UserDirectory = Depends(get_directory),
        jobTitleFilter: Optional[str] = None,
        minAge: Optional[int] = None,
        maxAge: Optional[int] = None,
    ):
        """Retrieves a list of all users, with optional filtering."""
        users = await directory.list(jobTitleFilter, minAge, maxAge)
        return [user.dict() for user in users]

    # Declared before /{user_id} so "all" is not parsed as an id
    @app.delete("/api/user/all")
    async def delete_all_users(directory: UserDirectory = Depends(get_directory)):
        """Deletes ALL users from the system."""
        count = await directory.delete_all()
        return PlainTextResponse(f"All {count} users have been deleted successfully.")

    @app.get("/api/user/{user_id}")
    async def get_user(user_id: int, directory: UserDirectory = Depends(get_directory)):
        """Retrieves a specific user by their ID."""
        user = await directory.get_by_id(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")
        return user.dict()

    @app.put("/api/user/{user_id}")
    async def update_user(user_id: int, body: UserUpdateRequest, directory: UserDirectory = Depends(get_directory)):
        """Updates an existing user's information."""
        try:
            user = await directory.update(user_id, body.name, body.age, body.job_title)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if user is None:
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")
        return PlainTextResponse(f"User with ID {user_id} was updated successfully.")

    @app.delete("/api/user/{user_id}")
    async def delete_user(user_id: int, directory: UserDirectory = Depends(get_directory)):
        """Deletes a user from the system."""
        if not await directory.delete(user_id):
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")
        return PlainTextResponse(f"User with ID {user_id} was deleted successfully.")

    @app.post("/api/agent/converse")
    async def converse(body: AgentRequest, request: Request, agent: ChatAgent = Depends(get_agent)):
        """
        Send a free-text prompt (English or Arabic) to the agent.

        Returns {"success", "message", "executionTimeMs"}. The rule-based
        fallback answers when the model endpoint is offline.
        """
        started = time.perf_counter()
        logger.info("Processing agent request: %s", body.prompt)
        try:
            reply = await agent.converse(body.prompt)
        except Exception:
            logger.exception("An unexpected error occurred in the converse endpoint")
            return JSONResponse(
                status_code=500,
                content={
                    "title": "Internal Server Error",
                    "status": 500,
                    "detail": "An unexpected error occurred. Please try again later.",
                    "instance": request.url.path,
                },
            )
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return AgentResponse(success=True, message=reply or "Task completed.", execution_time_ms=elapsed_ms).dict()

    return app


# Create default app instance (for `uvicorn agentic.server:app`)
app = create_app()
