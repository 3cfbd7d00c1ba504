"""FastAPI application that exposes CRUD endpoints for user records."""
from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from fastapi import APIRouter, Body, Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .database import Database, resolve_database_path
from .errors import NotFoundError, ValidationError
from .models import User
from .service import UserService

logger = logging.getLogger("roster.api")

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    email: str
    age: int
    occupation: str
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class MessageResponse(BaseModel):
    message: str


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        age=user.age,
        occupation=user.occupation,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _describe_request_error(exc: RequestValidationError) -> str:
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            return "Request body must be valid JSON"
        message = error.get("msg")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return "Invalid request"


def create_app(
    *,
    database: Database | None = None,
    initialize_database: bool = False,
    allowed_origins: Optional[Sequence[str]] = None,
) -> FastAPI:
    """Create the record API application."""

    if database is None:
        db_path = resolve_database_path(os.getenv("ROSTER_DB_PATH"))
        database = Database(db_path)
        database.initialize()
    elif initialize_database:
        database.initialize()

    service = UserService(database)

    app = FastAPI(
        title="Roster API",
        description="Create, list, update and delete user records",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(allowed_origins) if allowed_origins else ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.state.database = database
    app.state.service = service

    def get_service() -> UserService:
        return service

    @app.get("/", response_model=MessageResponse)
    def welcome() -> MessageResponse:
        return MessageResponse(message="Welcome to the Roster API")

    router = APIRouter(prefix="/users", tags=["users"])

    @router.get("", response_model=List[UserResponse])
    def list_users(svc: UserService = Depends(get_service)) -> List[UserResponse]:
        return [user_to_response(user) for user in svc.list()]

    @router.get("/{user_id}", response_model=UserResponse)
    def read_user(user_id: str, svc: UserService = Depends(get_service)) -> UserResponse:
        return user_to_response(svc.get(user_id))

    @router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    def create_user(
        payload: Any = Body(default=None),
        svc: UserService = Depends(get_service),
    ) -> UserResponse:
        return user_to_response(svc.create(payload))

    @router.put("/{user_id}", response_model=UserResponse)
    def update_user(
        user_id: str,
        payload: Any = Body(default=None),
        svc: UserService = Depends(get_service),
    ) -> UserResponse:
        return user_to_response(svc.update(user_id, payload))

    @router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_user(user_id: str, svc: UserService = Depends(get_service)) -> Response:
        svc.delete(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.include_router(router)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        message = _describe_request_error(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": message},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error during %s %s", request.method, request.url.path, exc_info=exc)
        payload: Dict[str, str] = {"message": GENERIC_ERROR_MESSAGE}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)

    return app


__all__ = ["create_app", "user_to_response", "UserResponse", "GENERIC_ERROR_MESSAGE"]
