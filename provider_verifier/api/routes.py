from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..core.metrics import metrics
from ..core.schemas import LoginRequest, LoginResponse, PublicUser, UserRepository
from .deps import get_user_repository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/users/login",
    response_model=LoginResponse,
    tags=["users"],
    summary="Log a user in",
    responses={
        401: {"description": "Credentials rejected"},
        404: {"description": "Unknown user"},
    },
)
def user_login(
    credentials: LoginRequest,
    response: Response,
    repository: UserRepository = Depends(get_user_repository),
) -> LoginResponse:
    """Check a username/password pair against the active user repository."""
    user = repository.by_username(credentials.username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if user.password != credentials.password:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    response.headers["X-Api-Correlation-Id"] = "1234"
    return LoginResponse(user=PublicUser(name=user.name, username=user.username, type=user.type))


@router.get(
    "/users/{username}",
    response_model=PublicUser,
    tags=["users"],
    summary="Look up a user",
)
def get_user(username: str, repository: UserRepository = Depends(get_user_repository)) -> PublicUser:
    user = repository.by_username(username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return PublicUser(name=user.name, username=user.username, type=user.type)


@router.get("/metrics", tags=["metrics"], include_in_schema=False)
def metrics_endpoint() -> Response:
    return Response(content=generate_latest(metrics.registry), media_type=CONTENT_TYPE_LATEST)
