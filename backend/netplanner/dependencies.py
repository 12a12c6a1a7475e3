"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from netplanner.editor.controller import InteractionController
from netplanner.session import EditorSession
from netplanner.websocket import ConnectionManager

security = HTTPBearer(auto_error=False)


def get_session(request: Request) -> EditorSession:
    """The editor session owned by the running app."""
    return request.app.state.session


def get_controller(
    session: Annotated[EditorSession, Depends(get_session)],
) -> InteractionController:
    return session.controller


def get_ws_manager(request: Request) -> ConnectionManager:
    return request.app.state.ws_manager


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Caller's bearer credential, forwarded to the inventory API."""
    return credentials.credentials if credentials else None


Session = Annotated[EditorSession, Depends(get_session)]
Controller = Annotated[InteractionController, Depends(get_controller)]
WsManager = Annotated[ConnectionManager, Depends(get_ws_manager)]
BearerToken = Annotated[str | None, Depends(get_bearer_token)]
