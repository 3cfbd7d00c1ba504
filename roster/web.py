"""Browser interface for managing user records."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

from fastapi import FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from .client import UsersAPIClient
from .config import DEFAULT_API_BASE_URL
from .controller import (
    DRAFT_FIELDS,
    ClientState,
    Draft,
    UserListController,
    cancel,
    dismiss_delete,
    edit_field,
    find_record,
    request_delete,
    request_failed,
    start_edit,
)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

SESSION_KEY = "roster_state"

logger = logging.getLogger("roster.web")


def _state_from_session(session: MutableMapping[str, Any]) -> ClientState:
    raw = session.get(SESSION_KEY)
    if not isinstance(raw, dict):
        return ClientState()

    draft_raw = raw.get("draft")
    draft = Draft()
    if isinstance(draft_raw, dict):
        draft = Draft(**{key: str(draft_raw.get(key, "")) for key in DRAFT_FIELDS})

    def _optional_text(key: str) -> Optional[str]:
        value = raw.get(key)
        return value if isinstance(value, str) and value else None

    return ClientState(
        draft=draft,
        editing_id=_optional_text("editing_id"),
        error=_optional_text("error"),
        pending_delete=_optional_text("pending_delete"),
    )


def _store_state(session: MutableMapping[str, Any], state: ClientState) -> None:
    # Records are re-listed on every page load and never kept in the cookie.
    session[SESSION_KEY] = {
        "draft": state.draft.to_payload(),
        "editing_id": state.editing_id,
        "error": state.error,
        "pending_delete": state.pending_delete,
    }


def create_app(
    *,
    api_client: Optional[UsersAPIClient] = None,
    api_base_url: Optional[str] = None,
    session_secret: Optional[str] = None,
) -> FastAPI:
    """Create the record management web application."""

    if api_client is None:
        api_client = UsersAPIClient(api_base_url or DEFAULT_API_BASE_URL)

    if not session_secret:
        raise RuntimeError("A session secret must be configured to use the web interface")

    controller = UserListController(api_client)

    app = FastAPI(
        title="Roster",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.controller = controller
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie="roster_session",
        same_site="lax",
    )

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

    def _redirect_home(request: Request) -> RedirectResponse:
        return RedirectResponse(request.url_for("index"), status_code=status.HTTP_303_SEE_OTHER)

    def _save_and_redirect(request: Request, state: ClientState) -> RedirectResponse:
        _store_state(request.session, state)
        return _redirect_home(request)

    @app.get("/", response_class=HTMLResponse, name="index")
    def index(request: Request):
        previous = _state_from_session(request.session)
        state = controller.mount(previous)
        if state.error is None and previous.error:
            state = replace(state, error=previous.error)
        # Errors from the last action are shown once, like flash messages.
        _store_state(request.session, replace(state, error=None))
        context: Dict[str, object] = {
            "request": request,
            "state": state,
            "pending_record": find_record(state, state.pending_delete) if state.pending_delete else None,
        }
        return templates.TemplateResponse(request, "index.html", context)

    @app.post("/submit", name="submit")
    def submit(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        age: str = Form(""),
        occupation: str = Form(""),
    ):
        state = _state_from_session(request.session)
        for field_name, value in (("name", name), ("email", email), ("age", age), ("occupation", occupation)):
            state = edit_field(state, field_name, value)
        state = controller.submit(state)
        return _save_and_redirect(request, state)

    @app.post("/edit/{user_id}", name="edit")
    def edit(request: Request, user_id: str):
        state = controller.mount(_state_from_session(request.session))
        record = find_record(state, user_id)
        if record is None:
            logger.info("Edit requested for unknown user %s", user_id)
            state = request_failed(state, "User not found")
        else:
            state = start_edit(state, record)
        return _save_and_redirect(request, state)

    @app.post("/cancel", name="cancel")
    def cancel_edit(request: Request):
        return _save_and_redirect(request, cancel(_state_from_session(request.session)))

    @app.post("/delete/dismiss", name="dismiss_delete")
    def dismiss(request: Request):
        return _save_and_redirect(request, dismiss_delete(_state_from_session(request.session)))

    @app.post("/delete/{user_id}", name="request_delete")
    def ask_delete(request: Request, user_id: str):
        return _save_and_redirect(request, request_delete(_state_from_session(request.session), user_id))

    @app.post("/delete/{user_id}/confirm", name="confirm_delete")
    def confirm_delete(request: Request, user_id: str):
        state = _state_from_session(request.session)
        if state.pending_delete != user_id:
            return _save_and_redirect(request, dismiss_delete(state))
        return _save_and_redirect(request, controller.confirm_delete(state))

    return app


__all__ = ["create_app"]
