"""FastAPI application factory and routing definitions."""

from __future__ import annotations

import secrets
from pathlib import Path
from typing import Any, Callable

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger
from pydantic import BaseModel, Field

from nowpost import __version__
from nowpost.config.app import AppConfig
from nowpost.config.web import WebAuthConfig
from nowpost.github.errors import (
    CredentialInvalid,
    DraftError,
    NotLoggedInError,
    PostInProgressError,
    PublishError,
    TransportFailure,
)
from nowpost.publishing.pipeline import PostDraft, PostPipeline
from nowpost.session.context import SessionContext


class LoginRequest(BaseModel):
    token: str


class PostRequest(BaseModel):
    image_base64: str | None = Field(None, description="Base64 image payload without a data: prefix")
    caption: str = ""
    source: str | None = None


def create_app(session: SessionContext, pipeline: PostPipeline, config: AppConfig | None = None) -> FastAPI:
    """Creates the posting API, with the HTML console when enabled."""
    web_config = config.web if config and config.web else None
    auth_config = web_config.auth if web_config and web_config.auth else None
    auth_dependency = _build_auth_dependency(auth_config)
    max_image_bytes = web_config.max_image_bytes if web_config else None

    app = FastAPI(
        title="nowpost API",
        description="Publish photo updates to a Now page.",
        version=__version__,
    )

    templates = Jinja2Templates(directory=str(_templates_dir()))

    @app.get("/health", summary="Health Check", tags=["Monitoring"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/session", summary="Session state", tags=["Session"])
    async def session_state(_: None = Depends(auth_dependency)) -> dict[str, bool]:
        return {"logged_in": session.logged_in}

    @app.post("/session", summary="Verify and store an access token", tags=["Session"])
    def login(body: LoginRequest, _: None = Depends(auth_dependency)) -> dict[str, bool]:
        try:
            session.login(body.token)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        except CredentialInvalid as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
        except TransportFailure as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
        return {"logged_in": True}

    @app.delete("/session", summary="Forget the stored token", tags=["Session"])
    def logout(_: None = Depends(auth_dependency)) -> dict[str, bool]:
        session.logout()
        return {"logged_in": False}

    @app.post(
        "/posts",
        summary="Publish a photo update",
        tags=["Posts"],
        status_code=status.HTTP_201_CREATED,
    )
    def create_post(body: PostRequest, _: None = Depends(auth_dependency)) -> dict[str, Any]:
        if max_image_bytes is not None and body.image_base64 and len(body.image_base64) > max_image_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image is too large",
            )
        draft = PostDraft(image_base64=body.image_base64, caption=body.caption, source=body.source)
        try:
            credential = session.require_credential()
            result = pipeline.post(credential, draft)
        except NotLoggedInError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
        except DraftError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        except PostInProgressError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except PublishError as exc:
            logger.warning("Post failed: {}", exc)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

        return {
            "status": "success",
            "message": "Posted to your Now page!",
            "filename": result.filename,
            "date": result.date,
            "inserted": result.inserted,
        }

    @app.get("/console", response_class=HTMLResponse, include_in_schema=False)
    async def console(request: Request) -> HTMLResponse:
        if web_config is None or not web_config.enabled:
            raise HTTPException(status_code=404, detail="Web console is disabled.")

        template_context = {
            "request": request,
            "title": web_config.title,
            "repository": config.repository.full_name if config else "",
            "auth_enabled": bool(auth_config and auth_config.enabled),
            "header_name": auth_config.header_name if auth_config else "X-Console-Token",
        }
        return templates.TemplateResponse(request, "console.html", template_context)

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        if web_config and web_config.enabled:
            return RedirectResponse(url="/console")
        raise HTTPException(status_code=404, detail="Web console is disabled.")

    return app


def _templates_dir() -> Path:
    return Path(__file__).resolve().parent / "templates"


def _build_auth_dependency(auth_config: WebAuthConfig | None) -> Callable[..., Any]:
    """Return a dependency that validates the configured console token."""

    if not auth_config or not auth_config.enabled:
        async def _no_auth() -> None:
            return None

        return _no_auth

    expected_token = auth_config.resolved_token()
    header_alias = auth_config.header_name

    async def _verify_token(
        provided_token: str | None = Header(default=None, alias=header_alias),
    ) -> None:
        if provided_token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing console token.",
            )
        if not secrets.compare_digest(provided_token, expected_token):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid console token.",
            )

    return _verify_token


__all__ = ["create_app"]
