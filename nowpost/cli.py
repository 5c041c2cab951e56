"""Command line interface for nowpost."""

from __future__ import annotations

import base64
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
import uvicorn
from loguru import logger

from .config import AppConfig, load_config
from .config.inspector import check_config, explain_config
from .config.utils import mask_secret
from .github import GitHubContentsClient
from .github.errors import (
    MarkerNotFoundError,
    NotLoggedInError,
    PublishError,
    TransportFailure,
)
from .publishing import CredentialVerifier, PostDraft, PostPipeline
from .session import SessionContext, create_store
from .web import create_app

DEFAULT_CONFIG_PATH = Path("nowpost.toml")

_log_sink: dict[str, int | None] = {"id": None}


@dataclass(slots=True)
class Services:
    """Wired collaborators for one CLI invocation."""

    client: GitHubContentsClient
    verifier: CredentialVerifier
    session: SessionContext
    pipeline: PostPipeline


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    explicit_config: bool = True
    _config: AppConfig | None = None
    _services: Services | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            if not self.explicit_config and not self.config_path.exists():
                logger.warning("No configuration at {}; using defaults", self.config_path)
                self._config = AppConfig()
            else:
                logger.info("Loading configuration from {}", self.config_path)
                self._config = load_config(AppConfig, self.config_path)
            _apply_log_level(self._config.logging_level)
        return self._config

    def ensure_services(self) -> Services:
        if self._services is None:
            self._services = build_services(self.ensure_config())
        return self._services


def build_services(config: AppConfig) -> Services:
    client = GitHubContentsClient(config.repository)
    verifier = CredentialVerifier(client)
    session = SessionContext.from_config(config.session, create_store(config.session), verifier)
    session.load()
    return Services(
        client=client,
        verifier=verifier,
        session=session,
        pipeline=PostPipeline.from_config(config, client),
    )


app = typer.Typer(help="Publish photo updates to a Now page")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - defensive guard
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def _apply_log_level(level: str) -> None:
    """Re-add the CLI-owned stderr sink at ``level`` (only when running via :func:`run`)."""
    sink_id = _log_sink["id"]
    if sink_id is None:
        return
    logger.remove(sink_id)
    _log_sink["id"] = logger.add(sys.stderr, level=level)


def _load_config_or_exit(state: CLIState) -> AppConfig:
    try:
        return state.ensure_config()
    except FileNotFoundError as exc:
        logger.error("{}", exc)
        _exit(2)
    except ValueError as exc:
        logger.error("Invalid configuration: {}", exc)
        _exit(3)


def _services_or_exit(state: CLIState) -> Services:
    _load_config_or_exit(state)
    return state.ensure_services()


def _exit_code_for(exc: PublishError) -> int:
    return 2 if isinstance(exc, TransportFailure) else 1


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        envvar="NOWPOST_CONFIG",
        help=f"Path to the TOML configuration file (default: ./{DEFAULT_CONFIG_PATH})",
    ),
) -> None:
    """Initialise CLI state."""

    if config is None:
        state = CLIState(config_path=DEFAULT_CONFIG_PATH.resolve(), explicit_config=False)
    else:
        state = CLIState(config_path=config.resolve())
    ctx.obj = state

    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'login' or 'post --image PHOTO --caption TEXT'.")
        _exit(0)


@app.command(help="Show configuration and session status")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    services = _services_or_exit(state)
    _report_status(state.ensure_config(), services)


@app.command(help="Verify a GitHub token and store it for later posts")
def login(
    ctx: typer.Context,
    token: str | None = typer.Option(
        None,
        help="Token to store; prompted for (hidden) when omitted",
    ),
) -> None:
    services = _services_or_exit(_get_state(ctx))
    if token is None:
        token = typer.prompt("GitHub token", hide_input=True)

    try:
        services.session.login(token)
    except ValueError as exc:
        logger.error("{}", exc)
        _exit(1)
    except PublishError as exc:
        logger.error("Login failed: {}", exc)
        _exit(_exit_code_for(exc))

    logger.success("Token verified and stored")


@app.command(help="Forget the stored token")
def logout(ctx: typer.Context) -> None:
    services = _services_or_exit(_get_state(ctx))
    services.session.logout()


@app.command(help="Check whether a token can access the repository")
def verify(
    ctx: typer.Context,
    token: str | None = typer.Option(None, help="Token to check (defaults to the stored one)"),
) -> None:
    services = _services_or_exit(_get_state(ctx))
    candidate = token.strip() if token else services.session.credential
    if not candidate:
        logger.error("No token given and none stored")
        _exit(1)

    repository = services.client.config.full_name
    try:
        valid = services.verifier.verify(candidate)
    except TransportFailure as exc:
        logger.error("Could not verify token: {}", exc)
        _exit(2)

    if not valid:
        logger.error("Token {} has no access to {}", mask_secret(candidate), repository)
        _exit(1)
    logger.info("Token {} can access {}", mask_secret(candidate), repository)


@app.command(help="Publish a photo with a caption to the Now page")
def post(
    ctx: typer.Context,
    image: Path = typer.Option(..., "--image", exists=True, dir_okay=False, help="JPEG file to publish"),
    caption: str = typer.Option(..., "--caption", help="Caption text for the entry"),
    dry_run: bool = typer.Option(
        False,
        help="Print the entry that would be inserted without contacting the repository",
    ),
) -> None:
    services = _services_or_exit(_get_state(ctx))
    draft = PostDraft(
        image_base64=base64.b64encode(image.read_bytes()).decode("ascii"),
        caption=caption,
        source=str(image),
    )

    try:
        if dry_run:
            cleaned, filename, date = services.pipeline.prepare(draft)
            fragment = services.pipeline.documents.render_entry(filename, cleaned.caption, date)
            logger.info("[Dry Run] Would upload {}", services.pipeline.images.image_path(filename))
            print(fragment, end="")
            return

        credential = services.session.require_credential()
        result = services.pipeline.post(credential, draft)
    except NotLoggedInError as exc:
        logger.error("{}", exc)
        _exit(1)
    except MarkerNotFoundError as exc:
        logger.error("Image uploaded but the entry was not added: {}", exc)
        _exit(1)
    except PublishError as exc:
        logger.error("Post failed: {}", exc)
        _exit(_exit_code_for(exc))

    if not result.inserted:
        logger.warning("No 'Update:' entry found; {} was committed unchanged", result.document.path)
    logger.success("Posted to your Now page! ({})", result.filename)


@app.command(help="Run the posting console")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Host to bind the console to"),
    port: int = typer.Option(8000, help="Port to bind the console to"),
) -> None:
    state = _get_state(ctx)
    services = _services_or_exit(state)
    config = state.ensure_config()

    try:
        web_app = create_app(services.session, services.pipeline, config)
    except EnvironmentError as exc:
        logger.error("Invalid configuration: 'web.auth.token' cannot be resolved: {}", exc)
        _exit(3)
    logger.info("Starting posting console on {}:{}", host, port)
    uvicorn.run(web_app, host=host, port=port, log_level=config.logging_level.lower())


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {}", result["config_path"])
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            location = detail["loc"] or "<root>"
            logger.error("  - {}: {} ({})", location, detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()
    if format == "json":
        print(json.dumps(fields, indent=2, ensure_ascii=False, default=str))
        return

    logger.info("Configuration schema ({} fields)", len(fields))
    for field in fields:
        required = "required" if field["required"] else f"default={field['default']!r}"
        logger.info("  {} : {} [{}] {}", field["name"], field["type"], required, field["description"])


def _report_status(config: AppConfig, services: Services) -> None:
    """Log configuration and session state."""
    logger.info("=== Repository ===")
    logger.info("Repository: {}", config.repository.full_name)
    logger.info("API: {}", config.repository.api_base_url)
    logger.info("Branch: {}", config.repository.branch or "<default>")

    logger.info("=== Publishing ===")
    logger.info("Images: {}/", config.publishing.content_dir)
    logger.info("Document: {}", config.publishing.document_path)
    logger.info("Require marker: {}", config.publishing.require_marker)

    logger.info("=== Session ===")
    logger.info("Store: {}", config.session.store)
    logger.info("Logged in: {}", services.session.logged_in)
    if services.session.credential:
        logger.info("Token: {}", mask_secret(services.session.credential))

    logger.info("=== Console ===")
    if config.web:
        logger.info("Enabled: {}, auth: {}", config.web.enabled, bool(config.web.auth and config.web.auth.enabled))
    else:
        logger.info("Not configured")


def main(argv: list[str] | None = None) -> int:
    """Run the Typer app and return its exit code."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    except typer.Abort:
        return 1
    if isinstance(result, int):
        return result
    return 0


def run() -> None:
    """Console script entry point; owns the stderr log sink."""

    logger.remove()
    _log_sink["id"] = logger.add(sys.stderr, level="INFO")
    raise SystemExit(main())


if __name__ == "__main__":
    run()
