#!/usr/bin/env python3
"""
Dynamic CLI that discovers Loreweaver commands and runs the same handlers.

Examples:
  PYTHONPATH=./src python scripts/cli.py create-campaign --name "Shattered Isles"
  PYTHONPATH=./src python scripts/cli.py search-entities --campaign-id <id> --query "gandalf grey"
  PYTHONPATH=./src python scripts/cli.py --db sqlite:///./dev.db list-campaigns

Each sub-command is generated from the command's option model; results are
printed as JSON.
"""
from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from types import UnionType
from typing import Any, Union, get_args, get_origin

import click
import structlog
from pydantic_core import to_json

from Loreweaver import db
from Loreweaver.commanding import all_commands, ensure_commands_loaded, invoke
from Loreweaver.config import load_settings
from Loreweaver.errors import LoreweaverError
from Loreweaver.logging import redact_settings, setup_logging
from Loreweaver.migrate import run_migrations

log = structlog.get_logger()


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _click_type_for(annotation: Any):
    annotation = _strip_optional(annotation)
    # Annotated[str, ...] validators run in pydantic; click only needs the base type
    if get_origin(annotation) is not None and hasattr(annotation, "__metadata__"):
        annotation = get_args(annotation)[0]
    if annotation in (str, int, float):
        return annotation
    if inspect.isclass(annotation) and issubclass(annotation, Enum):
        return click.Choice([e.value for e in annotation], case_sensitive=False)
    return str


def _params_from_model(option_model: type) -> list[click.Parameter]:
    params: list[click.Parameter] = []
    for name, field in option_model.model_fields.items():
        flag_key = name.replace("_", "-")
        ann = _strip_optional(field.annotation)
        required = field.is_required()
        default = None if required else field.default
        help_text = field.description or ""

        if ann is bool:
            params.append(
                click.Option(
                    [f"--{flag_key}/--no-{flag_key}"],
                    default=default,
                    help=help_text,
                )
            )
            continue

        if get_origin(ann) is list:
            (item,) = get_args(ann) or (str,)
            params.append(
                click.Option(
                    [f"--{flag_key}"],
                    type=_click_type_for(item),
                    multiple=True,
                    help=(help_text + " (repeatable)").strip(),
                )
            )
            continue

        params.append(
            click.Option(
                [f"--{flag_key}"],
                type=_click_type_for(ann),
                required=required,
                default=default,
                show_default=default is not None,
                help=help_text,
            )
        )
    return params


def _make_click_command(name: str, description: str, option_model: type) -> click.Command:
    params = _params_from_model(option_model)

    def _callback(**kwargs: Any):
        payload = {k: (list(v) if isinstance(v, tuple) else v) for k, v in kwargs.items()}
        payload = {k: v for k, v in payload.items() if v is not None and v != []}
        async def _run():
            try:
                return await invoke(name, payload)
            finally:
                await db.dispose_engine()

        try:
            result = asyncio.run(_run())
        except LoreweaverError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(to_json(result, indent=2).decode())

    return click.Command(
        name=name.replace("_", "-"), params=params, callback=_callback, help=description
    )


def build_app() -> click.Group:
    ensure_commands_loaded()

    @click.group()
    @click.option("--db", "db_url", default=None, help="Database URL (defaults to settings)")
    @click.option("--migrate/--no-migrate", default=True, help="Apply migrations first")
    def app(db_url: str | None, migrate: bool) -> None:
        settings = load_settings()
        setup_logging(settings)
        log.info("cli.startup", config=redact_settings(settings))
        if db_url:
            db.configure_engine(db_url)
        if migrate and ":memory:" not in db.DATABASE_URL:
            run_migrations(db.DATABASE_URL)

    for cmd in sorted(all_commands().values(), key=lambda c: c.name):
        app.add_command(_make_click_command(cmd.name, cmd.description, cmd.option_model))
    return app


def main() -> None:  # pragma: no cover
    app = build_app()
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
