# src/Loreweaver/commanding.py
from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from structlog.contextvars import bound_contextvars

from Loreweaver import repos
from Loreweaver.db import Base, session_scope
from Loreweaver.errors import InternalError, ValidationError
from Loreweaver.metrics import inc_counter

log = structlog.get_logger()


# --- Option models for input validation & help text ---
class Option(BaseModel):
    """Base for command options; extend per command."""

    model_config = ConfigDict(extra="forbid")


class IdOpts(Option):
    id: str


class CampaignOpts(Option):
    campaign_id: str


# --- Command descriptor ---
@dataclass
class Command:
    name: str
    description: str
    option_model: type[Option]
    handler: Callable[[Any], Awaitable[Any]]
    metadata: dict[str, Any] = field(default_factory=dict)


# --- Global registry (populated by decorator) ---
_REGISTRY: dict[str, Command] = {}
_loaded = False


def command(
    name: str,
    description: str,
    option_model: type[Option] = Option,
    **metadata: Any,
):
    def wrap(func: Callable[[Any], Awaitable[Any]]):
        _REGISTRY[name] = Command(name, description, option_model, func, metadata)
        return func

    return wrap


def all_commands() -> dict[str, Command]:
    return dict(_REGISTRY)


def find_command(name: str) -> Command | None:
    return _REGISTRY.get(name)


def ensure_commands_loaded() -> None:
    """Import every command module once, whatever was imported before."""
    global _loaded
    if _loaded:
        return
    from Loreweaver.command_loader import load_all_commands

    load_all_commands()
    _loaded = True


async def invoke(name: str, payload: Mapping[str, Any] | None = None) -> Any:
    """Validate ``payload`` against the command's options and run its handler.

    Validation failures surface as ValidationError before any storage access.
    """
    ensure_commands_loaded()
    cmd = find_command(name)
    if cmd is None:
        raise InternalError(f"unknown command {name!r}")
    try:
        opts = cmd.option_model.model_validate(dict(payload or {}))
    except PydanticValidationError as exc:
        inc_counter("command.validation_failed")
        raise ValidationError.from_pydantic(exc) from exc
    inc_counter(f"command.{name}")
    with bound_contextvars(command=name):
        return await cmd.handler(opts)


# --- Uniform per-kind CRUD commands ---
def register_crud(
    *,
    kind: str,
    plural: str,
    model: type[Base],
    record: type[BaseModel],
    create_model: type[Option],
    update_model: type[Option] | None = None,
    campaign_scoped: bool = True,
) -> None:
    """Register create/get/list/update/delete commands for one entity kind.

    Unset (None) create fields fall back to the column defaults; unset update
    fields leave stored values untouched.
    """
    label = kind.replace("_", " ")

    async def create(opts: Option):
        fields = {k: v for k, v in opts.model_dump().items() if v is not None}
        async with session_scope() as s:
            obj = await repos.create_entity(s, model, **fields)
            return record.model_validate(obj)

    async def get(opts: IdOpts):
        async with session_scope() as s:
            return record.model_validate(await repos.get_entity(s, model, opts.id))

    async def list_(opts: Option):
        campaign_id = getattr(opts, "campaign_id", None)
        async with session_scope() as s:
            rows = await repos.list_entities(s, model, campaign_id)
            return [record.model_validate(r) for r in rows]

    async def update(opts: Option):
        entity_id = opts.id  # type: ignore[attr-defined]
        changes = opts.model_dump(exclude={"id"})
        async with session_scope() as s:
            obj = await repos.update_entity(s, model, entity_id, **changes)
            return record.model_validate(obj)

    async def delete(opts: IdOpts):
        async with session_scope() as s:
            return await repos.delete_entity(s, model, opts.id)

    command(f"create_{kind}", f"Create a {label}.", create_model)(create)
    command(f"get_{kind}", f"Fetch one {label} by id.", IdOpts)(get)
    command(
        f"list_{plural}",
        f"List {label} records.",
        CampaignOpts if campaign_scoped else Option,
    )(list_)
    if update_model is not None:
        command(f"update_{kind}", f"Update a {label}; omitted fields are kept.", update_model)(
            update
        )
    command(f"delete_{kind}", f"Delete a {label}; false if it did not exist.", IdOpts)(delete)
