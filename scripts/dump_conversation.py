#!/usr/bin/env python3
"""Dump stored AI assistant conversations for debugging.

Examples:
  PYTHONPATH=./src python scripts/dump_conversation.py --db ./loreweaver.sqlite3 --last
  LOREWEAVER_DB=./dev.db PYTHONPATH=./src python scripts/dump_conversation.py --summary
"""
from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click

from Loreweaver import db, models, repos

RULE = "=" * 79
THIN_RULE = "-" * 79
CONTENT_PREVIEW = 500
TOOL_DATA_PREVIEW = 200


def _pretty_json(raw: str) -> str | None:
    try:
        return json.dumps(json.loads(raw), indent=2)
    except ValueError:
        return None


def _preview(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def format_conversation(
    conv: models.AiConversation, messages: list[models.AiMessage], *, summary: bool = False
) -> list[str]:
    lines = [
        RULE,
        f"Conversation: {conv.context_type.upper()} ({conv.id})",
        f"   Campaign: {conv.campaign_id}",
        f"   Tokens: {conv.total_input_tokens} in / {conv.total_output_tokens} out / "
        f"{conv.total_cache_read_tokens} cache read / "
        f"{conv.total_cache_creation_tokens} cache create",
        f"   Updated: {conv.updated_at}",
        THIN_RULE,
    ]
    if not messages:
        lines.append("   (no messages)")
        return lines

    for msg in messages:
        lines.append("")
        lines.append(f"[{msg.message_order}] {msg.role.upper()}")
        if msg.tool_name:
            lines.append(f"   Tool: {msg.tool_name}")
        if summary:
            lines.append(f"   Content: ({len(msg.content)} chars)")
            continue
        lines.append(f"   Content: {_preview(msg.content, CONTENT_PREVIEW)}")
        if msg.tool_input_json and (pretty := _pretty_json(msg.tool_input_json)):
            lines.append(f"   Tool Input: {pretty}")
        if msg.tool_data_json:
            lines.append(f"   Tool Data: {_preview(msg.tool_data_json, TOOL_DATA_PREVIEW)}")
        if msg.proposal_json and (pretty := _pretty_json(msg.proposal_json)):
            lines.append(f"   Proposal: {pretty}")
    return lines


async def dump(context: str | None, last: bool, summary: bool) -> list[str]:
    out: list[str] = []
    async with db.session_scope() as s:
        conversations = await repos.list_ai_conversations(s, context)
        if last:
            conversations = conversations[:1]
        if not conversations:
            return ["No conversations found."]
        for conv in conversations:
            messages = await repos.list_ai_messages(s, conv.id)
            out.extend(format_conversation(conv, messages, summary=summary))
            out.append("")
    return out


async def _dump_and_close(context: str | None, last: bool, summary: bool) -> list[str]:
    try:
        return await dump(context, last, summary)
    finally:
        await db.dispose_engine()


@click.command()
@click.option(
    "--db",
    "db_path",
    envvar="LOREWEAVER_DB",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the database file (or set LOREWEAVER_DB)",
)
@click.option("--context", type=click.Choice(["sidebar", "fullpage"]), default=None)
@click.option("--last", is_flag=True, help="Show only the most recently updated conversation")
@click.option("--summary", is_flag=True, help="Show message sizes instead of content")
def main(db_path: Path | None, context: str | None, last: bool, summary: bool) -> None:
    if db_path is not None:
        db.configure_engine(f"sqlite+aiosqlite:///{db_path}")
    click.echo(f"Database: {db.DATABASE_URL}\n")
    for line in asyncio.run(_dump_and_close(context, last, summary)):
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    main()
