"""create fts5 search index and sync triggers

Revision ID: b3f90c4e1d82
Revises: 8e2d5f1a6b47
Create Date: 2025-11-26
"""

from typing import Sequence, Union

from alembic import op

from Loreweaver.search_index import backfill_statements, create_statements, drop_statements


# revision identifiers, used by Alembic.
revision: str = "b3f90c4e1d82"
down_revision: Union[str, Sequence[str], None] = "8e2d5f1a6b47"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # FTS5 virtual tables and triggers are SQLite-only
    if op.get_bind().dialect.name != "sqlite":
        return
    for stmt in create_statements():
        op.execute(stmt)
    # Rows written before the triggers existed
    for stmt in backfill_statements():
        op.execute(stmt)


def downgrade() -> None:
    if op.get_bind().dialect.name != "sqlite":
        return
    for stmt in drop_statements():
        op.execute(stmt)
