# src/Loreweaver/commands/session.py
import datetime as dt

from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import SessionRecord
from Loreweaver.validation import LongText, Name


class CreateSessionOpts(Option):
    campaign_id: str
    session_number: int
    title: Name | None = None
    date: dt.date | None = None


class UpdateSessionOpts(Option):
    id: str
    session_number: int | None = None
    title: Name | None = None
    date: dt.date | None = None
    planned_content: LongText | None = None
    notes: LongText | None = None
    summary: LongText | None = None
    highlights: LongText | None = None


register_crud(
    kind="session",
    plural="sessions",
    model=models.Session,
    record=SessionRecord,
    create_model=CreateSessionOpts,
    update_model=UpdateSessionOpts,
)
