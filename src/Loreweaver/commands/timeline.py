# src/Loreweaver/commands/timeline.py
from pydantic import Field

from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import TimelineEventRecord
from Loreweaver.validation import LongText, Name, ShortText


class CreateTimelineEventOpts(Option):
    campaign_id: str
    title: Name
    date_display: Name = Field(description="In-world date as shown, e.g. 'Year 1042, Spring'")
    sort_order: int | None = Field(default=None, description="Chronological position")
    description: LongText | None = None
    significance: ShortText | None = None


class UpdateTimelineEventOpts(Option):
    id: str
    title: Name | None = None
    date_display: Name | None = None
    sort_order: int | None = None
    description: LongText | None = None
    significance: ShortText | None = None
    is_public: bool | None = None


register_crud(
    kind="timeline_event",
    plural="timeline_events",
    model=models.TimelineEvent,
    record=TimelineEventRecord,
    create_model=CreateTimelineEventOpts,
    update_model=UpdateTimelineEventOpts,
)
