# src/Loreweaver/commands/quest.py
from pydantic import Field

from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import QuestRecord
from Loreweaver.validation import LongText, Name, PlotType, QuestStatus


class CreateQuestOpts(Option):
    campaign_id: str
    name: Name
    plot_type: PlotType = Field(default="side")
    description: LongText | None = None
    hook: LongText | None = None


class UpdateQuestOpts(Option):
    id: str
    name: Name | None = None
    status: QuestStatus | None = None
    plot_type: PlotType | None = None
    description: LongText | None = None
    hook: LongText | None = None
    objectives: LongText | None = None
    complications: LongText | None = None
    resolution: LongText | None = None
    reward: LongText | None = None


register_crud(
    kind="quest",
    plural="quests",
    model=models.Quest,
    record=QuestRecord,
    create_model=CreateQuestOpts,
    update_model=UpdateQuestOpts,
)
