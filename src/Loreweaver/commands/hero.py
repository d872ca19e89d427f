# src/Loreweaver/commands/hero.py
from pydantic import Field

from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import HeroRecord
from Loreweaver.validation import LongText, Name, ShortText


class CreateHeroOpts(Option):
    campaign_id: str
    name: Name
    player_id: str | None = Field(default=None, description="Controlling player")
    lineage: ShortText | None = None
    classes: ShortText | None = None
    description: LongText | None = None


class UpdateHeroOpts(Option):
    id: str
    name: Name | None = None
    player_id: str | None = None
    lineage: ShortText | None = None
    classes: ShortText | None = None
    description: LongText | None = None
    backstory: LongText | None = None
    goals: LongText | None = None
    bonds: LongText | None = None
    is_active: bool | None = None


register_crud(
    kind="hero",
    plural="heroes",
    model=models.Hero,
    record=HeroRecord,
    create_model=CreateHeroOpts,
    update_model=UpdateHeroOpts,
)
