# src/Loreweaver/commands/player.py
from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import PlayerRecord
from Loreweaver.validation import LongText, Name


class CreatePlayerOpts(Option):
    campaign_id: str
    name: Name
    preferences: LongText | None = None
    boundaries: LongText | None = None


class UpdatePlayerOpts(Option):
    id: str
    name: Name | None = None
    preferences: LongText | None = None
    boundaries: LongText | None = None
    notes: LongText | None = None


register_crud(
    kind="player",
    plural="players",
    model=models.Player,
    record=PlayerRecord,
    create_model=CreatePlayerOpts,
    update_model=UpdatePlayerOpts,
)
