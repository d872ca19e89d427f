# src/Loreweaver/commands/character.py
from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import CharacterRecord
from Loreweaver.validation import LongText, Name, ShortText


class CreateCharacterOpts(Option):
    campaign_id: str
    name: Name
    lineage: ShortText | None = None
    occupation: ShortText | None = None
    description: LongText | None = None


class UpdateCharacterOpts(Option):
    id: str
    name: Name | None = None
    lineage: ShortText | None = None
    occupation: ShortText | None = None
    is_alive: bool | None = None
    description: LongText | None = None
    personality: LongText | None = None
    motivations: LongText | None = None
    secrets: LongText | None = None
    voice_notes: LongText | None = None
    stat_block_json: LongText | None = None


register_crud(
    kind="character",
    plural="characters",
    model=models.Character,
    record=CharacterRecord,
    create_model=CreateCharacterOpts,
    update_model=UpdateCharacterOpts,
)
