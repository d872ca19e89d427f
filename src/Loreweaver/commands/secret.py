# src/Loreweaver/commands/secret.py
from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import SecretRecord
from Loreweaver.validation import EntityType, LongText, Name


class CreateSecretOpts(Option):
    campaign_id: str
    title: Name
    content: LongText
    related_entity_type: EntityType | None = None
    related_entity_id: str | None = None


class UpdateSecretOpts(Option):
    id: str
    title: Name | None = None
    content: LongText | None = None
    related_entity_type: EntityType | None = None
    related_entity_id: str | None = None
    known_by: LongText | None = None
    revealed: bool | None = None
    revealed_in_session: int | None = None


register_crud(
    kind="secret",
    plural="secrets",
    model=models.Secret,
    record=SecretRecord,
    create_model=CreateSecretOpts,
    update_model=UpdateSecretOpts,
)
