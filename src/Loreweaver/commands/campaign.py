# src/Loreweaver/commands/campaign.py
from pydantic import Field

from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import CampaignRecord
from Loreweaver.validation import LongText, Name, ShortText


class CreateCampaignOpts(Option):
    name: Name = Field(description="Campaign name")
    description: LongText | None = None
    system: ShortText | None = Field(default=None, description="Game system, e.g. 5e")


class UpdateCampaignOpts(Option):
    id: str
    name: Name | None = None
    description: LongText | None = None
    system: ShortText | None = None
    settings_json: LongText | None = Field(
        default=None, description="Opaque JSON settings blob owned by the UI"
    )


register_crud(
    kind="campaign",
    plural="campaigns",
    model=models.Campaign,
    record=CampaignRecord,
    create_model=CreateCampaignOpts,
    update_model=UpdateCampaignOpts,
    campaign_scoped=False,
)
