# src/Loreweaver/commands/organization.py
from pydantic import Field

from Loreweaver import models
from Loreweaver.commanding import Option, register_crud
from Loreweaver.schemas import OrganizationRecord
from Loreweaver.validation import LongText, Name, OrgType


class CreateOrganizationOpts(Option):
    campaign_id: str
    name: Name
    org_type: OrgType = Field(default="other")
    description: LongText | None = None
    goals: LongText | None = None
    resources: LongText | None = None


class UpdateOrganizationOpts(Option):
    id: str
    name: Name | None = None
    org_type: OrgType | None = None
    description: LongText | None = None
    goals: LongText | None = None
    resources: LongText | None = None
    reputation: LongText | None = None
    secrets: LongText | None = None
    is_active: bool | None = None


register_crud(
    kind="organization",
    plural="organizations",
    model=models.Organization,
    record=OrganizationRecord,
    create_model=CreateOrganizationOpts,
    update_model=UpdateOrganizationOpts,
)
