"""Client data model."""

from typing import Literal, Optional

from pydantic import Field, field_validator

from timebill.models.base import BaseDataModel, strip_not_empty

ClientStatus = Literal["active", "completed", "prospect"]


class Client(BaseDataModel):
    """A client billed by a workspace.

    Attributes:
        id: Client identifier
        workspace_id: Owning workspace
        name: Client display name
        email: Contact email
        phone: Contact phone
        address: Postal address, used in the invoice "Bill To" block
        status: One of active, completed, prospect
    """

    id: Optional[str] = None
    workspace_id: Optional[str] = None
    name: str = Field(..., min_length=1, description="Client name")
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: ClientStatus = "active"

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        return strip_not_empty(v, info.field_name)
