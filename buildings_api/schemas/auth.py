from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CurrentUser(BaseModel):
    """The editor a verified access token was issued to."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias="sub")
    email: Optional[str] = None
    role: Optional[str] = None
