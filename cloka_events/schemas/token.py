# cloka_events/schemas/token.py
from typing import Optional

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    sub: str  # "sub" is the standard claim for subject (user ID)
    is_admin: bool = Field(default=False, alias="isAdmin")
    exp: Optional[int] = None  # Standard claim for expiration time

    model_config = {
        "populate_by_name": True,  # Allow populating by alias
        "from_attributes": True,
    }
