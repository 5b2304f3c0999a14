from pydantic import Field
from typing import Optional

from app.schemas.common import CamelModel


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    bio: Optional[str] = Field(None, max_length=1000)
    section: Optional[str] = Field(None, min_length=1, max_length=100)
    avatar_url: Optional[str] = None
