from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class ShortLinkInput(BaseModel):
    long_link: Optional[str] = None
    custom_alias: Optional[str] = None
    expire_at: Optional[datetime] = None

    def get_long_link(self, default: str) -> str:
        return self.long_link if self.long_link is not None else default

    def get_custom_alias(self, default: str) -> str:
        return self.custom_alias if self.custom_alias is not None else default

class ShortLink(BaseModel):
    long_link: str
    alias: str
    created_at: Optional[datetime] = None
    expire_at: Optional[datetime] = None

class User(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None

class ShortLinkCreate(BaseModel):
    long_link: str
    custom_alias: Optional[str] = None
    expire_at: Optional[datetime] = None
    is_public: bool = Field(False, description="Reserved; public links are not supported yet")

class ShortLinkResponse(BaseModel):
    alias: str
    short_link: str
    long_link: str
    created_at: datetime
    expire_at: Optional[datetime]
