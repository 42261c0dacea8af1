from pydantic import BaseModel
from typing import Optional


class VenueResponse(BaseModel):
    id: str
    slug: str
    name: Optional[str] = None

    class Config:
        from_attributes = True
