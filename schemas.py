from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BookCreate(BaseModel):
    name: str = Field(default="", max_length=100)
    author: str = Field(default="", max_length=100)
    publication: str = Field(default="", max_length=100)


# None and "" both mean "leave this field alone"
class BookUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    author: str | None = Field(default=None, max_length=100)
    publication: str | None = Field(default=None, max_length=100)


class BookOut(BaseModel):
    id: int
    name: str
    author: str
    publication: str
    created_at: datetime | None
    updated_at: datetime | None
    deleted_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
