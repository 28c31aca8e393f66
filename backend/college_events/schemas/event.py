from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EventFields(BaseModel):
    """Text fields of a multipart create/update request. Any of them may be absent."""

    title: str | None = None
    type: str | None = None
    description: str | None = None
    date: str | None = None
    location: str | None = None


class EventResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    type: str
    description: str
    date: str
    location: str | None
    image_url: str | None
    created_by: str
    created_at: str
    updated_at: str


class MessageResponse(BaseModel):
    message: str
