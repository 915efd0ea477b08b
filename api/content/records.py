"""
Typed item records.

Items are stored as free-form JSON (`items.data`). This module is the one place
where that JSON is turned into a `LocationRecord` or an `EventRecord`; code
past this point only sees the typed models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.errors import ContentError

LOCATION = "location"
EVENT = "event"
RECORD_TYPES = (LOCATION, EVENT)


class ProjectionError(ContentError):
    pass


class UnknownRecordType(ProjectionError):
    status_code = 400

    def __init__(self, record_type: Any) -> None:
        super().__init__(f'Item of type "{record_type}" is not supported for content generation')
        self.record_type = record_type


class InvalidRecord(ProjectionError):
    status_code = 422


def parse_coordinates(s: str) -> list[float]:
    """
    Parse "latitude,longitude" into [latitude, longitude].
    """
    tokens = s.split(",")
    if len(tokens) < 2:
        raise ValueError("Must provide two numbers separated by comma as coordinates")
    return [float(tokens[0]), float(tokens[1])]


def parse_tags(s: str) -> list[str]:
    return s.split(",")


class _RecordBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: int = 0
    title: str = ""
    description: str = ""
    address: str = ""
    coordinates: list[float] = Field(default_factory=list)
    phone: str = ""
    website_url: str = Field(default="", alias="websiteURL")
    cover_image_url: str = Field(default="", alias="coverImageURL")
    image_urls: list[str] = Field(default_factory=list, alias="imageURLs")
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("coordinates", mode="before")
    @classmethod
    def _coordinates_from_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_coordinates(value)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_from_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_tags(value)
        return value

    @field_validator("image_urls", mode="before")
    @classmethod
    def _none_images(cls, value: Any) -> Any:
        return [] if value is None else value


class LocationRecord(_RecordBase):
    type: Literal["location"] = LOCATION
    # Either seven newline-separated day lines or {"Monday": "9-17", ...}.
    opening_hours: str | dict[str, str] | None = Field(default=None, alias="openingHours")


class EventRecord(_RecordBase):
    type: Literal["event"] = EVENT


Record = Union[LocationRecord, EventRecord]

_RECORD_MODELS: dict[str, type[_RecordBase]] = {
    LOCATION: LocationRecord,
    EVENT: EventRecord,
}


def record_type_of(data: dict[str, Any]) -> str:
    record_type = data.get("type")
    if not isinstance(record_type, str) or record_type not in _RECORD_MODELS:
        raise UnknownRecordType(record_type)
    return record_type


def record_from_data(data: dict[str, Any], **overrides: Any) -> Record:
    """
    Validate item JSON into the record variant named by its "type" field.
    """
    model = _RECORD_MODELS[record_type_of(data)]
    try:
        return model.model_validate({**data, **overrides})
    except ValidationError as e:
        raise InvalidRecord(f"Invalid {data.get('type')} data: {e}") from e


def record_from_item(item: dict[str, Any]) -> Record:
    """
    Build a record from an `items` row: {"id", "data", "created_at", "updated_at"}.
    """
    return record_from_data(
        item.get("data") or {},
        id=int(item["id"]),
        created_at=item.get("created_at"),
        updated_at=item.get("updated_at"),
    )
