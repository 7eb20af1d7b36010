"""Property and room type models, loaded from the room catalog file."""

import json
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from utils.exceptions import RoomNotFoundError, ValidationError


class RoomType(BaseModel):
    """Bookable room type with its occupancy caps."""

    id: str
    display_name: str
    max_occupancy: int = Field(..., ge=1)
    max_adults: int = Field(..., ge=1)
    max_children: int = Field(default=0, ge=0)
    base_rate: float = Field(..., ge=0, description="Default nightly rate")
    description: Optional[str] = None
    bed_configuration: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "0b7c5e0e-2d4f-4a53-8d0b-2c1f8a3b9d11",
                "display_name": "Deluxe Ocean View",
                "max_occupancy": 3,
                "max_adults": 2,
                "max_children": 1,
                "base_rate": 5000,
            }
        }
    }


class Property(BaseModel):
    """A business unit (hotel / resort) and the room types it sells."""

    id: str
    display_name: str
    slug: str
    location: str = ""
    description: Optional[str] = None
    primary_currency: str = "PHP"
    check_in_time: str = "3:00 PM"
    check_out_time: str = "12:00 PM"
    cancellation_hours: int = 24
    room_types: List[RoomType] = Field(default_factory=list)

    def get_room_type(self, room_type_id: str) -> RoomType:
        """Get room type by ID."""
        for room_type in self.room_types:
            if room_type.id == room_type_id:
                return room_type
        raise RoomNotFoundError(
            f"Room type {room_type_id} not found for property {self.slug}"
        )


class RoomCatalog(BaseModel):
    """All properties the bot can take bookings for."""

    properties: List[Property] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_slugs(self) -> "RoomCatalog":
        slugs = [prop.slug for prop in self.properties]
        if len(slugs) != len(set(slugs)):
            raise ValueError("Property slugs must be unique")
        return self

    def get_property(self, slug: str) -> Property:
        """Get property by slug."""
        for prop in self.properties:
            if prop.slug == slug:
                return prop
        raise RoomNotFoundError(f"Property {slug} not found")


def load_room_catalog(path: Union[str, Path]) -> RoomCatalog:
    """
    Load the property catalog from a JSON file.

    Raises:
        ValidationError: If the file is missing or does not match the schema
    """
    catalog_path = Path(path)
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ValidationError(f"Room catalog not found: {catalog_path}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Room catalog is not valid JSON: {e}") from e

    try:
        return RoomCatalog.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid room catalog: {e}") from e
