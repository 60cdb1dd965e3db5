from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator


class GeoPoint(BaseModel):
    """GeoJSON point helper that ensures [lng, lat] ordering."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, value: List[float]) -> List[float]:
        if len(value) != 2:
            raise ValueError("GeoJSON Point coordinates must contain [lng, lat]")
        if not all(math.isfinite(v) for v in value):
            raise ValueError("GeoJSON Point coordinates must be finite numbers")
        return value


class OpeningTime(BaseModel):
    days: Optional[str] = None
    opening: Optional[str] = None
    closing: Optional[str] = None
    closed: Optional[bool] = None


class Review(BaseModel):
    author: Optional[str] = None
    rating: float = Field(0, ge=0, le=5)
    reviewText: Optional[str] = None
    createdOn: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LocationDocument(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    facilities: List[str] = []
    coords: GeoPoint
    hours: Optional[OpeningTime] = None
    openingTimes: Optional[List[OpeningTime]] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[List[Review]] = None


def _stringify(val):
    """Convert MongoDB types to JSON-serializable types."""
    if isinstance(val, ObjectId):
        return str(val)
    elif isinstance(val, datetime):
        return val.isoformat()
    return val


def serialize_doc(doc: dict) -> dict:
    """Convert Mongo ObjectIds and other types to JSON-serializable formats."""
    if not isinstance(doc, dict):
        return doc

    result = {}
    for key, value in doc.items():
        if isinstance(value, dict):
            result[key] = serialize_doc(value)
        elif isinstance(value, list):
            result[key] = [serialize_doc(item) if isinstance(item, dict) else _stringify(item) for item in value]
        else:
            result[key] = _stringify(value)
    return result


def serialize_location(doc: dict) -> dict:
    """Serialize a location document, exposing ``_id`` as ``id``."""
    result = serialize_doc(doc)
    if "_id" in result:
        result = {"id": result.pop("_id"), **result}
    return result
