import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection

from app.errors import error_payload, message_payload
from app.models import LocationDocument, serialize_location

logger = logging.getLogger(__name__)

MAX_DISTANCE_METERS = 20000
MAX_RESULTS = 10

# Fields rewritten by update_one; rating and reviews are never part of the $set.
UPDATE_FIELDS = {"name", "address", "facilities", "coords", "openingTimes"}

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class ServiceResult(NamedTuple):
    status_code: int
    body: Any = None


def parse_float(value: Any) -> float:
    """
    Parse the leading number of a request value.

    Numbers pass through, strings are read up to the first character that
    cannot belong to a decimal literal ("12.5km" gives 12.5). Anything without
    a numeric prefix, including None, gives NaN.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return math.nan
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else math.nan


def format_distance(meters: float) -> str:
    """Round to whole metres, halves away from zero, e.g. 1234.6 -> '1235m'."""
    rounded = Decimal(repr(float(meters))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{rounded}m"


def _point(body: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "type": "Point",
        "coordinates": [parse_float(body.get("lng")), parse_float(body.get("lat"))],
    }


def _opening_time(body: Mapping[str, Any], suffix: str) -> Dict[str, Any]:
    return {
        "days": body.get(f"days{suffix}"),
        "opening": body.get(f"opening{suffix}"),
        "closing": body.get(f"closing{suffix}"),
        "closed": body.get(f"closed{suffix}"),
    }


class LocationService:
    """
    Request handlers for the locations collection.

    Every method runs a single store call inside its own try block and turns
    the outcome into a ServiceResult, so nothing raised by MongoDB or by input
    parsing reaches the caller.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def create(self, body: Mapping[str, Any]) -> ServiceResult:
        try:
            location = LocationDocument(
                name=body.get("name"),
                address=body.get("address"),
                facilities=body.get("facilities").split(","),
                coords=_point(body),
                hours=_opening_time(body, "2"),
                rating=0,
                reviews=[],
            )
            doc = location.model_dump(exclude_none=True)
            result = await self.collection.insert_one(doc)
            doc["_id"] = result.inserted_id
        except Exception as e:
            logger.warning(f"Location create failed: {e}")
            return ServiceResult(400, error_payload(e))
        logger.info(f"Created location {doc['_id']}")
        return ServiceResult(201, serialize_location(doc))

    async def read_one(self, locationid: Optional[str]) -> ServiceResult:
        try:
            location = await self.collection.find_one(
                {"_id": ObjectId(locationid)},
                projection={"name": 1, "address": 1, "reviews": 1},
            )
        except Exception as e:
            logger.warning(f"Location read failed for {locationid}: {e}")
            return ServiceResult(404, error_payload(e))
        if not location:
            return ServiceResult(404, message_payload("location not found"))
        return ServiceResult(200, serialize_location(location))

    async def update_one(self, locationid: Optional[str], body: Mapping[str, Any]) -> ServiceResult:
        if not locationid:
            return ServiceResult(404, message_payload("Not found, locationid is required"))

        try:
            oid = ObjectId(locationid)
            location = await self.collection.find_one(
                {"_id": oid},
                projection={"reviews": 0, "rating": 0},
            )
            if not location:
                return ServiceResult(404, message_payload("locationid not found"))

            changes = LocationDocument(
                name=body.get("name"),
                address=body.get("address"),
                facilities=body.get("facilities").split(","),
                coords=_point(body),
                openingTimes=[_opening_time(body, "1"), _opening_time(body, "2")],
            ).model_dump(include=UPDATE_FIELDS, exclude_none=True)

            await self.collection.update_one({"_id": oid}, {"$set": changes})
            location.update(changes)
        except Exception as e:
            logger.warning(f"Location update failed for {locationid}: {e}")
            return ServiceResult(400, error_payload(e))
        logger.info(f"Updated location {locationid}")
        return ServiceResult(200, serialize_location(location))

    async def delete_one(self, locationid: Optional[str]) -> ServiceResult:
        if not locationid:
            return ServiceResult(404, message_payload("No Location"))

        try:
            result = await self.collection.delete_one({"_id": ObjectId(locationid)})
        except Exception as e:
            logger.warning(f"Location delete failed for {locationid}: {e}")
            return ServiceResult(404, error_payload(e))
        logger.info(f"Deleted location {locationid} (matched={result.deleted_count})")
        return ServiceResult(204)

    async def list_by_distance(self, lng: Any, lat: Any) -> ServiceResult:
        lng = parse_float(lng)
        lat = parse_float(lat)
        # NaN and 0 are both rejected, which also turns away the equator and
        # the prime meridian.
        if not lng or not lat or math.isnan(lng) or math.isnan(lat):
            return ServiceResult(404, message_payload("lng and lat query parameters are required"))

        pipeline = [
            {
                "$geoNear": {
                    "near": {"type": "Point", "coordinates": [lng, lat]},
                    "distanceField": "distance.calculated",
                    "key": "coords",
                    "spherical": True,
                    "maxDistance": MAX_DISTANCE_METERS,
                }
            },
            {"$limit": MAX_RESULTS},
        ]
        try:
            results = await self.collection.aggregate(pipeline).to_list(length=MAX_RESULTS)
            locations: List[Dict[str, Any]] = []
            for result in results:
                distance = result["distance"]["calculated"]
                if distance > MAX_DISTANCE_METERS:
                    continue
                locations.append(
                    {
                        "id": str(result["_id"]),
                        "name": result.get("name"),
                        "address": result.get("address"),
                        "rating": result.get("rating"),
                        "facilities": result.get("facilities"),
                        "distance": format_distance(distance),
                    }
                )
        except Exception as e:
            logger.warning(f"Location search near ({lng}, {lat}) failed: {e}")
            return ServiceResult(404, error_payload(e))
        return ServiceResult(200, locations[:MAX_RESULTS])
