from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.db import LOCATIONS_COLLECTION
from app.errors import error_payload
from app.services.location_service import LocationService, ServiceResult

router = APIRouter()


# MongoDB 헬퍼: app.state.db 가져오기
def _get_db_or_500(request: Request) -> AsyncIOMotorDatabase:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise HTTPException(status_code=500, detail="Database not connected")
    return db


def get_location_service(database: AsyncIOMotorDatabase = Depends(_get_db_or_500)) -> LocationService:
    return LocationService(database[LOCATIONS_COLLECTION])


async def _read_body(request: Request) -> Dict[str, Any]:
    """Accept a JSON object or a urlencoded/multipart form."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.json()
        return body if isinstance(body, dict) else {}
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return dict(form)
    return {}


def _respond(result: ServiceResult) -> Response:
    if result.status_code == 204:
        return Response(status_code=204)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.get("", summary="List locations near a point")
async def list_by_distance(
    lng: Optional[str] = None,
    lat: Optional[str] = None,
    service: LocationService = Depends(get_location_service),
):
    return _respond(await service.list_by_distance(lng, lat))


@router.post("", status_code=201, summary="Create a location")
async def create_location(request: Request, service: LocationService = Depends(get_location_service)):
    try:
        body = await _read_body(request)
    except ValueError as e:
        return _respond(ServiceResult(400, error_payload(e)))
    return _respond(await service.create(body))


# Without an id these answer 404 before touching the store, so no database is needed.
@router.api_route("", methods=["PUT", "PATCH"], summary="Update a location (missing id)")
async def update_location_without_id():
    return _respond(await LocationService(None).update_one(None, {}))


@router.delete("", summary="Delete a location (missing id)")
async def delete_location_without_id():
    return _respond(await LocationService(None).delete_one(None))


@router.get("/{locationid}", summary="Get location details")
async def read_location(locationid: str, service: LocationService = Depends(get_location_service)):
    return _respond(await service.read_one(locationid))


@router.api_route("/{locationid}", methods=["PUT", "PATCH"], summary="Update a location")
async def update_location(
    locationid: str,
    request: Request,
    service: LocationService = Depends(get_location_service),
):
    try:
        body = await _read_body(request)
    except ValueError as e:
        return _respond(ServiceResult(400, error_payload(e)))
    return _respond(await service.update_one(locationid, body))


@router.delete("/{locationid}", status_code=204, summary="Delete a location")
async def delete_location(locationid: str, service: LocationService = Depends(get_location_service)):
    return _respond(await service.delete_one(locationid))
