from fastapi import APIRouter, HTTPException, Request

from logging_config import get_logger
from schemas.rooms import HealthResponse, RoomListResponse, RoomSummary

logger = get_logger(__name__)

rooms_router = APIRouter(tags=["rooms"])


@rooms_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    registry = request.app.state.registry
    return HealthResponse(status="ok", connections=len(registry), rooms=len(registry.rooms()))


@rooms_router.get("/rooms", response_model=RoomListResponse)
async def list_rooms(request: Request):
    rooms = request.app.state.registry.rooms()
    logger.debug(f"Room list request: {len(rooms)} active rooms")
    return RoomListResponse(
        rooms=[RoomSummary(room=name, members=count) for name, count in sorted(rooms.items())]
    )


@rooms_router.get("/rooms/{room_name}", response_model=RoomSummary)
async def get_room_details(room_name: str, request: Request):
    """Member count of one room. Rooms without members do not exist."""
    members = request.app.state.registry.members_of(room_name)
    if not members:
        logger.debug(f"Room details failed: Room {room_name} not found")
        raise HTTPException(status_code=404, detail="Room not found")
    return RoomSummary(room=room_name, members=len(members))
