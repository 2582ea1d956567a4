from pydantic import BaseModel


class RoomSummary(BaseModel):
    room: str
    members: int


class RoomListResponse(BaseModel):
    rooms: list[RoomSummary]


class HealthResponse(BaseModel):
    status: str
    connections: int
    rooms: int
