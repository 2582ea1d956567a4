class SignalingError(Exception):
    """Base class for per-connection errors. None of them are fatal to the server."""


class InvalidRoomName(SignalingError):
    pass


class NotInRoom(SignalingError):
    pass


class MalformedMessage(SignalingError):
    pass
