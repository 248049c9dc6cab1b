"""Error taxonomy for the map engine."""


class MapEngineError(Exception):
    """Base engine error with an HTTP-style status code and message."""
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidBoundsError(MapEngineError):
    """GeoBounds with a non-positive latitude or longitude range."""
    def __init__(self, message: str = "Invalid map bounds"):
        super().__init__(message, status_code=422)


class OutOfRangeSeek(MapEngineError):
    """Seek outside the playback window (raised only in strict mode)."""
    def __init__(self, offset_hours: float, total_hours: float):
        self.offset_hours = offset_hours
        self.total_hours = total_hours
        super().__init__(
            f"Seek to {offset_hours}h is outside the playback window [0, {total_hours}]",
            status_code=422
        )


class InvalidSpeedError(MapEngineError):
    """Playback multiplier not in the allowed set."""
    def __init__(self, message: str = "Invalid playback speed"):
        super().__init__(message, status_code=422)


class InvalidStatusError(MapEngineError):
    """Unknown patrol status value."""
    def __init__(self, message: str = "Invalid patrol status"):
        super().__init__(message, status_code=422)


class UnknownEntityError(MapEngineError):
    """No patrol entity with the requested id."""
    def __init__(self, message: str = "Entity not found"):
        super().__init__(message, status_code=404)


class AssistantError(MapEngineError):
    """The assistant service failed to answer."""
    def __init__(self, message: str = "Assistant request failed"):
        super().__init__(message, status_code=502)
