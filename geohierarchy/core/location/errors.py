"""Errors raised by the location hierarchy search

All of them derive from LocationSearchError, which the api layer reports to
the caller as a bad request.
"""

# validation error codes
MISSING_FIELD = "MISSING_FIELD"
INVALID_ID_FORMAT = "INVALID_ID_FORMAT"
INVALID_TYPE = "INVALID_TYPE"
INVALID_DIRECTION = "INVALID_DIRECTION"
INVALID_TARGET_TYPE = "INVALID_TARGET_TYPE"
INVALID_TARGET_FOR_CONTEXT = "INVALID_TARGET_FOR_CONTEXT"
INVALID_KEYWORD_CHARACTERS = "INVALID_KEYWORD_CHARACTERS"
KEYWORD_TOO_LONG = "KEYWORD_TOO_LONG"


class LocationSearchError(Exception):
    """Base exception for location hierarchy search errors"""

    def __init__(self, message: str, error_code: str = "LOCATION_SEARCH_ERROR"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class LocationValidationError(LocationSearchError):
    """Raised when the search request is malformed or not allowed"""

    def __init__(self, message: str, error_code: str):
        super().__init__(message, error_code)


class LocationNotFoundError(LocationSearchError):
    """Raised when the source location does not exist for its type"""

    def __init__(self, level: str, location_id: int):
        super().__init__(f"{level} with ID {location_id} not found", "LOCATION_NOT_FOUND")
        self.level = level
        self.location_id = location_id


class LocationInternalError(LocationSearchError):
    """Raised when the search fails for a reason other than the request"""

    def __init__(self, message: str = "Failed to complete hierarchy search"):
        super().__init__(message, "INTERNAL_ERROR")


class DataIntegrityError(LocationInternalError):
    """Raised when a result row is missing its id or name"""
