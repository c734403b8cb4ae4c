from typing import Any, Optional


def api_response(
    success: bool,
    data: Any = None,
    message: Optional[str] = None,
    **extra: Any,
) -> dict:
    """Create a standardized API response.

    Args:
        success: Whether the operation was successful
        data: Response data (can be schema instance, dict or list)
        message: Optional message
        extra: Additional top level keys, added after data

    Returns:
        Dict with standard response structure
    """
    response = {"success": success}

    if message is not None:
        response["message"] = message

    if hasattr(data, "dict"):
        response["data"] = data.dict()
    else:
        response["data"] = data

    response.update(extra)
    return response
