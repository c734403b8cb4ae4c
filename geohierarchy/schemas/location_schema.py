from typing import Any, Dict, List, Optional

from ninja import Schema


class HierarchySearchRequest(Schema):
    """
    payload to search the location hierarchy above or below a location
    every field is optional here; the search validates presence and values itself
    """

    id: Optional[str] = None
    type: Optional[str] = None
    direction: Optional[str] = None
    target: Optional[List[str]] = None
    keyword: Optional[str] = None


class LocationItemSchema(Schema):
    """
    one location in a hierarchy search result; state items carry state_code
    instead of parent_id, and fields not set on an item are left out
    """

    id: int
    name: str
    type: str
    parent_id: Optional[int] = None
    is_active: Optional[int] = None
    is_found_in_census: int
    state_code: Optional[str] = None


class HierarchySearchResponse(Schema):
    """locations found by a hierarchy search"""

    success: bool
    message: str
    data: List[LocationItemSchema]
    totalCount: int
    searchParams: Dict[str, Any]


class LocationErrorResponse(Schema):
    success: bool = False
    message: str
    data: None = None
    error: str
