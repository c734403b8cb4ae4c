"""Location hierarchy api endpoints"""

from ninja import Router

from geohierarchy.core.location.errors import LocationSearchError
from geohierarchy.locationdb.executor_factory import LocationExecutorFactory
from geohierarchy.schemas.location_schema import (
    HierarchySearchRequest,
    HierarchySearchResponse,
    LocationErrorResponse,
)
from geohierarchy.services.location_service import LocationHierarchyService
from geohierarchy.utils.custom_logger import CustomLogger
from geohierarchy.utils.response_wrapper import api_response

logger = CustomLogger("geohierarchy.location_api")

location_router = Router()


@location_router.post(
    "/hierarchy-search",
    response={200: HierarchySearchResponse, 400: LocationErrorResponse},
    exclude_unset=True,
)
def post_hierarchy_search(request, payload: HierarchySearchRequest):
    """Search the locations above or below a state, district, block or village"""
    service = LocationHierarchyService(LocationExecutorFactory.get_location_executor())
    try:
        return 200, service.hierarchy_search(payload.dict(exclude_none=True))
    except LocationSearchError as err:
        logger.error(f"hierarchy search rejected: {err.error_code} {err.message}")
        return 400, api_response(False, message=err.message, error=err.error_code)
