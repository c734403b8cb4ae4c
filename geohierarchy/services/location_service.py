"""Location hierarchy search service

Runs a validated search against the hierarchy tables:
request -> validation -> existence check -> descendant or ancestor queries
-> row mapping -> response envelope
"""

from geohierarchy.core.location.errors import (
    LocationInternalError,
    LocationNotFoundError,
    LocationSearchError,
)
from geohierarchy.core.location.hierarchy_config import HierarchyLevel, SearchDirection
from geohierarchy.core.location.input_validator import (
    ValidatedSearchRequest,
    validate_search_request,
)
from geohierarchy.core.location.query_builder import (
    CompiledQuery,
    build_ancestor_query,
    build_child_query,
    build_existence_query,
)
from geohierarchy.core.location.result_mapper import (
    assemble_response,
    map_ancestor_row,
    map_child_rows,
)
from geohierarchy.locationdb.executor_interface import LocationExecutor
from geohierarchy.utils.custom_logger import CustomLogger

logger = CustomLogger("geohierarchy.location_service")


class LocationHierarchyService:
    """Service class for hierarchy searches over one location database"""

    def __init__(self, executor: LocationExecutor):
        self.executor = executor

    def _run(self, query: CompiledQuery) -> list[dict]:
        logger.debug(f"running {query.sql} with {len(query.params)} parameter(s)")
        return self.executor.execute(query.sql, query.params)

    def entity_exists(self, location_id: int, level: HierarchyLevel) -> bool:
        """True when a `level` row with id `location_id` exists"""
        rows = self._run(build_existence_query(level, location_id))
        return len(rows) > 0

    def ensure_exists(self, location_id: int, level: HierarchyLevel):
        """Raises LocationNotFoundError when the source location does not exist"""
        if not self.entity_exists(location_id, level):
            raise LocationNotFoundError(level.value, location_id)

    def search_children(self, request: ValidatedSearchRequest) -> list:
        """one query per target level, results concatenated in target order"""
        items = []
        for target_level in request.resolved_targets():
            query = build_child_query(
                request.level, target_level, request.location_id, request.keyword_pattern
            )
            items.extend(map_child_rows(self._run(query), target_level))
        return items

    def search_ancestors(self, request: ValidatedSearchRequest) -> list:
        """single combined query; nearest ancestor first unless targets were given"""
        if request.targets is not None:
            levels = request.targets
        else:
            levels = tuple(reversed(request.resolved_targets()))
        if not levels:
            return []

        rows = self._run(
            build_ancestor_query(request.level, request.location_id, request.keyword_pattern)
        )
        if not rows:
            return []
        return map_ancestor_row(rows[0], levels)

    def hierarchy_search(self, search_params: dict) -> dict:
        """Search the hierarchy above or below a location.

        Args:
            search_params: raw request values; id, type, direction and the
                optional target and keyword

        Returns:
            Dict with success, message, data, totalCount and searchParams

        Raises:
            LocationValidationError: If the request is malformed
            LocationNotFoundError: If the source location does not exist
            LocationInternalError: If the database could not be queried
        """
        request = validate_search_request(
            search_params.get("id"),
            search_params.get("type"),
            search_params.get("direction"),
            target=search_params.get("target"),
            keyword=search_params.get("keyword"),
        )
        logger.info(
            f"hierarchy search {request.direction.value} from {request.level.value} "
            f"{request.location_id}"
        )

        try:
            self.ensure_exists(request.location_id, request.level)
            if request.direction == SearchDirection.CHILD:
                items = self.search_children(request)
            else:
                items = self.search_ancestors(request)
        except LocationSearchError:
            raise
        except Exception as err:
            logger.exception(f"hierarchy search failed for {request.level.value} {request.location_id}")
            raise LocationInternalError() from err

        logger.info(f"hierarchy search returned {len(items)} item(s)")
        return assemble_response(items, request.search_params)
