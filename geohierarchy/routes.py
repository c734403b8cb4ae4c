from ninja import NinjaAPI
from ninja.errors import ValidationError
from ninja.responses import Response
from pydantic import ValidationError as PydanticValidationError

from geohierarchy.api.location_api import location_router
from geohierarchy.utils.custom_logger import CustomLogger

logger = CustomLogger("geohierarchy")

src_api = NinjaAPI(
    urls_namespace="api",
    title="Geographic hierarchy apis",
    description="Search states, districts, blocks and villages",
    docs_url="/api/docs",
)


@src_api.exception_handler(ValidationError)
def ninja_validation_error_handler(request, exc):  # pylint: disable=unused-argument
    """
    Handle any ninja validation errors raised in the apis
    These are raised during request payload validation
    """
    return Response({"detail": exc.errors}, status=422)


@src_api.exception_handler(PydanticValidationError)
def pydantic_validation_error_handler(
    request, exc: PydanticValidationError
):  # pylint: disable=unused-argument
    """
    Handle any pydantic errors raised in the apis
    These are raised during response payload validation
    """
    logger.error(f"response validation failed: {exc}")
    return Response({"detail": "something went wrong"}, status=500)


@src_api.exception_handler(Exception)
def ninja_default_error_handler(request, exc: Exception):  # pylint: disable=unused-argument
    """Handle any other exception raised in the apis"""
    logger.exception(f"unhandled error on {request.path}")
    return Response({"detail": "something went wrong"}, status=500)


# tag routes to specify sections in docs
location_router.tags = ["Location"]

# mount all the module routes
src_api.add_router("/api/location/", location_router)
