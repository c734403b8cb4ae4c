"""Validation of hierarchy search requests

Runs before any query is built. Raw request values are checked against the
closed level and direction whitelists and turned into a ValidatedSearchRequest
holding only whitelisted enums, an int id and a checked keyword.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from geohierarchy.core.location import errors
from geohierarchy.core.location.errors import LocationValidationError
from geohierarchy.core.location.hierarchy_config import (
    DIRECTION_NAMES,
    LEVEL_NAMES,
    HierarchyLevel,
    SearchDirection,
    parse_direction,
    parse_level,
    reachable_levels,
)
from geohierarchy.utils.constants import (
    KEYWORD_FORBIDDEN_CHARACTERS,
    KEYWORD_MAX_LENGTH,
    LOCATION_ID_MAX,
)

_POSITIVE_INTEGER = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ValidatedSearchRequest:
    """A search request whose every field has passed validation"""

    location_id: int
    level: HierarchyLevel
    direction: SearchDirection
    # None when the caller did not restrict the target levels
    targets: Optional[Tuple[HierarchyLevel, ...]] = None
    # stripped keyword, None when absent or blank
    keyword: Optional[str] = None
    search_params: Dict[str, Any] = field(default_factory=dict)

    @property
    def keyword_pattern(self) -> Optional[str]:
        """LIKE pattern bound for the keyword filter"""
        if self.keyword is None:
            return None
        return f"%{self.keyword.lower()}%"

    def resolved_targets(self) -> Tuple[HierarchyLevel, ...]:
        """the requested targets, or every reachable level when none were given"""
        if self.targets is not None:
            return self.targets
        return reachable_levels(self.level, self.direction)


def validate_location_id(location_id) -> int:
    """parse a decimal positive integer id; signs, spaces and decimals are rejected"""
    if not isinstance(location_id, str) or not _POSITIVE_INTEGER.fullmatch(location_id):
        raise LocationValidationError(
            "Invalid ID format: ID must be a positive integer", errors.INVALID_ID_FORMAT
        )
    value = int(location_id)
    if value < 1 or value > LOCATION_ID_MAX:
        raise LocationValidationError(
            "Invalid ID format: ID must be a positive integer", errors.INVALID_ID_FORMAT
        )
    return value


def validate_level(level_name) -> HierarchyLevel:
    level = parse_level(level_name)
    if level is None:
        raise LocationValidationError(
            f"Invalid type: Type must be one of: {', '.join(LEVEL_NAMES)}", errors.INVALID_TYPE
        )
    return level


def validate_direction(direction_name) -> SearchDirection:
    direction = parse_direction(direction_name)
    if direction is None:
        quoted = ['"' + name + '"' for name in DIRECTION_NAMES]
        raise LocationValidationError(
            f"Invalid direction: Direction must be either {' or '.join(quoted)}",
            errors.INVALID_DIRECTION,
        )
    return direction


def validate_targets(
    target, level: HierarchyLevel, direction: SearchDirection
) -> Optional[Tuple[HierarchyLevel, ...]]:
    """
    Check the requested target levels
    - every element must be a level name
    - every level must be reachable from `level` in `direction`
    An omitted or empty target list means all reachable levels and returns None
    """
    if target is None:
        return None
    if not isinstance(target, (list, tuple)):
        raise LocationValidationError("Target must be an array", errors.INVALID_TARGET_TYPE)
    if len(target) == 0:
        return None

    unknown = [str(element) for element in target if parse_level(element) is None]
    if unknown:
        raise LocationValidationError(
            f"Invalid target types [{', '.join(unknown)}]. "
            f"Each target must be one of: {', '.join(LEVEL_NAMES)}",
            errors.INVALID_TARGET_TYPE,
        )

    reachable = reachable_levels(level, direction)
    targets = []
    for element in target:
        target_level = parse_level(element)
        if target_level not in targets:
            targets.append(target_level)

    unreachable = [target_level.value for target_level in targets if target_level not in reachable]
    if unreachable:
        raise LocationValidationError(
            f"Invalid targets [{', '.join(unreachable)}] for {direction.value} from {level.value}",
            errors.INVALID_TARGET_FOR_CONTEXT,
        )
    return tuple(targets)


def validate_keyword(keyword) -> Optional[str]:
    """strip the keyword; blank means no filter. Forbidden characters are rejected"""
    if keyword is None:
        return None
    if not isinstance(keyword, str):
        raise LocationValidationError(
            "Keyword must be a string", errors.INVALID_KEYWORD_CHARACTERS
        )
    keyword = keyword.strip()
    if keyword == "":
        return None
    if any(character in keyword for character in KEYWORD_FORBIDDEN_CHARACTERS):
        raise LocationValidationError(
            f"Invalid characters in keyword: {' '.join(KEYWORD_FORBIDDEN_CHARACTERS)} are not allowed",
            errors.INVALID_KEYWORD_CHARACTERS,
        )
    if len(keyword) > KEYWORD_MAX_LENGTH:
        raise LocationValidationError(
            f"Keyword is too long: maximum length is {KEYWORD_MAX_LENGTH} characters",
            errors.KEYWORD_TOO_LONG,
        )
    return keyword


def _require(value, message: str):
    if value is None or (isinstance(value, str) and value == ""):
        raise LocationValidationError(message, errors.MISSING_FIELD)


def validate_search_request(
    location_id, level_name, direction_name, target=None, keyword=None
) -> ValidatedSearchRequest:
    """validate a raw hierarchy search request; raises LocationValidationError"""
    _require(location_id, "ID is required")
    _require(level_name, "Type is required")
    _require(direction_name, "Direction is required")

    validated_id = validate_location_id(location_id)
    level = validate_level(level_name)
    direction = validate_direction(direction_name)
    targets = validate_targets(target, level, direction)
    validated_keyword = validate_keyword(keyword)

    search_params = {"id": location_id, "type": level_name, "direction": direction_name}
    if target is not None:
        search_params["target"] = list(target)
    if keyword is not None:
        search_params["keyword"] = keyword

    return ValidatedSearchRequest(
        location_id=validated_id,
        level=level,
        direction=direction,
        targets=targets,
        keyword=validated_keyword,
        search_params=search_params,
    )
