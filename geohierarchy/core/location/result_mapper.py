"""Turns raw hierarchy rows into location items and the search response"""

from dataclasses import dataclass
from typing import Optional

from geohierarchy.core.location.errors import DataIntegrityError
from geohierarchy.core.location.hierarchy_config import (
    HierarchyLevel,
    parent_level,
    prefixed_column,
)
from geohierarchy.utils.constants import HIERARCHY_SEARCH_SUCCESS_MESSAGE
from geohierarchy.utils.response_wrapper import api_response


@dataclass(frozen=True)
class LocationItem:
    """One location returned by a hierarchy search"""

    id: int
    name: str
    type: HierarchyLevel
    is_found_in_census: int
    is_active: Optional[int] = None
    parent_id: Optional[int] = None
    state_code: Optional[str] = None

    def to_dict(self) -> dict:
        item = {"id": self.id, "name": self.name, "type": self.type.value}
        if self.type != HierarchyLevel.STATE:
            item["parent_id"] = self.parent_id
        item["is_active"] = self.is_active
        item["is_found_in_census"] = self.is_found_in_census
        if self.type == HierarchyLevel.STATE:
            item["state_code"] = self.state_code
        return item


def _optional_int(value) -> Optional[int]:
    return None if value is None else int(value)


def map_location_row(
    row: dict,
    level: HierarchyLevel,
    parent_id=None,
    state_code: Optional[str] = None,
) -> LocationItem:
    """
    Map one row with id, name, is_found_in_census and is_active keys
    Raises DataIntegrityError when id or name is missing
    """
    if row.get("id") is None or row.get("name") is None:
        raise DataIntegrityError(f"Invalid {level.value} row: missing id or name")
    try:
        location_id = int(row["id"])
    except (TypeError, ValueError) as err:
        raise DataIntegrityError(f"Invalid {level.value} row: id is not an integer") from err

    return LocationItem(
        id=location_id,
        name=str(row["name"]).strip(),
        type=level,
        parent_id=_optional_int(parent_id) if level != HierarchyLevel.STATE else None,
        is_active=_optional_int(row.get("is_active")),
        is_found_in_census=int(row.get("is_found_in_census") or 0),
        state_code=state_code if level == HierarchyLevel.STATE else None,
    )


def map_child_rows(rows: list, level: HierarchyLevel) -> list:
    """rows of a descendant query, parent_id is selected by the query itself"""
    return [map_location_row(row, level, parent_id=row.get("parent_id")) for row in rows]


def map_ancestor_row(row: dict, levels: tuple) -> list:
    """
    Split the single row of an ancestor query into one item per level in
    `levels`; a level whose id or name is NULL in the row is skipped
    """
    items = []
    for level in levels:
        location_id = row.get(prefixed_column(level, "id").name)
        name = row.get(prefixed_column(level, "name").name)
        if location_id is None or name is None:
            continue

        shallower = parent_level(level)
        parent_id = row.get(prefixed_column(shallower, "id").name) if shallower else None
        level_row = {
            "id": location_id,
            "name": name,
            "is_active": row.get(prefixed_column(level, "is_active").name),
            "is_found_in_census": row.get(prefixed_column(level, "is_found_in_census").name),
        }
        items.append(
            map_location_row(level_row, level, parent_id=parent_id, state_code=row.get("state_code"))
        )
    return items


def assemble_response(items: list, search_params: dict) -> dict:
    """final hierarchy search envelope"""
    data = [item.to_dict() for item in items]
    return api_response(
        True,
        data=data,
        message=HIERARCHY_SEARCH_SUCCESS_MESSAGE,
        totalCount=len(data),
        searchParams=dict(search_params),
    )
