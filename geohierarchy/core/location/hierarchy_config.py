"""Static metadata for the state -> district -> block -> village hierarchy

Every table, column and alias name that the query builders place into SQL
text is a SqlIdentifier created in this module. Nothing outside this module
can construct one, so a caller supplied string can never reach an identifier
position in a generated statement.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from sqlalchemy.sql.expression import Alias, TableClause, column, table

_IDENTIFIER_KEY = object()
_IDENTIFIER_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")


class SqlIdentifier:
    """A table, column or alias name drawn from the hierarchy configuration"""

    __slots__ = ("_name",)

    def __init__(self, name: str, key: object = None):
        if key is not _IDENTIFIER_KEY:
            raise TypeError("SqlIdentifier can only be created from the hierarchy configuration")
        if not _IDENTIFIER_PATTERN.match(name):
            raise ValueError(f"Invalid SQL identifier: {name}")
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"SqlIdentifier({self._name!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, SqlIdentifier) and other._name == self._name

    def __hash__(self) -> int:
        return hash(("SqlIdentifier", self._name))


def _identifier(name: str) -> SqlIdentifier:
    return SqlIdentifier(name, _IDENTIFIER_KEY)


class HierarchyLevel(str, Enum):
    """levels of the administrative tree, shallowest first"""

    STATE = "state"
    DISTRICT = "district"
    BLOCK = "block"
    VILLAGE = "village"


class SearchDirection(str, Enum):
    """direction of a hierarchy traversal"""

    CHILD = "child"
    PARENT = "parent"


@dataclass(frozen=True)
class LevelConfig:
    """table and column identifiers of one hierarchy level"""

    level: HierarchyLevel
    table: SqlIdentifier
    id_column: SqlIdentifier
    name_column: SqlIdentifier
    parent_column: Optional[SqlIdentifier] = None
    extra_columns: tuple = ()
    # sqlalchemy table clause carrying exactly the whitelisted columns
    sql_table: TableClause = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        names = [self.id_column, self.name_column]
        if self.parent_column is not None:
            names.append(self.parent_column)
        names.extend((IS_FOUND_IN_CENSUS, IS_ACTIVE))
        names.extend(self.extra_columns)
        sql_table = table(self.table.name, *[column(name.name) for name in names])
        object.__setattr__(self, "sql_table", sql_table)


# columns present on every hierarchy table
IS_ACTIVE = _identifier("is_active")
IS_FOUND_IN_CENSUS = _identifier("is_found_in_census")
STATE_CODE = _identifier("state_code")

# output aliases of child queries
ID_ALIAS = _identifier("id")
NAME_ALIAS = _identifier("name")
PARENT_ID_ALIAS = _identifier("parent_id")

# table aliases
PARENT_TABLE_ALIAS = _identifier("parent")
TARGET_TABLE_ALIAS = _identifier("target")
SOURCE_TABLE_ALIAS = _identifier("c")

HIERARCHY: tuple = (
    LevelConfig(
        level=HierarchyLevel.STATE,
        table=_identifier("state"),
        id_column=_identifier("state_id"),
        name_column=_identifier("state_name"),
        extra_columns=(STATE_CODE,),
    ),
    LevelConfig(
        level=HierarchyLevel.DISTRICT,
        table=_identifier("district"),
        id_column=_identifier("district_id"),
        name_column=_identifier("district_name"),
        parent_column=_identifier("state_id"),
    ),
    LevelConfig(
        level=HierarchyLevel.BLOCK,
        table=_identifier("block"),
        id_column=_identifier("block_id"),
        name_column=_identifier("block_name"),
        parent_column=_identifier("district_id"),
    ),
    LevelConfig(
        level=HierarchyLevel.VILLAGE,
        table=_identifier("village"),
        id_column=_identifier("village_id"),
        name_column=_identifier("village_name"),
        parent_column=_identifier("block_id"),
    ),
)

LEVEL_CONFIGS: Mapping[HierarchyLevel, LevelConfig] = MappingProxyType(
    {config.level: config for config in HIERARCHY}
)

_ORDINALS: Mapping[HierarchyLevel, int] = MappingProxyType(
    {config.level: position for position, config in enumerate(HIERARCHY)}
)

LEVEL_NAMES: tuple = tuple(config.level.value for config in HIERARCHY)
DIRECTION_NAMES: tuple = tuple(direction.value for direction in SearchDirection)

# per-level output columns of the ancestor query, e.g. block_id, block_is_active
_PREFIXED_COLUMNS: Mapping[tuple, SqlIdentifier] = MappingProxyType(
    {
        (config.level, suffix): _identifier(f"{config.level.value}_{suffix}")
        for config in HIERARCHY
        for suffix in ("id", "name", "is_found_in_census", "is_active")
    }
)

_INTERMEDIATE_ALIASES: Mapping[HierarchyLevel, SqlIdentifier] = MappingProxyType(
    {level: _identifier(f"level{position}") for level, position in _ORDINALS.items()}
)

_ANCESTOR_ALIASES: Mapping[HierarchyLevel, SqlIdentifier] = MappingProxyType(
    {level: _identifier(f"p{position}") for level, position in _ORDINALS.items()}
)


def parse_level(value) -> Optional[HierarchyLevel]:
    """whitelisted level for a raw value, None when it is not a level name"""
    if not isinstance(value, str):
        return None
    try:
        return HierarchyLevel(value)
    except ValueError:
        return None


def parse_direction(value) -> Optional[SearchDirection]:
    """whitelisted direction for a raw value, None when it is not a direction"""
    if not isinstance(value, str):
        return None
    try:
        return SearchDirection(value)
    except ValueError:
        return None


def get_level_config(level: HierarchyLevel) -> LevelConfig:
    return LEVEL_CONFIGS[level]


def ordinal(level: HierarchyLevel) -> int:
    """depth of the level in the tree, state is 0"""
    return _ORDINALS[level]


def level_at(position: int) -> HierarchyLevel:
    return HIERARCHY[position].level


def parent_level(level: HierarchyLevel) -> Optional[HierarchyLevel]:
    """the next shallower level, None for the root"""
    position = ordinal(level)
    return level_at(position - 1) if position > 0 else None


def reachable_levels(level: HierarchyLevel, direction: SearchDirection) -> tuple:
    """levels that can be reached from `level` in `direction`, in ordinal order"""
    position = ordinal(level)
    if direction == SearchDirection.CHILD:
        return tuple(config.level for config in HIERARCHY if ordinal(config.level) > position)
    return tuple(config.level for config in HIERARCHY if ordinal(config.level) < position)


def prefixed_column(level: HierarchyLevel, suffix: str) -> SqlIdentifier:
    """output column `<level>_<suffix>` of the ancestor query"""
    return _PREFIXED_COLUMNS[(level, suffix)]


def intermediate_alias(level: HierarchyLevel) -> SqlIdentifier:
    """alias `level<ordinal>` of an intermediate table in a descendant join chain"""
    return _INTERMEDIATE_ALIASES[level]


def ancestor_alias(level: HierarchyLevel) -> SqlIdentifier:
    """alias `p<ordinal>` of an ancestor table in the ancestor join chain"""
    return _ANCESTOR_ALIASES[level]


def level_table(level: HierarchyLevel, alias: SqlIdentifier = None):
    """sqlalchemy table of the level, aliased when `alias` is given"""
    sql_table: TableClause = get_level_config(level).sql_table
    if alias is None:
        return sql_table
    if not isinstance(alias, SqlIdentifier):
        raise TypeError(f"Table aliases must be SqlIdentifier, got {type(alias).__name__}")
    aliased: Alias = sql_table.alias(alias.name)
    return aliased
