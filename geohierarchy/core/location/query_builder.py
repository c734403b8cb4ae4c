"""SQL builders for the location hierarchy search

Statements are composed with sqlalchemy core over the table clauses held by
hierarchy_config. LocationQueryBuilder only accepts SqlIdentifier objects for
column names and aliases and raises TypeError for anything else. Values are
bind parameters; compiled statements use $1..$n placeholders.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import bindparam, func, or_
from sqlalchemy.dialects.postgresql.base import PGDialect
from sqlalchemy.sql.expression import (
    ColumnClause,
    FromClause,
    Select,
    asc,
    literal_column,
    select,
)

from geohierarchy.core.location.hierarchy_config import (
    ID_ALIAS,
    IS_ACTIVE,
    IS_FOUND_IN_CENSUS,
    NAME_ALIAS,
    PARENT_ID_ALIAS,
    PARENT_TABLE_ALIAS,
    SOURCE_TABLE_ALIAS,
    TARGET_TABLE_ALIAS,
    HierarchyLevel,
    SqlIdentifier,
    ancestor_alias,
    get_level_config,
    intermediate_alias,
    level_at,
    level_table,
    ordinal,
    prefixed_column,
)

LOCATION_ID_BIND = "location_id"
KEYWORD_BIND = "keyword"

# renders positional $1..$n placeholders, numbered in order of appearance
_DIALECT = PGDialect(paramstyle="numeric_dollar")


@dataclass
class CompiledQuery:
    """sql text with positional placeholders and the values bound to them"""

    sql: str
    params: List = field(default_factory=list)


def compile_statement(statement: Select) -> CompiledQuery:
    compiled = statement.compile(dialect=_DIALECT)
    values = compiled.params
    params = [values[name] for name in compiled.positiontup]
    # no literals are ever rendered, collapsing whitespace only joins the lines
    return CompiledQuery(sql=" ".join(str(compiled).split()), params=params)


def _identifier(value) -> SqlIdentifier:
    if not isinstance(value, SqlIdentifier):
        raise TypeError(f"SQL identifiers must be SqlIdentifier, got {type(value).__name__}")
    return value


def _from_clause(value) -> FromClause:
    if not isinstance(value, FromClause):
        raise TypeError(f"Tables must come from level_table, got {type(value).__name__}")
    return value


def _column(table_ref: FromClause, column_name: SqlIdentifier) -> ColumnClause:
    """the whitelisted column of a configured table; KeyError if the table lacks it"""
    return _from_clause(table_ref).c[_identifier(column_name).name]


class LocationQueryBuilder:
    """
    Select query builder for the hierarchy tables
    Methods can be chained; build() returns the CompiledQuery
    """

    def __init__(self):
        self.column_clauses: list = []
        self.select_from: FromClause = None
        self.where_clauses: list = []
        self.order_by_clauses: list = []
        self.limit_records: int = None

    def add_column(
        self,
        table_ref: FromClause,
        column_name: SqlIdentifier,
        alias: SqlIdentifier = None,
    ):
        """Push a column to select"""
        col = _column(table_ref, column_name)
        if alias is not None:
            col = col.label(_identifier(alias).name)
        self.column_clauses.append(col)
        return self

    def add_constant_column(self):
        """Select the constant 1, used for existence checks"""
        self.column_clauses.append(literal_column("1"))
        return self

    def fetch_from(self, table_ref: FromClause):
        self.select_from = _from_clause(table_ref)
        return self

    def join_table(self, table_ref: FromClause, left: tuple, right: tuple, outer: bool = False):
        """
        Join table_ref to what is selected from so far; left and right are
        (table_ref, column) pairs compared for equality in the ON clause
        """
        if self.select_from is None:
            raise ValueError("Table to select from is not provided")
        onclause = _column(*left) == _column(*right)
        self.select_from = self.select_from.join(
            _from_clause(table_ref), onclause, isouter=outer
        )
        return self

    def where_equals(
        self, table_ref: FromClause, column_name: SqlIdentifier, value, bind_name=LOCATION_ID_BIND
    ):
        self.where_clauses.append(_column(table_ref, column_name) == bindparam(bind_name, value))
        return self

    def where_active(self, table_ref: FromClause):
        """is_active of NULL counts as active"""
        col = _column(table_ref, IS_ACTIVE)
        self.where_clauses.append(or_(col.is_(None), col == literal_column("1")))
        return self

    def where_name_matches(self, columns: list, pattern: str):
        """
        Case insensitive LIKE on one or more (table_ref, column) pairs,
        OR-combined; the pattern is bound once and shared
        """
        if not columns:
            raise ValueError("At least one column is required for a name filter")
        keyword = bindparam(KEYWORD_BIND, pattern)
        conditions = [
            func.lower(_column(table_ref, column_name)).like(func.lower(keyword))
            for table_ref, column_name in columns
        ]
        if len(conditions) == 1:
            self.where_clauses.append(conditions[0])
        else:
            self.where_clauses.append(or_(*conditions))
        return self

    def order_cols_by(self, table_ref: FromClause, column_name: SqlIdentifier):
        self.order_by_clauses.append(asc(_column(table_ref, column_name)))
        return self

    def limit_rows(self, limit: int):
        """Limit the number of rows"""
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        self.limit_records = limit
        return self

    def statement(self) -> Select:
        """return the sqlalchemy select without compiling it"""
        if self.select_from is None:
            raise ValueError("Table to select from is not provided")
        if not self.column_clauses:
            raise ValueError("No columns to select")

        stmt: Select = select(*self.column_clauses).select_from(self.select_from)
        for where_clause in self.where_clauses:
            stmt = stmt.where(where_clause)
        if self.order_by_clauses:
            stmt = stmt.order_by(*self.order_by_clauses)
        if self.limit_records is not None:
            # rendered inline so the id and keyword stay the only parameters
            stmt = stmt.limit(literal_column(str(self.limit_records)))
        return stmt

    def build(self) -> CompiledQuery:
        """return the sql statement and its parameters"""
        return compile_statement(self.statement())


def build_existence_query(level: HierarchyLevel, location_id: int) -> CompiledQuery:
    """SELECT 1 FROM <table> WHERE <id column> = $1 LIMIT 1"""
    config = get_level_config(level)
    source = level_table(level)
    return (
        LocationQueryBuilder()
        .add_constant_column()
        .fetch_from(source)
        .where_equals(source, config.id_column, location_id)
        .limit_rows(1)
        .build()
    )


def build_child_query(
    source_level: HierarchyLevel,
    target_level: HierarchyLevel,
    location_id: int,
    keyword_pattern: Optional[str] = None,
) -> CompiledQuery:
    """
    Query the active `target_level` rows under the `source_level` row `location_id`
    A direct child is read from its own table; deeper levels are reached
    through an INNER JOIN chain over the intermediate levels
    """
    gap = ordinal(target_level) - ordinal(source_level)
    if gap < 1:
        raise ValueError(f"{target_level.value} is not below {source_level.value}")
    if gap == 1:
        return _direct_child_query(target_level, location_id, keyword_pattern)
    return _descendant_query(source_level, target_level, location_id, keyword_pattern)


def _direct_child_query(
    target_level: HierarchyLevel, location_id: int, keyword_pattern: Optional[str]
) -> CompiledQuery:
    config = get_level_config(target_level)
    target = level_table(target_level)
    query_builder = (
        LocationQueryBuilder()
        .add_column(target, config.id_column, ID_ALIAS)
        .add_column(target, config.name_column, NAME_ALIAS)
        .add_column(target, config.parent_column, PARENT_ID_ALIAS)
        .add_column(target, IS_FOUND_IN_CENSUS)
        .add_column(target, IS_ACTIVE)
        .fetch_from(target)
        .where_equals(target, config.parent_column, location_id)
        .where_active(target)
    )
    if keyword_pattern is not None:
        query_builder.where_name_matches([(target, config.name_column)], keyword_pattern)
    return query_builder.order_cols_by(target, config.name_column).build()


def _descendant_query(
    source_level: HierarchyLevel,
    target_level: HierarchyLevel,
    location_id: int,
    keyword_pattern: Optional[str],
) -> CompiledQuery:
    source_config = get_level_config(source_level)
    target_config = get_level_config(target_level)
    source = level_table(source_level, PARENT_TABLE_ALIAS)
    target = level_table(target_level, TARGET_TABLE_ALIAS)

    query_builder = (
        LocationQueryBuilder()
        .add_column(target, target_config.id_column, ID_ALIAS)
        .add_column(target, target_config.name_column, NAME_ALIAS)
        .add_column(target, target_config.parent_column, PARENT_ID_ALIAS)
        .add_column(target, IS_FOUND_IN_CENSUS, IS_FOUND_IN_CENSUS)
        .add_column(target, IS_ACTIVE, IS_ACTIVE)
        .fetch_from(source)
    )

    previous_config, previous = source_config, source
    for position in range(ordinal(source_level) + 1, ordinal(target_level) + 1):
        level = level_at(position)
        config = get_level_config(level)
        joined = target if level == target_level else level_table(level, intermediate_alias(level))
        query_builder.join_table(
            joined,
            (joined, config.parent_column),
            (previous, previous_config.id_column),
        )
        previous_config, previous = config, joined

    query_builder.where_equals(source, source_config.id_column, location_id)
    query_builder.where_active(target)
    if keyword_pattern is not None:
        query_builder.where_name_matches([(target, target_config.name_column)], keyword_pattern)
    return query_builder.order_cols_by(target, target_config.name_column).build()


def _add_level_columns(
    query_builder: LocationQueryBuilder, level: HierarchyLevel, table_ref: FromClause
):
    config = get_level_config(level)
    query_builder.add_column(table_ref, config.id_column, prefixed_column(level, "id"))
    query_builder.add_column(table_ref, config.name_column, prefixed_column(level, "name"))
    query_builder.add_column(
        table_ref, IS_FOUND_IN_CENSUS, prefixed_column(level, "is_found_in_census")
    )
    query_builder.add_column(table_ref, IS_ACTIVE, prefixed_column(level, "is_active"))
    for extra_column in config.extra_columns:
        query_builder.add_column(table_ref, extra_column, extra_column)


def build_ancestor_query(
    source_level: HierarchyLevel, location_id: int, keyword_pattern: Optional[str] = None
) -> CompiledQuery:
    """
    Single query returning the source row and all of its ancestors
    The source table is aliased c and every shallower level p<ordinal>,
    LEFT JOINed upwards so a broken chain still returns the source row.
    Columns are named <level>_id, <level>_name, <level>_is_found_in_census,
    <level>_is_active, plus state_code
    """
    source_ordinal = ordinal(source_level)
    if source_ordinal == 0:
        raise ValueError(f"{source_level.value} has no ancestors")

    source_config = get_level_config(source_level)
    source = level_table(source_level, SOURCE_TABLE_ALIAS)
    ancestors = [
        (level_at(position), level_table(level_at(position), ancestor_alias(level_at(position))))
        for position in range(source_ordinal - 1, -1, -1)
    ]

    query_builder = LocationQueryBuilder()
    _add_level_columns(query_builder, source_level, source)
    name_columns = [(source, source_config.name_column)]
    for level, ancestor in ancestors:
        _add_level_columns(query_builder, level, ancestor)
        name_columns.append((ancestor, get_level_config(level).name_column))

    query_builder.fetch_from(source)

    deeper_config, deeper = source_config, source
    for level, ancestor in ancestors:
        config = get_level_config(level)
        query_builder.join_table(
            ancestor,
            (deeper, deeper_config.parent_column),
            (ancestor, config.id_column),
            outer=True,
        )
        deeper_config, deeper = config, ancestor

    query_builder.where_equals(source, source_config.id_column, location_id)
    if keyword_pattern is not None:
        query_builder.where_name_matches(name_columns, keyword_pattern)
    return query_builder.limit_rows(1).build()
