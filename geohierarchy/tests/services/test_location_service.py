from unittest.mock import Mock, call

import pytest

from geohierarchy.core.location.errors import (
    LocationInternalError,
    LocationNotFoundError,
    LocationValidationError,
)
from geohierarchy.core.location.hierarchy_config import HierarchyLevel
from geohierarchy.services.location_service import LocationHierarchyService

EXISTS = [{"1": 1}]


def child_row(location_id, name, parent_id):
    return {
        "id": location_id,
        "name": name,
        "parent_id": parent_id,
        "is_found_in_census": 1,
        "is_active": 1,
    }


@pytest.fixture
def executor():
    return Mock()


@pytest.fixture
def service(executor):
    return LocationHierarchyService(executor)


def executed_sql(executor):
    return [args[0] for args, _ in executor.execute.call_args_list]


def test_entity_exists(service, executor):
    executor.execute.return_value = EXISTS
    assert service.entity_exists(27, HierarchyLevel.STATE) is True
    executor.execute.assert_called_once_with(
        "SELECT 1 FROM state WHERE state.state_id = $1 LIMIT 1", [27]
    )

    executor.execute.return_value = []
    assert service.entity_exists(27, HierarchyLevel.STATE) is False


def test_missing_source_is_not_found(service, executor):
    executor.execute.return_value = []
    with pytest.raises(LocationNotFoundError) as excinfo:
        service.hierarchy_search({"id": "999999", "type": "state", "direction": "child"})
    assert excinfo.value.message == "state with ID 999999 not found"
    assert excinfo.value.error_code == "LOCATION_NOT_FOUND"
    assert executor.execute.call_count == 1


def test_direct_child_search(service, executor):
    executor.execute.side_effect = [
        EXISTS,
        [child_row(5, "Nashik", 27), child_row(6, "Pune", 27)],
    ]
    response = service.hierarchy_search(
        {"id": "27", "type": "state", "direction": "child", "target": ["district"]}
    )
    assert response["success"] is True
    assert response["totalCount"] == 2
    assert all(item["type"] == "district" for item in response["data"])
    assert all(item["parent_id"] == 27 for item in response["data"])
    assert response["searchParams"] == {
        "id": "27",
        "type": "state",
        "direction": "child",
        "target": ["district"],
    }
    assert executor.execute.call_args_list[1] == call(
        "SELECT district.district_id AS id, district.district_name AS name, "
        "district.state_id AS parent_id, district.is_found_in_census, district.is_active "
        "FROM district WHERE district.state_id = $1 "
        "AND (district.is_active IS NULL OR district.is_active = 1) "
        "ORDER BY district.district_name ASC",
        [27],
    )


def test_village_target_from_state_uses_three_joins(service, executor):
    executor.execute.side_effect = [EXISTS, [child_row(900, "Khed", 30)]]
    response = service.hierarchy_search(
        {"id": "27", "type": "state", "direction": "child", "target": ["village"]}
    )
    assert [item["type"] for item in response["data"]] == ["village"]
    assert executed_sql(executor)[1].count(" JOIN ") == 3


def test_child_search_one_query_per_target_in_request_order(service, executor):
    executor.execute.side_effect = [
        EXISTS,
        [child_row(900, "Khed", 30)],
        [child_row(30, "Haveli", 12)],
    ]
    response = service.hierarchy_search(
        {"id": "12", "type": "district", "direction": "child", "target": ["village", "block"]}
    )
    assert executor.execute.call_count == 3
    assert [item["type"] for item in response["data"]] == ["village", "block"]


def test_child_search_without_target_uses_ordinal_order(service, executor):
    executor.execute.side_effect = [EXISTS, [], [], []]
    response = service.hierarchy_search({"id": "27", "type": "state", "direction": "child"})
    sql = executed_sql(executor)
    assert len(sql) == 4
    assert "FROM district" in sql[1]
    assert "JOIN block AS target" in sql[2]
    assert "JOIN village AS target" in sql[3]
    assert response["data"] == []


def test_child_search_from_village_runs_only_existence_check(service, executor):
    executor.execute.return_value = EXISTS
    response = service.hierarchy_search({"id": "900", "type": "village", "direction": "child"})
    assert response["data"] == []
    assert response["totalCount"] == 0
    assert executor.execute.call_count == 1


def test_parent_search_from_state_runs_only_existence_check(service, executor):
    executor.execute.return_value = EXISTS
    response = service.hierarchy_search({"id": "27", "type": "state", "direction": "parent"})
    assert response["data"] == []
    assert response["totalCount"] == 0
    assert executor.execute.call_count == 1


def test_parent_search_from_village(service, executor):
    ancestor_row = {
        "village_id": 900,
        "village_name": "Khed",
        "village_is_found_in_census": 1,
        "village_is_active": 1,
        "block_id": 30,
        "block_name": "Haveli",
        "block_is_found_in_census": 1,
        "block_is_active": 1,
        "district_id": 12,
        "district_name": "Pune",
        "district_is_found_in_census": 1,
        "district_is_active": 1,
        "state_id": 27,
        "state_name": "Maharashtra",
        "state_is_found_in_census": 1,
        "state_is_active": 1,
        "state_code": "MH",
    }
    executor.execute.side_effect = [EXISTS, [ancestor_row]]
    response = service.hierarchy_search({"id": "900", "type": "village", "direction": "parent"})
    assert executor.execute.call_count == 2
    assert [item["type"] for item in response["data"]] == ["block", "district", "state"]
    assert [item.get("parent_id") for item in response["data"]] == [12, 27, None]
    assert response["data"][2]["state_code"] == "MH"


def test_parent_search_with_keyword_and_no_match(service, executor):
    executor.execute.side_effect = [EXISTS, []]
    response = service.hierarchy_search(
        {"id": "900", "type": "village", "direction": "parent", "keyword": "Mumbai"}
    )
    assert response["data"] == []
    sql, params = executor.execute.call_args_list[1][0]
    assert params == [900, "%mumbai%"]
    assert "Mumbai" not in sql


def test_keyword_is_bound_lower_cased(service, executor):
    executor.execute.side_effect = [EXISTS, []]
    service.hierarchy_search(
        {"id": "27", "type": "state", "direction": "child", "target": ["district"], "keyword": "PuN"}
    )
    assert executor.execute.call_args_list[1][0][1] == [27, "%pun%"]


def test_blank_keyword_adds_no_filter(service, executor):
    executor.execute.side_effect = [EXISTS, []]
    response = service.hierarchy_search(
        {"id": "27", "type": "state", "direction": "child", "target": ["district"], "keyword": "  "}
    )
    sql, params = executor.execute.call_args_list[1][0]
    assert "LIKE" not in sql
    assert params == [27]
    assert response["searchParams"]["keyword"] == "  "


def test_keyword_length_boundary(service, executor):
    executor.execute.side_effect = [EXISTS, []]
    service.hierarchy_search(
        {"id": "27", "type": "state", "direction": "child", "target": ["district"], "keyword": "a" * 100}
    )
    with pytest.raises(LocationValidationError) as excinfo:
        service.hierarchy_search(
            {"id": "27", "type": "state", "direction": "child", "keyword": "a" * 101}
        )
    assert "too long" in excinfo.value.message


@pytest.mark.parametrize(
    "search_params",
    [
        {"id": "1; DROP TABLE state", "type": "state", "direction": "child"},
        {"id": "27\n", "type": "village", "direction": "child"},
        {"id": "27", "type": "state", "direction": "child", "keyword": "'; DROP TABLE district; --"},
        {"id": "27", "type": "country", "direction": "child"},
        {"id": "27", "type": "state", "direction": "parent", "target": ["district"]},
    ],
)
def test_invalid_requests_run_no_query(service, executor, search_params):
    with pytest.raises(LocationValidationError):
        service.hierarchy_search(search_params)
    executor.execute.assert_not_called()


def test_executor_failure_becomes_internal_error(service, executor):
    executor.execute.side_effect = [EXISTS, RuntimeError("relation district does not exist")]
    with pytest.raises(LocationInternalError) as excinfo:
        service.hierarchy_search({"id": "27", "type": "state", "direction": "child"})
    assert excinfo.value.message == "Failed to complete hierarchy search"
    assert "relation" not in excinfo.value.message
    assert excinfo.value.error_code == "INTERNAL_ERROR"


def test_bad_row_becomes_internal_error(service, executor):
    executor.execute.side_effect = [EXISTS, [{"id": None, "name": "Pune"}]]
    with pytest.raises(LocationInternalError):
        service.hierarchy_search(
            {"id": "27", "type": "state", "direction": "child", "target": ["district"]}
        )


def test_search_is_repeatable(service, executor):
    executor.execute.side_effect = [
        EXISTS,
        [child_row(5, "Pune", 27)],
        EXISTS,
        [child_row(5, "Pune", 27)],
    ]
    search_params = {"id": "27", "type": "state", "direction": "child", "target": ["district"]}
    first = service.hierarchy_search(search_params)
    second = service.hierarchy_search(search_params)
    assert first == second
    sql = executed_sql(executor)
    assert sql[:2] == sql[2:]
