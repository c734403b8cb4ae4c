import pytest
from sqlalchemy import text

from geohierarchy.core.location.errors import LocationNotFoundError
from geohierarchy.locationdb.executor_interface import LocationDbType
from geohierarchy.locationdb.sqlalchemy_client import SqliteLocationClient, to_named_binds
from geohierarchy.services.location_service import LocationHierarchyService

SCHEMA = [
    "CREATE TABLE state (state_id INTEGER PRIMARY KEY, state_name TEXT, state_code TEXT,"
    " is_found_in_census INTEGER, is_active INTEGER)",
    "CREATE TABLE district (district_id INTEGER PRIMARY KEY, district_name TEXT,"
    " state_id INTEGER, is_found_in_census INTEGER, is_active INTEGER)",
    "CREATE TABLE block (block_id INTEGER PRIMARY KEY, block_name TEXT,"
    " district_id INTEGER, is_found_in_census INTEGER, is_active INTEGER)",
    "CREATE TABLE village (village_id INTEGER PRIMARY KEY, village_name TEXT,"
    " block_id INTEGER, is_found_in_census INTEGER, is_active INTEGER)",
]

ROWS = [
    "INSERT INTO state VALUES (27, 'Maharashtra', 'MH', 1, 1)",
    "INSERT INTO state VALUES (29, 'Karnataka', 'KA', 1, NULL)",
    "INSERT INTO district VALUES (12, 'Pune', 27, 1, 1)",
    "INSERT INTO district VALUES (13, 'Nashik', 27, NULL, NULL)",
    "INSERT INTO district VALUES (14, 'Old Pune', 27, 1, 0)",
    "INSERT INTO district VALUES (20, 'Mysuru', 29, 1, 1)",
    "INSERT INTO block VALUES (30, 'Haveli', 12, 1, 1)",
    "INSERT INTO block VALUES (31, 'Khed Block', 12, 0, 1)",
    "INSERT INTO village VALUES (900, 'Khed', 30, 1, 1)",
    "INSERT INTO village VALUES (901, 'Alandi', 30, 1, NULL)",
    "INSERT INTO village VALUES (902, 'Wagholi', 31, 1, 0)",
    "INSERT INTO village VALUES (903, 'Orphan', 99, 1, 1)",
]


@pytest.fixture
def client():
    client = SqliteLocationClient()
    with client.engine.begin() as connection:
        for statement in SCHEMA + ROWS:
            connection.execute(text(statement))
    yield client
    client.dispose()


@pytest.fixture
def service(client):
    return LocationHierarchyService(client)


def test_to_named_binds():
    statement, params = to_named_binds("SELECT 1 WHERE a = $1 AND (b = $2 OR c = $2)", [5, "x"])
    assert statement == "SELECT 1 WHERE a = :p1 AND (b = :p2 OR c = :p2)"
    assert params == {"p1": 5, "p2": "x"}


def test_to_named_binds_needs_every_parameter():
    with pytest.raises(ValueError):
        to_named_binds("SELECT 1 WHERE a = $2", [5])


def test_execute_returns_dicts(client):
    rows = client.execute("SELECT state_id, state_name FROM state WHERE state_id = $1", [27])
    assert rows == [{"state_id": 27, "state_name": "Maharashtra"}]
    assert client.get_dbtype() == LocationDbType.SQLITE


def test_direct_children_skip_inactive(service):
    response = service.hierarchy_search(
        {"id": "27", "type": "state", "direction": "child", "target": ["district"]}
    )
    assert [item["name"] for item in response["data"]] == ["Nashik", "Pune"]
    nashik = response["data"][0]
    assert nashik["is_active"] is None
    assert nashik["is_found_in_census"] == 0
    assert nashik["parent_id"] == 27


def test_villages_under_state(service):
    response = service.hierarchy_search(
        {"id": "27", "type": "state", "direction": "child", "target": ["village"]}
    )
    assert [item["name"] for item in response["data"]] == ["Alandi", "Khed"]
    assert {item["type"] for item in response["data"]} == {"village"}
    assert {item["parent_id"] for item in response["data"]} == {30}


def test_children_with_keyword(service):
    response = service.hierarchy_search(
        {"id": "12", "type": "district", "direction": "child", "keyword": "KHED"}
    )
    assert [(item["type"], item["name"]) for item in response["data"]] == [
        ("block", "Khed Block"),
        ("village", "Khed"),
    ]
    assert response["searchParams"]["keyword"] == "KHED"


def test_ancestors_of_village(service):
    response = service.hierarchy_search({"id": "900", "type": "village", "direction": "parent"})
    assert [(item["type"], item["id"]) for item in response["data"]] == [
        ("block", 30),
        ("district", 12),
        ("state", 27),
    ]
    assert response["data"][0]["parent_id"] == 12
    assert response["data"][2]["state_code"] == "MH"


def test_ancestors_with_keyword_match_any_level(service):
    response = service.hierarchy_search(
        {"id": "900", "type": "village", "direction": "parent", "keyword": "maha", "target": ["state"]}
    )
    assert [item["name"] for item in response["data"]] == ["Maharashtra"]

    response = service.hierarchy_search(
        {"id": "900", "type": "village", "direction": "parent", "keyword": "mysuru"}
    )
    assert response["data"] == []


def test_ancestors_of_orphan_village(service):
    response = service.hierarchy_search({"id": "903", "type": "village", "direction": "parent"})
    assert response["data"] == []


def test_unknown_location(service):
    with pytest.raises(LocationNotFoundError):
        service.hierarchy_search({"id": "999999", "type": "district", "direction": "child"})
