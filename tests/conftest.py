"""Shared fixtures: the example catalog and an in-memory database double."""

import copy
from unittest.mock import MagicMock

import pytest

from aqlrunner.aql_tools import (
    ConnectionPool,
    ConnectionSettings,
    QueryExecutor,
    load_registry,
)


SAMPLE_CATALOG = {
    "arangodb_endpoint": "http://localhost:8529/",
    "username": "root",
    "password": "s3cret-pw",
    "queries": [
        {
            "name": "Get Users",
            "description": "Retrieve all users older than a given age",
            "query": "FOR u IN users FILTER u.age >= @minAge RETURN u",
            "parameters": [{"name": "minAge", "parameter_type": "number"}],
        },
        {
            "name": "Search Products",
            "description": "Find products in a category above a minimum price",
            "query": "FOR p IN products FILTER p.category == @category "
                     "AND p.price >= @minPrice RETURN p",
            "parameters": [
                {"name": "category", "parameter_type": "string"},
                {"name": "minPrice", "parameter_type": "number"},
            ],
        },
        {
            "name": "Get user graph",
            "description": "Return all users and the friendship edges between them",
            "query": "LET vertices = (FOR u IN users RETURN u) "
                     "LET edges = (FOR f IN friendships RETURN f) "
                     "FOR item IN UNION(vertices, edges) RETURN item",
            "parameters": [],
        },
    ],
}

USERS = [
    {"_id": "users/1", "_key": "1", "name": "Alice", "age": 30},
    {"_id": "users/2", "_key": "2", "name": "Bob", "age": 19},
    {"_id": "users/3", "_key": "3", "name": "Carol", "age": 21},
]

FRIENDSHIPS = [
    {"_id": "friendships/10", "_key": "10", "_from": "users/1", "_to": "users/3", "since": 2020},
    {"_id": "friendships/11", "_key": "11", "_from": "users/3", "_to": "users/9", "since": 2022},
]


def make_cursor(docs):
    """Cursor double: iterable, with close()."""
    cursor = MagicMock()
    cursor.__iter__.return_value = iter(list(docs))
    return cursor


def fake_aql_execute(query, bind_vars=None, **kwargs):
    """Tiny stand-in for the server, keyed on the example templates."""
    bind_vars = bind_vars or {}
    if "FOR u IN users FILTER" in query:
        return make_cursor(u for u in USERS if u["age"] >= bind_vars["minAge"])
    if "UNION(vertices, edges)" in query:
        return make_cursor(USERS + FRIENDSHIPS)
    return make_cursor([])


@pytest.fixture
def catalog():
    return copy.deepcopy(SAMPLE_CATALOG)


@pytest.fixture
def registry(catalog):
    return load_registry(catalog)


@pytest.fixture
def fake_db():
    db = MagicMock()
    db.aql.execute.side_effect = fake_aql_execute
    return db


@pytest.fixture
def settings():
    return ConnectionSettings(
        hosts="http://localhost:8529",
        database="_system",
        username="root",
        password="s3cret-pw",
        pool_size=2,
        acquire_timeout=0.1,
    )


@pytest.fixture
def pool(settings, fake_db):
    return ConnectionPool(settings, factory=lambda s: fake_db)


@pytest.fixture
def executor(registry, pool):
    return QueryExecutor(registry, pool)
