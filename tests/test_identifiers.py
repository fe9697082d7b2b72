import uuid

from buildings_api.lib.identifiers import ensure_id, new_id


def test_new_id_is_uuid4():
    assert uuid.UUID(new_id()).version == 4


def test_new_ids_are_distinct():
    assert len({new_id() for _ in range(100)}) == 100


def test_ensure_id_keeps_given_id():
    assert ensure_id({"id": "tower-a", "name": "A"}) == {"id": "tower-a", "name": "A"}


def test_ensure_id_generates_missing_or_empty():
    for data in ({"name": "A"}, {"id": "", "name": "A"}, {"id": None}):
        result = ensure_id(data)
        assert uuid.UUID(result["id"])


def test_ensure_id_does_not_mutate_input():
    data = {"name": "A"}
    ensure_id(data)
    assert data == {"name": "A"}
