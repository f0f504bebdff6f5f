"""Tests for the room graph."""

from manor.rooms import (
    ROOM_CONNECTIONS,
    ROOMS,
    START_ROOM,
    UNKNOWN_ROOM_DESCRIPTION,
    describe,
    is_adjacent,
    is_room,
    neighbors,
)


def test_every_room_has_connections():
    assert set(ROOM_CONNECTIONS) == set(ROOMS)
    for room in ROOMS:
        assert neighbors(room)
        assert room not in neighbors(room)


def test_neighbors_keep_declared_order():
    assert neighbors("THE UNDERHOUSE") == ("WHISPERING HALL", "FORGOTTEN CELLAR", "THE IRON CHAMBER")


def test_unknown_room_has_no_neighbors():
    assert neighbors("THE ATTIC") == ()
    assert not is_room("THE ATTIC")
    assert describe("THE ATTIC") == UNKNOWN_ROOM_DESCRIPTION


def test_current_layout_is_symmetric():
    for room in ROOMS:
        for other in neighbors(room):
            assert is_adjacent(other, room), f"{other} -> {room} missing"


def test_start_room_reaches_the_cellar_in_two_moves():
    assert START_ROOM == "WHISPERING HALL"
    assert not is_adjacent(START_ROOM, "FORGOTTEN CELLAR")
    assert any(is_adjacent(mid, "FORGOTTEN CELLAR") for mid in neighbors(START_ROOM))
