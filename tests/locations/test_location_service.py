from __future__ import annotations

import pytest

from attendees.core.exceptions import (
    CannotDeleteLastLocation,
    InvalidReference,
    NoLocationConfigured,
    ValidationError,
)


def test_add_and_list_locations(world):
    activity = world.activity()
    svc = world.container.location_service

    new_id = svc.add(activity, "  Annex ")

    assert [loc.name for loc in svc.list_locations(activity)] == ["Main hall", "Annex"]
    assert svc.get(activity, new_id).name == "Annex"


def test_add_rejects_blank_name(world):
    activity = world.activity()
    with pytest.raises(ValidationError):
        world.container.location_service.add(activity, "   ")


def test_rename_location(world):
    activity = world.activity()
    svc = world.container.location_service
    location = svc.list_locations(activity)[0]

    svc.rename(activity, location.location_id, "Reception")

    assert svc.get(activity, location.location_id).name == "Reception"


def test_cannot_delete_last_location(world):
    activity = world.activity()
    svc = world.container.location_service
    only = svc.list_locations(activity)[0]

    with pytest.raises(CannotDeleteLastLocation):
        svc.delete(activity, only.location_id)
    assert len(svc.list_locations(activity)) == 1


def test_delete_one_of_several_locations(world):
    activity = world.activity()
    svc = world.container.location_service
    extra = svc.add(activity, "Annex")

    svc.delete(activity, extra)

    assert [loc.name for loc in svc.list_locations(activity)] == ["Main hall"]


def test_location_of_another_activity_is_invalid(world):
    activity = world.activity()
    other = world.activity()
    foreign = world.locations.list_for_activity(other.activity_id)[0].location_id
    svc = world.container.location_service

    with pytest.raises(InvalidReference):
        svc.get(activity, foreign)
    with pytest.raises(InvalidReference):
        svc.delete(activity, foreign)


def test_resolve_defaults_to_first_location(world):
    activity = world.activity()
    svc = world.container.location_service
    svc.add(activity, "Annex")

    assert svc.resolve(activity).name == "Main hall"


def test_resolve_without_locations(world):
    activity = world.activity(with_location=False)
    with pytest.raises(NoLocationConfigured):
        world.container.location_service.resolve(activity)
