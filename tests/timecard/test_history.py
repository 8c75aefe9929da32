from __future__ import annotations

from datetime import date

from attendees.container import assemble_container
from attendees.core.enums import Direction, SessionState
from attendees.members.model import Member
from attendees.timecard.history import pair_session
from attendees.timecard.model import HistoryFilters, TimecardEvent


def _log(world, activity, member_id, ts, direction):
    location_id = world.locations.list_for_activity(activity.activity_id)[0].location_id
    return world.events.append(
        member_id=member_id,
        activity_id=activity.activity_id,
        location_id=location_id,
        timestamp=ts,
        direction=direction,
        origin_address="",
    )


def test_closed_session_has_duration(world, fixed_now, at):
    activity = world.activity()
    _log(world, activity, 1, at(2026, 2, 2, 8), Direction.IN)
    _log(world, activity, 1, at(2026, 2, 2, 9, 30), Direction.OUT)

    page = world.container.history_service.history(activity, now=fixed_now)

    (session,) = page.sessions
    assert session.state is SessionState.CLOSED
    assert session.sign_out_time == at(2026, 2, 2, 9, 30)
    assert session.duration_seconds == 5400
    assert session.member_name == "Ada Lovelace"
    assert session.location_name == "Main hall"
    assert not page.has_next


def test_open_session_today_runs_until_now(world, fixed_now, at):
    activity = world.activity()
    _log(world, activity, 2, at(2026, 2, 2, 9), Direction.IN)

    (session,) = world.container.history_service.history(activity, now=fixed_now).sessions

    assert session.state is SessionState.OPEN
    assert session.sign_out_time is None
    assert session.duration_seconds == 3600


def test_forgotten_sign_out_from_previous_day_is_flagged(world, fixed_now, at):
    activity = world.activity(auto_sign_out=True)
    _log(world, activity, 2, at(2026, 2, 1, 9), Direction.IN)

    (session,) = world.container.history_service.history(activity, now=fixed_now).sessions

    assert session.state is SessionState.NO_SIGN_OUT
    assert session.anomaly
    assert session.duration_seconds is None


def test_manual_mode_keeps_old_session_open(world, fixed_now, at):
    activity = world.activity(auto_sign_out=False)
    _log(world, activity, 2, at(2026, 2, 1, 9), Direction.IN)

    (session,) = world.container.history_service.history(activity, now=fixed_now).sessions

    assert session.state is SessionState.OPEN
    assert session.duration_seconds == fixed_now - at(2026, 2, 1, 9)


def test_sign_in_without_sign_out_before_next_sign_in(world, fixed_now, at):
    activity = world.activity()
    _log(world, activity, 1, at(2026, 2, 1, 8), Direction.IN)
    _log(world, activity, 1, at(2026, 2, 2, 8), Direction.IN)
    _log(world, activity, 1, at(2026, 2, 2, 9), Direction.OUT)

    newest, oldest = world.container.history_service.history(activity, now=fixed_now).sessions

    assert newest.state is SessionState.CLOSED
    assert newest.duration_seconds == 3600
    assert oldest.state is SessionState.NO_SIGN_OUT
    assert oldest.sign_out_time is None


def test_pair_session_same_second_out_closes(at):
    ts = at(2026, 2, 2, 9)
    sign_in = TimecardEvent(event_id=1, member_id=1, activity_id=1, location_id=1, timestamp=ts, direction=Direction.IN)
    sign_out = TimecardEvent(event_id=2, member_id=1, activity_id=1, location_id=1, timestamp=ts, direction=Direction.OUT)

    state, out_time, duration = pair_session(sign_in, None, sign_out, auto_sign_out=True, now=ts, tz_name="UTC")

    assert (state, out_time, duration) == (SessionState.CLOSED, ts, 0)


def test_history_pages_with_lookahead(world, fixed_now, at):
    activity = world.activity()
    for hour in (6, 7, 8):
        _log(world, activity, 1, at(2026, 2, 2, hour), Direction.IN)
        _log(world, activity, 1, at(2026, 2, 2, hour, 30), Direction.OUT)

    container = assemble_container(
        activities_repo=world.activities,
        locations_repo=world.locations,
        members_repo=world.members,
        events_repo=world.events,
        page_size=2,
    )

    first = container.history_service.history(activity, page=0, now=fixed_now)
    second = container.history_service.history(activity, page=1, now=fixed_now)

    assert [s.sign_in_time for s in first.sessions] == [at(2026, 2, 2, 8), at(2026, 2, 2, 7)]
    assert first.has_next
    assert [s.sign_in_time for s in second.sessions] == [at(2026, 2, 2, 6)]
    assert not second.has_next


def test_history_date_filter_covers_whole_local_days(world, fixed_now, at):
    activity = world.activity()
    _log(world, activity, 1, at(2026, 1, 31, 23, 59), Direction.IN)
    _log(world, activity, 1, at(2026, 2, 1, 0, 0), Direction.IN)
    _log(world, activity, 1, at(2026, 2, 1, 23, 59), Direction.IN)
    _log(world, activity, 1, at(2026, 2, 2, 8), Direction.IN)

    filters = HistoryFilters(from_date=date(2026, 2, 1), to_date=date(2026, 2, 1))
    page = world.container.history_service.history(activity, filters, now=fixed_now)

    assert [s.sign_in_time for s in page.sessions] == [at(2026, 2, 1, 23, 59), at(2026, 2, 1, 0, 0)]


def test_history_member_and_course_filters_intersect(world, fixed_now, at):
    world.members.add(Member(member_id=9, first_name="Katherine", last_name="Johnson"), course_id=2)
    activity = world.activity()
    for member_id in (1, 2, 9):
        _log(world, activity, member_id, at(2026, 2, 2, 8), Direction.IN)

    history = world.container.history_service
    by_course = history.history(activity, HistoryFilters(course_ids=(2,)), now=fixed_now)
    by_member = history.history(activity, HistoryFilters(member_ids=(1, 2)), now=fixed_now)
    both = history.history(activity, HistoryFilters(member_ids=(1, 9), course_ids=(2,)), now=fixed_now)

    assert {s.member_id for s in by_course.sessions} == {9}
    assert {s.member_id for s in by_member.sessions} == {1, 2}
    assert {s.member_id for s in both.sessions} == {9}


def test_rows_are_formatted_for_display(world, fixed_now, at):
    activity = world.activity()
    _log(world, activity, 1, at(2026, 1, 30, 8), Direction.IN)
    _log(world, activity, 1, at(2026, 1, 31, 9, 5, 7), Direction.OUT)
    _log(world, activity, 3, at(2026, 2, 2, 9), Direction.IN)

    history = world.container.history_service
    open_row, closed_row = history.to_rows(history.history(activity, now=fixed_now))

    assert closed_row["sign_in"] == "2026-01-30 08:00:00"
    assert closed_row["sign_out"] == "2026-01-31 09:05:07"
    assert closed_row["duration"] == "1d 01h 05m 07s"
    assert closed_row["status"] == SessionState.CLOSED.value
    assert open_row["sign_out"] == "-"
    assert open_row["duration"] == "01h 00m 00s"


def test_filter_options_only_list_used_values(world, at):
    activity = world.activity()
    world.locations.create(activity_id=activity.activity_id, name="Unused")
    _log(world, activity, 2, at(2026, 2, 2, 8), Direction.IN)

    options = world.container.history_service.filter_options(activity)

    assert options["members"] == [{"member_id": 2, "full_name": "Alan Turing"}]
    assert [loc["name"] for loc in options["locations"]] == ["Main hall"]


def _log_at(world, activity, location_id, ts, direction):
    return world.events.append(
        member_id=1,
        activity_id=activity.activity_id,
        location_id=location_id,
        timestamp=ts,
        direction=direction,
        origin_address="",
    )


def _two_location_day(world, at, **settings):
    activity = world.activity(**settings)
    first = world.locations.list_for_activity(activity.activity_id)[0].location_id
    second = world.locations.create(activity_id=activity.activity_id, name="Annex")
    _log_at(world, activity, first, at(2026, 2, 2, 8), Direction.IN)
    _log_at(world, activity, second, at(2026, 2, 2, 8, 30), Direction.IN)
    _log_at(world, activity, first, at(2026, 2, 2, 9), Direction.OUT)
    return activity, first, second


def test_separate_locations_pair_events_per_location(world, fixed_now, at):
    activity, first, second = _two_location_day(world, at, separate_locations=True)

    sessions = world.container.history_service.history(activity, now=fixed_now).sessions

    assert [(s.location_id, s.state, s.duration_seconds) for s in sessions] == [
        (second, SessionState.OPEN, 5400),
        (first, SessionState.CLOSED, 3600),
    ]


def test_shared_locations_pair_events_across_locations(world, fixed_now, at):
    activity, first, second = _two_location_day(world, at)

    sessions = world.container.history_service.history(activity, now=fixed_now).sessions

    assert [(s.location_id, s.state) for s in sessions] == [
        (second, SessionState.CLOSED),
        (first, SessionState.NO_SIGN_OUT),
    ]
