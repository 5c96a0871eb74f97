from datetime import datetime, timedelta, timezone

import pytest

from worktime.models import WorkInterval
from worktime.recorder import Activity, ActivityRecorder, Commit, Note
from worktime.store import IntervalStore

T0 = datetime(2023, 5, 2, 9, 0)


def minutes(value: float) -> datetime:
    return T0 + timedelta(minutes=value)


def make_recorder(timeout: timedelta = timedelta(minutes=10)):
    store = IntervalStore()
    return store, ActivityRecorder(store, idle_timeout=timeout, started_at=T0)


def test_activity_within_timeout_commits_nothing():
    store, recorder = make_recorder()

    for offset in range(0, 60, 5):
        recorder.activity(minutes(offset))

    assert len(store) == 0
    recorder.commit()
    assert store.snapshot() == [WorkInterval(T0, minutes(55))]


def test_idle_gap_closes_interval_and_opens_a_new_one():
    store, recorder = make_recorder()

    recorder.activity(minutes(1))
    recorder.activity(minutes(5))
    recorder.activity(minutes(30))

    assert store.snapshot() == [WorkInterval(T0, minutes(5))]
    assert recorder.state.last_start_time == minutes(30)
    assert recorder.state.last_event_time == minutes(30)


def test_gap_equal_to_timeout_does_not_split():
    store, recorder = make_recorder()

    recorder.activity(minutes(10))

    assert len(store) == 0
    assert recorder.state.last_start_time == T0


def test_periodic_commits_extend_the_open_interval():
    store, recorder = make_recorder()

    recorder.activity(minutes(1))
    recorder.commit()
    recorder.activity(minutes(2))
    recorder.commit()

    assert store.snapshot() == [WorkInterval(T0, minutes(2))]


def test_commit_after_idle_gap_keeps_both_intervals():
    store, recorder = make_recorder()

    recorder.activity(minutes(5))
    recorder.activity(minutes(40))
    recorder.activity(minutes(45))
    recorder.commit()

    assert store.snapshot() == [
        WorkInterval(T0, minutes(5)),
        WorkInterval(minutes(40), minutes(45)),
    ]


def test_notes_accumulate_and_reset_after_idle_gap():
    store, recorder = make_recorder()

    recorder.add_note("review ")
    recorder.add_note("PR 12")
    recorder.activity(minutes(1))
    recorder.activity(minutes(20))

    assert store.snapshot()[0].note == "review PR 12"
    assert recorder.state.note == ""


def test_note_does_not_change_timing():
    _, recorder = make_recorder()
    recorder.activity(minutes(3))

    recorder.handle(Note("standup"))

    assert recorder.state.last_event_time == minutes(3)
    assert recorder.state.last_start_time == T0


def test_commit_keeps_note_for_the_open_interval():
    store, recorder = make_recorder()

    recorder.handle(Note("planning"))
    recorder.handle(Activity(minutes(4)))
    recorder.handle(Commit())

    assert store.snapshot() == [WorkInterval(T0, minutes(4), "planning")]
    assert recorder.state.note == "planning"


def test_timeout_is_configurable():
    store, recorder = make_recorder(timeout=timedelta(seconds=10))

    recorder.activity(T0 + timedelta(seconds=5))
    recorder.activity(T0 + timedelta(seconds=30))

    assert store.snapshot() == [WorkInterval(T0, T0 + timedelta(seconds=5))]


def test_unknown_event_is_rejected():
    _, recorder = make_recorder()

    with pytest.raises(TypeError):
        recorder.handle("tick")  # type: ignore[arg-type]


def test_spring_forward_gap_is_measured_in_real_time(local_zone):
    store = IntervalStore()
    recorder = ActivityRecorder(
        store, started_at=datetime(2023, 3, 26, 1, 50, tzinfo=local_zone)
    )

    recorder.activity(datetime(2023, 3, 26, 1, 58, tzinfo=local_zone))
    recorder.activity(datetime(2023, 3, 26, 3, 1, tzinfo=local_zone))

    assert len(store) == 0
    recorder.commit()
    assert store.snapshot()[0].duration == timedelta(minutes=11)


def test_fall_back_interval_commits_across_the_repeated_hour(local_zone):
    first = datetime(2023, 10, 29, 0, 30, tzinfo=timezone.utc)
    store = IntervalStore()
    recorder = ActivityRecorder(store, started_at=first.astimezone(local_zone))

    for step in range(1, 8):
        recorder.activity((first + timedelta(minutes=5 * step)).astimezone(local_zone))
    recorder.commit()

    (entry,) = store.snapshot()
    assert entry.start.isoformat() == "2023-10-29T02:30:00+02:00"
    assert entry.end.isoformat() == "2023-10-29T02:05:00+01:00"
    assert entry.duration == timedelta(minutes=35)


def test_activity_earlier_than_the_last_one_is_ignored():
    store, recorder = make_recorder()

    recorder.activity(minutes(5))
    recorder.activity(minutes(2))

    assert recorder.state.last_event_time == minutes(5)
    recorder.commit()
    assert store.snapshot() == [WorkInterval(T0, minutes(5))]


def test_activity_before_the_start_does_not_break_commits():
    store, recorder = make_recorder()

    recorder.activity(T0 - timedelta(seconds=2))
    recorder.commit()

    assert store.snapshot() == [WorkInterval(T0, T0)]
