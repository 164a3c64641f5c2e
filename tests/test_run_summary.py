from datetime import datetime, timezone

from compliance_api.core.domain.models import Occurrence, OccurrenceStatus
from compliance_api.monitoring import summarize_runs

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def run(id: str, status: str = "open", due=None, completed=None) -> Occurrence:
    return Occurrence(
        id=id,
        company_id="c1",
        site_id="s1",
        status=OccurrenceStatus(status),
        due_at=due,
        completed_at=completed,
    )


def utc(day: int, hh: int, mm: int = 0) -> datetime:
    return datetime(2024, 3, day, hh, mm, tzinfo=timezone.utc)


def test_runs_split_by_utc_day():
    runs = [
        run("late-1", due=utc(9, 8)),
        run("late-2", due=utc(8, 18)),
        run("today-pm", due=utc(10, 15)),
        run("today-am", due=utc(10, 9)),
        run("tomorrow", due=utc(11, 9)),
        run("no-due"),
        run("done-10", "completed", due=utc(10, 9), completed=utc(10, 10)),
        run("done-11", "completed", due=utc(10, 9), completed=utc(10, 11)),
        run("done-yesterday", "completed", due=utc(9, 9), completed=utc(9, 20)),
    ]

    summary = summarize_runs(runs, NOW)

    assert [r.id for r in summary.overdue] == ["late-2", "late-1"]
    assert [r.id for r in summary.due_today] == ["today-am", "today-pm"]
    assert [r.id for r in summary.completed_today] == ["done-11", "done-10"]


def test_open_run_due_earlier_today_is_due_today_not_overdue():
    summary = summarize_runs([run("x", due=utc(10, 0, 5))], NOW)

    assert summary.overdue == []
    assert [r.id for r in summary.due_today] == ["x"]


def test_naive_timestamps_are_utc():
    summary = summarize_runs([run("x", due=datetime(2024, 3, 9, 23, 59))], NOW)

    assert [r.id for r in summary.overdue] == ["x"]
