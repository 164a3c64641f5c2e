"""Tests del materializador diario (puro, sin BD)."""

import logging
from datetime import date, datetime, time, timezone

from compliance_api.core.domain.models import OccurrenceStatus, RecurrenceKind, RecurrenceRule
from compliance_api.scheduling import materialize_today, plan_today

DAY = date(2024, 3, 11)  # lunes


def make_rule(id: str, **overrides) -> RecurrenceRule:
    fields = dict(
        id=id,
        company_id="c1",
        site_id="s1",
        template_id="t1",
        due_time=time(9, 0),
        recurrence=RecurrenceKind.DAILY,
        valid_from=date(2024, 1, 1),
    )
    fields.update(overrides)
    return RecurrenceRule(**fields)


def test_drafts_for_applicable_rules():
    rules = [
        make_rule("daily"),
        make_rule("monday", recurrence=RecurrenceKind.WEEKLY, weekdays=(1,), due_time=time(14, 30)),
        make_rule("tuesday", recurrence=RecurrenceKind.WEEKLY, weekdays=(2,)),
    ]

    drafts = materialize_today(rules, DAY)

    assert [d.rule_id for d in drafts] == ["daily", "monday"]
    assert drafts[1].due_at == datetime(2024, 3, 11, 14, 30, tzinfo=timezone.utc)
    assert all(d.status == OccurrenceStatus.OPEN for d in drafts)


def test_draft_insert_params_use_schedule_id():
    draft = materialize_today([make_rule("r9")], DAY)[0]

    params = draft.to_insert_params()

    assert params["schedule_id"] == "r9"
    assert params["status"] == "open"
    assert draft.natural_key == ("r9", datetime(2024, 3, 11, 9, 0, tzinfo=timezone.utc))


def test_inactive_rules_not_evaluated():
    plan = plan_today([make_rule("off", active=False)], DAY)

    assert plan.drafts == []
    assert plan.skipped == []
    assert plan.evaluated == 0


def test_malformed_rule_skipped_without_aborting(caplog):
    rules = [
        make_rule("bad", recurrence=RecurrenceKind.MONTHLY),
        make_rule("good"),
    ]

    with caplog.at_level(logging.WARNING):
        plan = plan_today(rules, DAY)

    assert [d.rule_id for d in plan.drafts] == ["good"]
    assert plan.skipped == ["bad"]
    assert "materialize_skip_malformed rule=bad" in caplog.text


def test_orphan_template_and_site_skipped(caplog):
    rules = [
        make_rule("gone-template", template_id="t-deleted"),
        make_rule("gone-site", site_id="s-deleted"),
        make_rule("ok"),
    ]

    with caplog.at_level(logging.WARNING):
        plan = plan_today(rules, DAY, live_template_ids={"t1"}, live_site_ids={"s1"})

    assert [d.rule_id for d in plan.drafts] == ["ok"]
    assert sorted(plan.skipped) == ["gone-site", "gone-template"]
    assert "materialize_skip_orphan rule=gone-template" in caplog.text


def test_no_live_sets_means_no_orphan_check():
    plan = plan_today([make_rule("x", template_id="anything")], DAY)

    assert len(plan.drafts) == 1


def test_rerun_yields_identical_drafts():
    rules = [make_rule("a"), make_rule("b", due_time=time(17, 0))]

    first = materialize_today(rules, DAY)
    second = materialize_today(rules, DAY)

    assert [d.natural_key for d in first] == [d.natural_key for d in second]
