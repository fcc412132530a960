from __future__ import annotations

from datetime import date

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

import recurpreview.models  # noqa: F401
from recurpreview.models.base import Base
from recurpreview.models.rule_drafts import RuleDraftRecord
from recurpreview.services.rule_drafts_service import (
    RuleDraftConflictError,
    RuleDraftNotFoundError,
    change_rule_draft_type,
    create_rule_draft,
    get_rule_draft,
    list_rule_drafts,
    rule_for_record,
    update_rule_draft,
)
from recurpreview.services.rule_errors import InvalidInterval
from recurpreview.services.rule_model import MonthlyByWeekdayRule, RuleDraft, WeeklyRule


def _make_session(tmp_path) -> Session:
    db_path = tmp_path / "rule_drafts_test.db"
    engine = create_engine(f"sqlite:///{db_path}", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SessionLocal()


def _weekly_draft(**overrides) -> RuleDraft:
    fields = {
        "recurrence_type": "weekly",
        "start_date": date(2026, 1, 5),
        "days_of_week": (5, 1, 3),
    }
    fields.update(overrides)
    return RuleDraft(**fields)


def test_create_stores_normalized_rule_at_version_one(tmp_path) -> None:
    session = _make_session(tmp_path)
    try:
        record = create_rule_draft(session, name="  Standup ", draft=_weekly_draft())

        assert record.id is not None
        assert record.name == "Standup"
        assert record.version == 1
        assert record.days_of_week == "1,3,5"
        assert record.month_day is None

        rule = rule_for_record(record)
        assert isinstance(rule, WeeklyRule)
        assert rule.days_of_week == (1, 3, 5)
        assert [row.id for row in list_rule_drafts(session)] == [record.id]
    finally:
        session.close()


def test_invalid_draft_is_never_stored(tmp_path) -> None:
    session = _make_session(tmp_path)
    try:
        try:
            create_rule_draft(session, name="Broken", draft=_weekly_draft(interval=0))
        except InvalidInterval:
            pass
        else:
            raise AssertionError("Expected InvalidInterval")
        assert session.query(RuleDraftRecord).count() == 0
    finally:
        session.close()


def test_update_bumps_version_and_rejects_stale_writes(tmp_path) -> None:
    session = _make_session(tmp_path)
    try:
        record = create_rule_draft(session, name="Standup", draft=_weekly_draft())

        updated = update_rule_draft(
            session,
            draft_id=record.id,
            expected_version=1,
            draft=_weekly_draft(interval=2),
        )
        assert updated.version == 2
        assert updated.interval == 2

        try:
            update_rule_draft(session, draft_id=record.id, expected_version=1, draft=_weekly_draft(interval=3))
        except RuleDraftConflictError as exc:
            assert "version 2" in str(exc)
        else:
            raise AssertionError("Expected RuleDraftConflictError")

        assert get_rule_draft(session, record.id).interval == 2
    finally:
        session.close()


def test_rejected_edit_keeps_prior_value(tmp_path) -> None:
    session = _make_session(tmp_path)
    try:
        record = create_rule_draft(session, name="Standup", draft=_weekly_draft())

        try:
            update_rule_draft(
                session,
                draft_id=record.id,
                expected_version=1,
                draft=_weekly_draft(days_of_week=()),
            )
        except ValueError:
            pass
        else:
            raise AssertionError("Expected a validation error")

        session.expire_all()
        stored = get_rule_draft(session, record.id)
        assert stored.version == 1
        assert stored.days_of_week == "1,3,5"
    finally:
        session.close()


def test_change_type_applies_defaults_and_clears_old_fields(tmp_path) -> None:
    session = _make_session(tmp_path)
    try:
        record = create_rule_draft(session, name="Standup", draft=_weekly_draft())

        changed = change_rule_draft_type(
            session,
            draft_id=record.id,
            expected_version=1,
            recurrence_type="monthly_by_weekday",
            anchor_date=date(2026, 1, 29),
        )

        assert changed.version == 2
        assert changed.recurrence_type == "monthly_by_weekday"
        assert changed.days_of_week is None
        assert (changed.month_week, changed.month_week_day) == ("last", 4)
        assert isinstance(rule_for_record(changed), MonthlyByWeekdayRule)
    finally:
        session.close()


def test_missing_draft_raises_not_found(tmp_path) -> None:
    session = _make_session(tmp_path)
    try:
        try:
            get_rule_draft(session, 404)
        except RuleDraftNotFoundError as exc:
            assert "404" in str(exc)
        else:
            raise AssertionError("Expected RuleDraftNotFoundError")
    finally:
        session.close()
