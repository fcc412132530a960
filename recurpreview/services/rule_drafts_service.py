from __future__ import annotations

from datetime import date
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from recurpreview.models.rule_drafts import RuleDraftRecord
from recurpreview.services.rule_model import RecurrenceRule, RuleDraft, change_type, draft_from_rule, validate

logger = logging.getLogger(__name__)


class RuleDraftNotFoundError(ValueError):
    pass


class RuleDraftConflictError(ValueError):
    pass


def _format_days(days_of_week: tuple[int, ...]) -> str | None:
    if not days_of_week:
        return None
    return ",".join(str(day) for day in days_of_week)


def _parse_days(raw: str | None) -> tuple[int, ...]:
    if not raw:
        return ()
    return tuple(int(part) for part in raw.split(",") if part.strip())


def record_to_draft(record: RuleDraftRecord) -> RuleDraft:
    return RuleDraft(
        recurrence_type=record.recurrence_type,
        interval=record.interval,
        start_date=record.start_date,
        end_date=record.end_date,
        days_of_week=_parse_days(record.days_of_week),
        month_day=record.month_day,
        month_week=record.month_week,
        month_week_day=record.month_week_day,
    )


def rule_for_record(record: RuleDraftRecord) -> RecurrenceRule:
    return validate(record_to_draft(record))


def _write_rule(record: RuleDraftRecord, rule: RecurrenceRule) -> None:
    # The whole value is overwritten, so fields of a previous rule type never linger.
    draft = draft_from_rule(rule)
    record.recurrence_type = draft.recurrence_type
    record.interval = draft.interval
    record.start_date = draft.start_date
    record.end_date = draft.end_date
    record.days_of_week = _format_days(draft.days_of_week)
    record.month_day = draft.month_day
    record.month_week = draft.month_week
    record.month_week_day = draft.month_week_day


def list_rule_drafts(session: Session) -> list[RuleDraftRecord]:
    return session.scalars(select(RuleDraftRecord).order_by(RuleDraftRecord.id.asc())).all()


def get_rule_draft(session: Session, draft_id: int) -> RuleDraftRecord:
    record = session.get(RuleDraftRecord, draft_id)
    if record is None:
        raise RuleDraftNotFoundError(f"Rule draft {draft_id} not found")
    return record


def create_rule_draft(session: Session, *, name: str, draft: RuleDraft) -> RuleDraftRecord:
    rule = validate(draft)
    record = RuleDraftRecord(name=name.strip())
    _write_rule(record, rule)
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info(
        "Rule draft created draft_id=%s type=%s version=%s",
        record.id,
        record.recurrence_type,
        record.version,
    )
    return record


def _commit_edit(session: Session, record: RuleDraftRecord, *, expected_version: int, rule: RecurrenceRule) -> RuleDraftRecord:
    if record.version != expected_version:
        raise RuleDraftConflictError(
            f"Rule draft {record.id} is at version {record.version}, not {expected_version}"
        )

    draft_id = record.id
    _write_rule(record, rule)
    try:
        session.commit()
    except StaleDataError as exc:
        # A concurrent writer bumped the version between our read and the UPDATE.
        session.rollback()
        raise RuleDraftConflictError(f"Rule draft {draft_id} was modified concurrently") from exc
    session.refresh(record)
    logger.info(
        "Rule draft updated draft_id=%s type=%s version=%s",
        record.id,
        record.recurrence_type,
        record.version,
    )
    return record


def update_rule_draft(
    session: Session,
    *,
    draft_id: int,
    expected_version: int,
    draft: RuleDraft,
) -> RuleDraftRecord:
    record = get_rule_draft(session, draft_id)
    # Validation happens before any field is touched; a rejected edit leaves the stored value as is.
    rule = validate(draft)
    return _commit_edit(session, record, expected_version=expected_version, rule=rule)


def change_rule_draft_type(
    session: Session,
    *,
    draft_id: int,
    expected_version: int,
    recurrence_type: str,
    anchor_date: date | None = None,
) -> RuleDraftRecord:
    record = get_rule_draft(session, draft_id)
    rule = validate(change_type(record_to_draft(record), recurrence_type, anchor_date))
    return _commit_edit(session, record, expected_version=expected_version, rule=rule)

