from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from recurpreview.config import get_settings
from recurpreview.db import get_db_session
from recurpreview.models.rule_drafts import RuleDraftRecord
from recurpreview.services.bound_policy import Bound, NonProgressingSequence
from recurpreview.services.calendar_view_service import CalendarMonthView, build_month_view, grid_last_day
from recurpreview.services.nth_weekday import resolve_nth_weekday
from recurpreview.services.occurrence_generator import generate
from recurpreview.services.rule_drafts_service import (
    RuleDraftConflictError,
    RuleDraftNotFoundError,
    change_rule_draft_type,
    create_rule_draft,
    get_rule_draft,
    list_rule_drafts,
    record_to_draft,
    rule_for_record,
    update_rule_draft,
)
from recurpreview.services.rule_errors import RuleValidationError
from recurpreview.services.rule_model import RecurrenceRule, RuleDraft, defaults_for_type, draft_from_rule, validate

api_router = APIRouter(tags=["api"])
settings = get_settings()


class RuleDraftRequest(BaseModel):
    recurrence_type: str
    interval: int = 1
    start_date: date
    end_date: date | None = None
    days_of_week: list[int] = Field(default_factory=list)
    month_day: int | None = None
    month_week: str | None = None
    month_week_day: int | None = None

    def to_draft(self) -> RuleDraft:
        return RuleDraft(
            recurrence_type=self.recurrence_type,
            interval=self.interval,
            start_date=self.start_date,
            end_date=self.end_date,
            days_of_week=tuple(self.days_of_week),
            month_day=self.month_day,
            month_week=self.month_week,
            month_week_day=self.month_week_day,
        )


class RuleDefaultsRequest(BaseModel):
    recurrence_type: str
    anchor_date: date | None = None


class PreviewRequest(BaseModel):
    rule: RuleDraftRequest
    max_count: int | None = Field(default=None, ge=1, le=settings.max_preview_count)
    hard_end_date: date | None = None


class CalendarRequest(BaseModel):
    rule: RuleDraftRequest
    year: int | None = Field(default=None, ge=1, le=9999)
    month: int | None = Field(default=None, ge=1, le=12)
    max_count: int | None = Field(default=None, ge=1, le=settings.max_preview_count)


class RuleDraftCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    rule: RuleDraftRequest


class RuleDraftUpdateRequest(BaseModel):
    expected_version: int = Field(ge=1)
    rule: RuleDraftRequest


class RuleDraftTypeRequest(BaseModel):
    expected_version: int = Field(ge=1)
    recurrence_type: str
    anchor_date: date | None = None


class RuleDraftResponse(BaseModel):
    id: int
    name: str
    version: int
    rule: dict[str, object]

    @classmethod
    def from_model(cls, record: RuleDraftRecord) -> "RuleDraftResponse":
        return cls(
            id=record.id,
            name=record.name,
            version=record.version,
            rule=_serialize_draft(record_to_draft(record)),
        )


def _serialize_draft(draft: RuleDraft) -> dict[str, object]:
    return {
        "recurrence_type": draft.recurrence_type,
        "interval": draft.interval,
        "start_date": draft.start_date.isoformat(),
        "end_date": None if draft.end_date is None else draft.end_date.isoformat(),
        "days_of_week": list(draft.days_of_week),
        "month_day": draft.month_day,
        "month_week": draft.month_week,
        "month_week_day": draft.month_week_day,
    }


def _serialize_month_view(view: CalendarMonthView) -> dict[str, object]:
    return {
        "year": view.year,
        "month": view.month,
        "selected_count": view.selected_count,
        "weeks": [
            [
                {
                    "date": cell.day.isoformat(),
                    "in_month": cell.in_month,
                    "selected": cell.selected,
                }
                for cell in week
            ]
            for week in view.weeks
        ],
    }


def _rule_error(exc: RuleValidationError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"error": exc.code, "field": exc.field, "message": exc.message},
    )


def _validate_or_400(payload: RuleDraftRequest) -> RecurrenceRule:
    try:
        return validate(payload.to_draft())
    except RuleValidationError as exc:
        raise _rule_error(exc) from exc


def _preview_bound(rule: RecurrenceRule, *, max_count: int | None, hard_end_date: date | None) -> Bound:
    if max_count is None:
        # Interactive previews always carry a count; an end date alone can still span decades.
        has_end = hard_end_date is not None or rule.end_date is not None
        max_count = settings.max_preview_count if has_end else settings.default_preview_count
    return Bound(max_count=max_count, hard_end_date=hard_end_date)


def _generate_or_error(rule: RecurrenceRule, bound: Bound) -> list[date]:
    try:
        return generate(rule, bound)
    except NonProgressingSequence as exc:
        raise HTTPException(
            status_code=500,
            detail={
                "error": "NonProgressingSequence",
                "message": str(exc),
                "occurrences": [item.isoformat() for item in exc.occurrences],
            },
        ) from exc


def _get_draft_or_404(db: Session, draft_id: int) -> RuleDraftRecord:
    try:
        return get_rule_draft(db, draft_id)
    except RuleDraftNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@api_router.get("/health")
def health_check(db: Session = Depends(get_db_session)) -> dict[str, str]:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=503, detail="database unavailable") from exc
    return {"status": "ok"}


@api_router.post("/rules/validate")
def validate_rule_api(payload: RuleDraftRequest) -> dict[str, object]:
    rule = _validate_or_400(payload)
    return {"valid": True, "rule": _serialize_draft(draft_from_rule(rule))}


@api_router.post("/rules/defaults")
def rule_defaults_api(payload: RuleDefaultsRequest) -> dict[str, object]:
    anchor = payload.anchor_date or date.today()
    try:
        defaults = defaults_for_type(payload.recurrence_type, anchor)
    except RuleValidationError as exc:
        raise _rule_error(exc) from exc
    if "days_of_week" in defaults:
        defaults["days_of_week"] = list(defaults["days_of_week"])
    return {
        "recurrence_type": payload.recurrence_type,
        "anchor_date": anchor.isoformat(),
        "defaults": defaults,
    }


@api_router.post("/occurrences/preview")
def preview_occurrences_api(payload: PreviewRequest) -> dict[str, object]:
    rule = _validate_or_400(payload.rule)
    bound = _preview_bound(rule, max_count=payload.max_count, hard_end_date=payload.hard_end_date)
    occurrences = _generate_or_error(rule, bound)
    return {
        "occurrences": [item.isoformat() for item in occurrences],
        "count": len(occurrences),
        "max_count": bound.max_count,
    }


@api_router.post("/occurrences/calendar")
def calendar_month_api(payload: CalendarRequest) -> dict[str, object]:
    rule = _validate_or_400(payload.rule)
    year = payload.year or rule.start_date.year
    month = payload.month or rule.start_date.month
    grid_end = grid_last_day(year, month)
    if grid_end < rule.start_date:
        return _serialize_month_view(build_month_view([], year=year, month=month))
    # The shown grid bounds generation, so every occurrence inside it is selected.
    occurrences = _generate_or_error(rule, Bound(max_count=payload.max_count, hard_end_date=grid_end))
    return _serialize_month_view(build_month_view(occurrences, year=year, month=month))


@api_router.get("/nth-weekday")
def nth_weekday_api(
    year: int = Query(ge=1, le=9999),
    month: int = Query(ge=1, le=12),
    ordinal: str = Query(),
    weekday: int = Query(),
) -> dict[str, object]:
    try:
        resolved = resolve_nth_weekday(year, month, ordinal, weekday)
    except RuleValidationError as exc:
        raise _rule_error(exc) from exc
    return {
        "year": year,
        "month": month,
        "ordinal": ordinal,
        "weekday": weekday,
        "date": resolved.isoformat(),
    }


@api_router.get("/rule-drafts", response_model=list[RuleDraftResponse])
def rule_drafts_list(db: Session = Depends(get_db_session)) -> list[RuleDraftResponse]:
    return [RuleDraftResponse.from_model(record) for record in list_rule_drafts(db)]


@api_router.post("/rule-drafts", response_model=RuleDraftResponse, status_code=201)
def rule_drafts_create(payload: RuleDraftCreateRequest, db: Session = Depends(get_db_session)) -> RuleDraftResponse:
    try:
        record = create_rule_draft(db, name=payload.name, draft=payload.rule.to_draft())
    except RuleValidationError as exc:
        raise _rule_error(exc) from exc
    return RuleDraftResponse.from_model(record)


@api_router.get("/rule-drafts/{draft_id}", response_model=RuleDraftResponse)
def rule_drafts_get(draft_id: int, db: Session = Depends(get_db_session)) -> RuleDraftResponse:
    return RuleDraftResponse.from_model(_get_draft_or_404(db, draft_id))


@api_router.post("/rule-drafts/{draft_id}/update", response_model=RuleDraftResponse)
def rule_drafts_update(
    draft_id: int,
    payload: RuleDraftUpdateRequest,
    db: Session = Depends(get_db_session),
) -> RuleDraftResponse:
    try:
        record = update_rule_draft(
            db,
            draft_id=draft_id,
            expected_version=payload.expected_version,
            draft=payload.rule.to_draft(),
        )
    except RuleDraftNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RuleDraftConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except RuleValidationError as exc:
        raise _rule_error(exc) from exc
    return RuleDraftResponse.from_model(record)


@api_router.post("/rule-drafts/{draft_id}/type", response_model=RuleDraftResponse)
def rule_drafts_change_type(
    draft_id: int,
    payload: RuleDraftTypeRequest,
    db: Session = Depends(get_db_session),
) -> RuleDraftResponse:
    try:
        record = change_rule_draft_type(
            db,
            draft_id=draft_id,
            expected_version=payload.expected_version,
            recurrence_type=payload.recurrence_type,
            anchor_date=payload.anchor_date,
        )
    except RuleDraftNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RuleDraftConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except RuleValidationError as exc:
        raise _rule_error(exc) from exc
    return RuleDraftResponse.from_model(record)


@api_router.get("/rule-drafts/{draft_id}/preview")
def rule_drafts_preview(
    draft_id: int,
    max_count: int | None = Query(default=None, ge=1, le=settings.max_preview_count),
    hard_end_date: date | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    record = _get_draft_or_404(db, draft_id)
    rule = rule_for_record(record)
    bound = _preview_bound(rule, max_count=max_count, hard_end_date=hard_end_date)
    occurrences = _generate_or_error(rule, bound)
    return {
        "draft_id": record.id,
        "version": record.version,
        "occurrences": [item.isoformat() for item in occurrences],
        "count": len(occurrences),
    }
