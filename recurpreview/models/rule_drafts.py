from __future__ import annotations

from datetime import date

from sqlalchemy import CheckConstraint, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from recurpreview.models.base import Base, TimestampMixin


class RuleDraftRecord(TimestampMixin, Base):
    __tablename__ = "rule_drafts"
    __table_args__ = (
        CheckConstraint(
            "recurrence_type IN ('daily','weekly','monthly_by_day','monthly_by_weekday','yearly')",
            name="ck_rule_drafts_recurrence_type",
        ),
        CheckConstraint("repeat_interval >= 1", name="ck_rule_drafts_repeat_interval"),
        CheckConstraint("version >= 1", name="ck_rule_drafts_version"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    recurrence_type: Mapped[str] = mapped_column(String(24), nullable=False)
    interval: Mapped[int] = mapped_column("repeat_interval", Integer, nullable=False, default=1)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Comma-separated weekday numbers, 0=Sunday.
    days_of_week: Mapped[str | None] = mapped_column(String(32), nullable=True)
    month_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    month_week: Mapped[str | None] = mapped_column(String(8), nullable=True)
    month_week_day: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Every UPDATE bumps the version and fails with StaleDataError if another writer got there first.
    __mapper_args__ = {"version_id_col": version}
