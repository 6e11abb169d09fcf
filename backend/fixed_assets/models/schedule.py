from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fixed_assets.db.database import Base


class DepreciationScheduleEntry(Base):
    """One row = one posted period for one asset. Append-only."""

    __tablename__ = "asset_depreciation_schedules"
    __table_args__ = (
        # One live posting per asset and period; soft-deleted rows do not count.
        Index(
            "uq_schedule_asset_period",
            "asset_id",
            "period_type",
            "period_start",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), nullable=False, index=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    period_type: Mapped[str] = mapped_column(String(20), nullable=False, default="monthly")
    opening_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    depreciation_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    accumulated_depreciation: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    closing_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    depreciation_method: Mapped[str] = mapped_column(String(30), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime)

    asset: Mapped["Asset"] = relationship("Asset", back_populates="schedules")  # noqa: F821
