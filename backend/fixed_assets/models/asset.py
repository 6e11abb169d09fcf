from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fixed_assets.db.database import Base


class Asset(Base):
    """Fixed asset as seen by the depreciation engine.

    Owned by the asset register; this service only reads the financial
    parameters and writes ``current_book_value``.
    """

    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    purchase_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    salvage_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    useful_life_years: Mapped[int | None] = mapped_column(Integer)
    # 'straight_line' | 'declining_balance'
    depreciation_method: Mapped[str | None] = mapped_column(String(30))
    # percent per year, declining balance only
    depreciation_rate: Mapped[Decimal | None] = mapped_column(Numeric(7, 4))
    in_service_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    current_book_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    schedules: Mapped[list["DepreciationScheduleEntry"]] = relationship(  # noqa: F821
        "DepreciationScheduleEntry",
        back_populates="asset",
        order_by="DepreciationScheduleEntry.period_start",
    )
