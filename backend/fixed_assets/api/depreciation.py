import logging
from datetime import date
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from fixed_assets.core.errors import ConfigurationError, DepreciationRunError
from fixed_assets.core.posting import book_value_in_sync, run_depreciation
from fixed_assets.core.projection import project_schedule
from fixed_assets.db.database import get_db
from fixed_assets.models.asset import Asset
from fixed_assets.models.schedule import DepreciationScheduleEntry
from fixed_assets.utils.config_loader import get_cors_origins

logger = logging.getLogger(__name__)

MAX_USEFUL_LIFE_YEARS = 100

router = APIRouter()


class ScheduleEntryResponse(BaseModel):
    id: int
    asset_id: int
    tenant_id: str
    period_start: date
    period_end: date
    period_type: str
    opening_value: float
    depreciation_amount: float
    accumulated_depreciation: float
    closing_value: float
    depreciation_method: str

    model_config = {"from_attributes": True}


class ProjectionRequest(BaseModel):
    purchase_price: Decimal
    salvage_value: Decimal = Decimal("0")
    useful_life_years: int
    depreciation_method: str = "straight_line"
    depreciation_rate: Decimal | None = None
    period_type: Literal["monthly", "quarterly", "yearly"] = "monthly"
    start_date: date

    @field_validator("purchase_price", "salvage_value")
    @classmethod
    def positive_values(cls, v):
        if v < 0:
            raise ValueError("Les montants doivent être positifs.")
        return v

    @field_validator("useful_life_years")
    @classmethod
    def bounded_life(cls, v):
        if v > MAX_USEFUL_LIFE_YEARS:
            raise ValueError(
                f"La durée d'utilité ne peut dépasser {MAX_USEFUL_LIFE_YEARS} ans."
            )
        return v


@router.options("/run", status_code=status.HTTP_204_NO_CONTENT)
def run_preflight():
    origins = get_cors_origins()
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers={
            "Access-Control-Allow-Origin": origins[0] if origins else "*",
            "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
            "Access-Control-Allow-Methods": "POST, OPTIONS",
        },
    )


@router.post("/run")
def run(
    tenant_id: str | None = None,
    at: date | None = None,
    db: Session = Depends(get_db),
):
    """
    Post this month's depreciation for every eligible asset.
    Meant to be called by a scheduler; safe to call more than once per month.
    """
    try:
        summary = run_depreciation(db, at=at, tenant_id=tenant_id)
    except DepreciationRunError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e)},
        )
    except Exception as e:
        # The scheduler only reads the JSON body; never answer with a bare 500.
        logger.exception("Unexpected depreciation run failure")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": f"Erreur inattendue : {e}"},
        )

    return {
        "success": True,
        "message": (
            f"Amortissement {summary.period.period_type} du {summary.period.start.isoformat()} "
            f"au {summary.period.end.isoformat()} : {summary.processed} actif(s) traité(s)."
        ),
        "processed": summary.processed,
        "period": {
            "start": summary.period.start.isoformat(),
            "end": summary.period.end.isoformat(),
        },
        "considered": summary.considered,
        "skipped": summary.skipped,
        "failed": [{"asset_id": f.asset_id, "error": f.error} for f in summary.failures],
        "duration_ms": summary.duration_ms,
    }


@router.get("/schedules", response_model=list[ScheduleEntryResponse])
def list_schedules(
    asset_id: int,
    period_type: str | None = None,
    db: Session = Depends(get_db),
):
    q = db.query(DepreciationScheduleEntry).filter(
        DepreciationScheduleEntry.asset_id == asset_id,
        DepreciationScheduleEntry.deleted_at.is_(None),
    )
    if period_type:
        q = q.filter(DepreciationScheduleEntry.period_type == period_type)
    return q.order_by(DepreciationScheduleEntry.period_start).all()


@router.get("/summary/{asset_id}")
def schedule_summary(asset_id: int, db: Session = Depends(get_db)):
    asset = db.query(Asset).filter(Asset.id == asset_id, Asset.deleted_at.is_(None)).first()
    if not asset:
        raise HTTPException(status_code=404, detail="Actif introuvable.")

    entries = (
        db.query(DepreciationScheduleEntry)
        .filter(
            DepreciationScheduleEntry.asset_id == asset_id,
            DepreciationScheduleEntry.deleted_at.is_(None),
        )
        .order_by(DepreciationScheduleEntry.period_start)
        .all()
    )
    if not entries:
        return {
            "asset_id": asset_id,
            "total_periods": 0,
            "total_depreciation": 0.0,
            "current_book_value": float(asset.current_book_value),
            "accumulated_depreciation": 0.0,
            "first_period": None,
            "last_period": None,
            "method": asset.depreciation_method,
            "period_type": None,
            "in_sync": True,
        }

    first, last = entries[0], entries[-1]
    return {
        "asset_id": asset_id,
        "total_periods": len(entries),
        "total_depreciation": float(sum((e.depreciation_amount for e in entries), Decimal("0"))),
        "current_book_value": float(asset.current_book_value),
        "accumulated_depreciation": float(last.accumulated_depreciation),
        "first_period": first.period_start.isoformat(),
        "last_period": last.period_end.isoformat(),
        "method": first.depreciation_method,
        "period_type": first.period_type,
        "in_sync": book_value_in_sync(db, asset),
    }


@router.post("/projection")
def projection(data: ProjectionRequest):
    """Preview the full schedule for a set of parameters. Nothing is persisted."""
    try:
        rows = project_schedule(
            purchase_price=data.purchase_price,
            salvage_value=data.salvage_value,
            useful_life_years=data.useful_life_years,
            method=data.depreciation_method,
            start_date=data.start_date,
            period_type=data.period_type,
            rate_pct=data.depreciation_rate,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=[i.message for i in e.issues])

    return [
        {
            "period_start": r.period_start.isoformat(),
            "period_end": r.period_end.isoformat(),
            "period_type": r.period_type,
            "opening_value": float(r.opening_value),
            "depreciation_amount": float(r.depreciation_amount),
            "accumulated_depreciation": float(r.accumulated_depreciation),
            "closing_value": float(r.closing_value),
            "depreciation_method": r.method,
        }
        for r in rows
    ]
