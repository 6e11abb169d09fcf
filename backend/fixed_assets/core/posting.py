"""
Depreciation run: eligibility, idempotency guard, per-asset posting.

Each asset is posted in its own transaction (ledger insert + book value update),
so a bad row never blocks the other assets of the batch. The partial unique
index on (asset_id, period_type, period_start) is the source of truth for
"already posted"; the guard query below only avoids pointless inserts.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fixed_assets.core.calculator import DepreciationResult, compute_period_depreciation
from fixed_assets.core.errors import ConfigurationError, DepreciationRunError
from fixed_assets.core.periods import Period, resolve_period
from fixed_assets.core.validator import validate_asset_parameters
from fixed_assets.models.asset import Asset
from fixed_assets.models.schedule import DepreciationScheduleEntry
from fixed_assets.utils.config_loader import get_period_type

logger = logging.getLogger(__name__)

SKIP_ALREADY_POSTED = "already_posted"
SKIP_NOT_IN_SERVICE = "not_in_service"
SKIP_FULLY_DEPRECIATED = "fully_depreciated"
SKIP_LATER_PERIOD_POSTED = "later_period_posted"

GUARD_CHUNK_SIZE = 500


@dataclass
class AssetFailure:
    asset_id: int
    error: str


@dataclass
class GuardResult:
    postable: list[Asset] = field(default_factory=list)
    skipped: dict[int, str] = field(default_factory=dict)  # asset_id -> reason


@dataclass
class RunSummary:
    period: Period
    considered: int = 0
    processed: int = 0
    skipped: dict[str, int] = field(default_factory=dict)
    failures: list[AssetFailure] = field(default_factory=list)
    entries: list[DepreciationScheduleEntry] = field(default_factory=list)
    duration_ms: int = 0

    def count_skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1


def select_candidates(db: Session, tenant_id: str | None = None) -> list[Asset]:
    """Active, live assets with a method and a positive purchase price."""
    q = db.query(Asset).filter(
        Asset.status == "active",
        Asset.deleted_at.is_(None),
        Asset.depreciation_method.is_not(None),
        Asset.purchase_price.is_not(None),
        Asset.purchase_price > 0,
    )
    if tenant_id:
        q = q.filter(Asset.tenant_id == tenant_id)
    return q.order_by(Asset.tenant_id, Asset.id).all()


def _chunks(ids: list[int], size: int):
    for i in range(0, len(ids), size):
        yield ids[i:i + size]


def filter_postable(db: Session, candidates: list[Asset], period: Period) -> GuardResult:
    """
    Drop assets already posted for the period, posted for a later or overlapping
    period, not yet in service, or exhausted.
    """
    result = GuardResult()
    if not candidates:
        return result

    posted: set[int] = set()
    latest_end: dict[int, date] = {}
    # Bounded IN lists: SQLite caps the number of bound parameters.
    for ids in _chunks([a.id for a in candidates], GUARD_CHUNK_SIZE):
        rows = (
            db.query(DepreciationScheduleEntry.asset_id)
            .filter(
                DepreciationScheduleEntry.asset_id.in_(ids),
                DepreciationScheduleEntry.period_type == period.period_type,
                DepreciationScheduleEntry.period_start == period.start,
                DepreciationScheduleEntry.deleted_at.is_(None),
            )
            .all()
        )
        posted.update(row[0] for row in rows)

        rows = (
            db.query(
                DepreciationScheduleEntry.asset_id,
                func.max(DepreciationScheduleEntry.period_end),
            )
            .filter(
                DepreciationScheduleEntry.asset_id.in_(ids),
                DepreciationScheduleEntry.deleted_at.is_(None),
            )
            .group_by(DepreciationScheduleEntry.asset_id)
            .all()
        )
        latest_end.update({asset_id: end for asset_id, end in rows})

    for asset in candidates:
        if asset.id in posted:
            result.skipped[asset.id] = SKIP_ALREADY_POSTED
        elif asset.id in latest_end and latest_end[asset.id] >= period.start:
            # Posting here would open on a later closing value or post a month twice.
            result.skipped[asset.id] = SKIP_LATER_PERIOD_POSTED
        elif asset.in_service_date is not None and asset.in_service_date > period.end:
            result.skipped[asset.id] = SKIP_NOT_IN_SERVICE
        elif asset.current_book_value <= asset.salvage_value:
            result.skipped[asset.id] = SKIP_FULLY_DEPRECIATED
        else:
            result.postable.append(asset)
    return result


def compute_for_asset(asset: Asset, period: Period) -> DepreciationResult:
    validation = validate_asset_parameters(
        purchase_price=asset.purchase_price,
        salvage_value=asset.salvage_value,
        useful_life_years=asset.useful_life_years,
        method=asset.depreciation_method,
        rate_pct=asset.depreciation_rate,
        current_book_value=asset.current_book_value,
    )
    if validation.has_errors:
        raise ConfigurationError(asset.id, validation.errors)
    for warning in validation.warnings:
        logger.warning("Asset %s: %s", asset.id, warning.message)

    return compute_period_depreciation(
        opening_value=asset.current_book_value,
        purchase_price=asset.purchase_price,
        salvage_value=asset.salvage_value,
        useful_life_years=asset.useful_life_years,
        method=asset.depreciation_method,
        rate_pct=asset.depreciation_rate,
        periods_per_year=period.periods_per_year,
    )


def post_asset(
    db: Session, asset: Asset, result: DepreciationResult, period: Period
) -> DepreciationScheduleEntry:
    """Insert the ledger entry and move the book value, in one transaction."""
    entry = DepreciationScheduleEntry(
        asset_id=asset.id,
        tenant_id=asset.tenant_id,
        period_start=period.start,
        period_end=period.end,
        period_type=period.period_type,
        opening_value=result.opening_value,
        depreciation_amount=result.depreciation_amount,
        accumulated_depreciation=result.accumulated_depreciation,
        closing_value=result.closing_value,
        depreciation_method=result.method,
    )
    db.add(entry)
    asset.current_book_value = result.closing_value
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return entry


def is_posted(db: Session, asset_id: int, period: Period) -> bool:
    return (
        db.query(DepreciationScheduleEntry.id)
        .filter(
            DepreciationScheduleEntry.asset_id == asset_id,
            DepreciationScheduleEntry.period_type == period.period_type,
            DepreciationScheduleEntry.period_start == period.start,
            DepreciationScheduleEntry.deleted_at.is_(None),
        )
        .first()
        is not None
    )


def latest_entry(db: Session, asset_id: int) -> DepreciationScheduleEntry | None:
    return (
        db.query(DepreciationScheduleEntry)
        .filter(
            DepreciationScheduleEntry.asset_id == asset_id,
            DepreciationScheduleEntry.deleted_at.is_(None),
        )
        .order_by(DepreciationScheduleEntry.period_start.desc())
        .first()
    )


def book_value_in_sync(db: Session, asset: Asset) -> bool:
    """Stored book value matches the closing value of the latest live entry."""
    entry = latest_entry(db, asset.id)
    if entry is None:
        return True
    return entry.closing_value == asset.current_book_value


def run_depreciation(
    db: Session,
    at: date | datetime | None = None,
    tenant_id: str | None = None,
    period_type: str | None = None,
) -> RunSummary:
    """
    Post one period of depreciation for every eligible asset.

    Raises DepreciationRunError when the period cannot be resolved or the
    eligibility or idempotency read fails;
    in that case nothing has been written. Per-asset configuration and write
    failures are collected in the summary and do not stop the run.
    """
    started = time.monotonic()
    try:
        period = resolve_period(at or date.today(), period_type or get_period_type())
    except (ValueError, FileNotFoundError) as e:
        logger.exception("Depreciation run aborted: no valid period")
        raise DepreciationRunError(f"Période comptable invalide : {e}") from e
    summary = RunSummary(period=period)
    logger.info(
        "Depreciation run started for %s (tenant=%s)", period.key, tenant_id or "*"
    )

    try:
        candidates = select_candidates(db, tenant_id)
        guard = filter_postable(db, candidates, period)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Depreciation run aborted for %s", period.key)
        raise DepreciationRunError(f"Lecture des actifs impossible : {e}") from e

    summary.considered = len(candidates)
    for asset_id, reason in guard.skipped.items():
        logger.debug("Asset %s skipped: %s", asset_id, reason)
        summary.count_skip(reason)

    for asset in guard.postable:
        asset_id = asset.id
        try:
            result = compute_for_asset(asset, period)
        except ConfigurationError as e:
            logger.warning(str(e))
            summary.failures.append(AssetFailure(asset_id=asset_id, error=str(e)))
            continue

        try:
            entry = post_asset(db, asset, result, period)
        except IntegrityError as e:
            if is_posted(db, asset_id, period):
                # Another run posted this asset between the guard read and our insert.
                logger.info("Asset %s already posted for %s", asset_id, period.key)
                summary.count_skip(SKIP_ALREADY_POSTED)
            else:
                logger.error("Asset %s rejected by the ledger for %s: %s", asset_id, period.key, e)
                summary.failures.append(AssetFailure(asset_id=asset_id, error=str(e)))
            continue
        except SQLAlchemyError as e:
            logger.error("Asset %s posting failed for %s: %s", asset_id, period.key, e)
            summary.failures.append(AssetFailure(asset_id=asset_id, error=str(e)))
            continue

        summary.processed += 1
        summary.entries.append(entry)

    summary.duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Depreciation run finished for %s: %d considered, %d processed, %d failed",
        period.key,
        summary.considered,
        summary.processed,
        len(summary.failures),
    )
    return summary
