"""
Seed script: loads sample_assets.json into the database.
Usage: python -m fixed_assets.db.seed
"""
import json
import logging
from datetime import date
from pathlib import Path

from fixed_assets.db.database import SessionLocal, init_db
from fixed_assets.models.asset import Asset

logger = logging.getLogger(__name__)


def seed():
    init_db()
    db = SessionLocal()

    dataset_path = Path(__file__).parent.parent.parent / "tests" / "fixtures" / "sample_assets.json"
    with open(dataset_path) as f:
        data = json.load(f)

    tenant_id = data["tenant_id"]
    for item in data["assets"]:
        db.add(Asset(
            tenant_id=tenant_id,
            name=item["name"],
            purchase_price=item["purchase_price"],
            salvage_value=item["salvage_value"],
            useful_life_years=item["useful_life_years"],
            depreciation_method=item["depreciation_method"],
            depreciation_rate=item["depreciation_rate"],
            in_service_date=date.fromisoformat(item["in_service_date"]),
            status="active",
            current_book_value=item["purchase_price"],
        ))

    db.commit()
    db.close()
    logger.info("Seed completed: %d assets created for tenant '%s'.", len(data["assets"]), tenant_id)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
