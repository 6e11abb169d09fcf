from fixed_assets.models.asset import Asset
from fixed_assets.models.schedule import DepreciationScheduleEntry

__all__ = ["Asset", "DepreciationScheduleEntry"]
