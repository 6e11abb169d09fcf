"""Exceptions raised by the depreciation engine."""


class DepreciationError(Exception):
    """Base class for depreciation engine errors."""


class ConfigurationError(DepreciationError):
    """An asset's financial parameters cannot be depreciated as configured."""

    def __init__(self, asset_id: int | None, issues: list):
        self.asset_id = asset_id
        self.issues = issues
        detail = "; ".join(i.message for i in issues)
        super().__init__(f"Actif {asset_id} mal configuré : {detail}")


class DepreciationRunError(DepreciationError):
    """The run could not read its inputs; nothing was posted."""
