"""
Exception hierarchy for the market engine.

Only programming/configuration errors are raised.  Runtime price problems
(missing records, bad samples, dropped prices after a boundary) are
recovered inside the tick path and logged instead.
"""


class MarketSimError(Exception):
    """Base class for every error raised by the engine."""


class UnknownAssetError(MarketSimError, KeyError):
    """Raised when a price is requested for an id that is neither catalogued nor owned."""

    def __init__(self, asset_id: str):
        super().__init__(asset_id)
        self.asset_id = asset_id

    def __str__(self) -> str:
        return f"Unknown asset: {self.asset_id}"


class CatalogError(MarketSimError, ValueError):
    """Raised when an asset catalog definition is malformed."""
