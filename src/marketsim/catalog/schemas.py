"""
Strict data contracts for tradable instruments.

Every instrument is an immutable pydantic model.  The five asset classes
form a closed tagged union discriminated on ``asset_class`` so that the
price generator can dispatch on the class explicitly instead of probing
for optional fields at runtime.
"""
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class AssetClass(str, Enum):
    """Asset class of an instrument."""

    STOCK = "stock"
    CRYPTO = "crypto"
    BOND = "bond"
    PROPERTY = "property"
    OTHER = "other"

    @property
    def calendar_bound(self) -> bool:
        """Whether prices only move while the class's market session is open."""
        return self in (AssetClass.STOCK, AssetClass.BOND, AssetClass.PROPERTY)


class VolatilityTier(str, Enum):
    """Volatility bucket, ordered from calmest to wildest."""

    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"
    EXTREME = "extreme"

    @classmethod
    def ordered(cls):
        return [
            cls.VERY_LOW,
            cls.LOW,
            cls.MEDIUM,
            cls.HIGH,
            cls.VERY_HIGH,
            cls.EXTREME,
        ]


class AssetBase(BaseModel):
    """Fields shared by every instrument."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable unique identifier")
    name: str = Field(..., min_length=1, description="Display name")
    volatility: VolatilityTier = Field(..., description="Volatility bucket")
    # Reference value; also anchors the per-class price floor.
    base_price: float = Field(..., gt=0, description="Immutable reference price")
    description: str = Field("", description="Human-readable blurb")

    @property
    def kind(self) -> AssetClass:
        """The ``asset_class`` tag as an ``AssetClass`` member."""
        return AssetClass(self.asset_class)


class StockAsset(AssetBase):
    asset_class: Literal["stock"] = "stock"
    symbol: str = Field(..., min_length=1)
    sector: str = Field("general")


class CryptoAsset(AssetBase):
    asset_class: Literal["crypto"] = "crypto"
    symbol: str = Field(..., min_length=1)
    coin_type: Literal["bitcoin", "ethereum", "stablecoin", "altcoin", "meme"] = "altcoin"


class BondAsset(AssetBase):
    asset_class: Literal["bond"] = "bond"
    bond_type: Literal["treasury", "corporate", "municipal", "junk"] = "treasury"
    term_years: int = Field(..., gt=0)
    yield_rate: float = Field(..., ge=0, lt=1)


class PropertyAsset(AssetBase):
    asset_class: Literal["property"] = "property"
    region: str = Field("urban")


class OtherAsset(AssetBase):
    asset_class: Literal["other"] = "other"
    category: str = Field("collectible")


Asset = Annotated[
    Union[StockAsset, CryptoAsset, BondAsset, PropertyAsset, OtherAsset],
    Field(discriminator="asset_class"),
]
