"""
test_catalog.py
"""
import json

import pytest

from src.marketsim.catalog.loader import AssetCatalog
from src.marketsim.catalog.schemas import AssetClass, CryptoAsset, StockAsset, VolatilityTier
from src.marketsim.core.errors import CatalogError, UnknownAssetError


def test_default_catalog_covers_every_class():
    catalog = AssetCatalog.default()

    for kind in AssetClass:
        assert catalog.by_class(kind), f"no default assets for {kind.value}"

    btc = catalog.get("btc")
    assert isinstance(btc, CryptoAsset)
    assert btc.kind is AssetClass.CRYPTO
    assert btc.base_price == 45000.0


def test_records_are_dispatched_on_asset_class(catalog):
    acme = catalog.get("acme")
    assert isinstance(acme, StockAsset)
    assert acme.volatility is VolatilityTier.LOW
    assert catalog.get("treasury_5y").kind is AssetClass.BOND
    assert set(catalog.ids()) == {"acme", "widgets", "bigcoin", "dust", "treasury_5y"}


def test_unknown_id_raises_unknown_asset_error(catalog):
    with pytest.raises(UnknownAssetError) as exc_info:
        catalog.get("nope")

    assert exc_info.value.asset_id == "nope"
    # Also catchable as a plain KeyError.
    assert isinstance(exc_info.value, KeyError)
    assert catalog.find("nope") is None


def test_duplicate_ids_are_rejected():
    data = {
        "stock": [{"id": "x", "name": "X", "symbol": "X", "volatility": "low", "base_price": 1.0}],
        "other": [{"id": "x", "name": "X2", "volatility": "low", "base_price": 2.0}],
    }
    with pytest.raises(CatalogError, match="Duplicate"):
        AssetCatalog.from_mapping(data)


def test_invalid_records_fail_at_load_time():
    with pytest.raises(CatalogError):
        AssetCatalog.from_mapping({"stock": [{"id": "bad", "name": "Bad", "symbol": "B",
                                             "volatility": "low", "base_price": 0}]})

    with pytest.raises(CatalogError, match="Unknown asset class"):
        AssetCatalog.from_mapping({"stamps": []})


def test_from_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({
        "crypto": [{"id": "c1", "name": "Coin", "symbol": "C1", "volatility": "high", "base_price": 5.0}],
    }))

    catalog = AssetCatalog.from_json(path)
    assert len(catalog) == 1
    assert "c1" in catalog

    with pytest.raises(FileNotFoundError):
        AssetCatalog.from_json(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(CatalogError):
        AssetCatalog.from_json(broken)
