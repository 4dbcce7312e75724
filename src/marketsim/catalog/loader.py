"""
Asset catalog loader.

Builds the immutable instrument catalog either from the built-in tables
(``AssetCatalog.default()``) or from a JSON file keyed by asset class.
The file is validated eagerly so that configuration errors surface at
startup rather than mid-simulation.

Expected JSON structure::

    {
      "stock":  [{"id": "tech_giant", "name": "...", "symbol": "TGNT",
                  "volatility": "medium", "base_price": 350.0}],
      "crypto": [{"id": "btc", "name": "Bitcoin", "symbol": "BTC",
                  "volatility": "very_high", "base_price": 45000.0}]
    }
"""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from src.marketsim.catalog.defaults import DEFAULT_ASSETS
from src.marketsim.catalog.schemas import Asset, AssetClass
from src.marketsim.core.errors import CatalogError, UnknownAssetError

_ASSET_ADAPTER = TypeAdapter(Asset)


class AssetCatalog:
    """Read-only registry of every tradable instrument."""

    def __init__(self, assets: Iterable[Asset]):
        self._assets: Dict[str, Asset] = {}
        for asset in assets:
            if asset.id in self._assets:
                raise CatalogError(f"Duplicate asset id: {asset.id}")
            self._assets[asset.id] = asset

        counts = {
            kind.value: len(self.by_class(kind)) for kind in AssetClass
        }
        logger.debug(f"Asset catalog ready: {counts}")

    @classmethod
    def from_mapping(cls, data: Dict[str, List[Dict[str, Any]]]) -> "AssetCatalog":
        """Validate raw per-class tables into a catalog.

        Raises:
            CatalogError: On an unknown class key or an invalid record.
        """
        assets: List[Asset] = []
        for class_key, rows in data.items():
            try:
                kind = AssetClass(class_key)
            except ValueError as e:
                raise CatalogError(f"Unknown asset class section: {class_key}") from e

            for row in rows:
                try:
                    assets.append(
                        _ASSET_ADAPTER.validate_python({**row, "asset_class": kind.value})
                    )
                except ValidationError as e:
                    raise CatalogError(
                        f"Invalid {kind.value} record {row.get('id')!r}: {e}"
                    ) from e

        return cls(assets)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "AssetCatalog":
        """Load a catalog definition file.

        Raises:
            FileNotFoundError: If *path* does not exist.
            CatalogError: If the file is not valid JSON or a record is invalid.
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.critical(f"Catalog file not found at: {file_path}")
            raise FileNotFoundError(f"Missing catalog file: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.critical(f"Invalid JSON in catalog file: {e}")
            raise CatalogError("Corrupted catalog file") from e

        catalog = cls.from_mapping(data)
        logger.info(f"Loaded {len(catalog)} assets from {file_path.name}")
        return catalog

    @classmethod
    def default(cls) -> "AssetCatalog":
        """Catalog built from the bundled instrument tables."""
        return cls.from_mapping(DEFAULT_ASSETS)

    def get(self, asset_id: str) -> Asset:
        """Return the asset with *asset_id*.

        Raises:
            UnknownAssetError: If the id is not catalogued.
        """
        try:
            return self._assets[asset_id]
        except KeyError:
            raise UnknownAssetError(asset_id) from None

    def find(self, asset_id: str) -> Optional[Asset]:
        return self._assets.get(asset_id)

    def by_class(self, kind: AssetClass) -> List[Asset]:
        return [a for a in self._assets.values() if a.kind is kind]

    def ids(self) -> List[str]:
        return list(self._assets)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._assets

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._assets.values())

    def __len__(self) -> int:
        return len(self._assets)
