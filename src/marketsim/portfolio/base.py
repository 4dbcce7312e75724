"""
Abstract interface for the owned-assets collaborator.

The price ledger consults whatever holds the player's positions for two
things only: the last known price of a held instrument (second step of the
read fallback chain) and the set of held ids (eager refreshes and batch
ordering).  Any portfolio implementation must satisfy this contract.
"""
from abc import ABC, abstractmethod
from typing import List, Optional


class OwnedAssetsProvider(ABC):
    """Contract that every owned-assets source must satisfy."""

    @abstractmethod
    def owned_ids(self) -> List[str]:
        """Ids of instruments currently held with a positive quantity."""

    @abstractmethod
    def last_known_price(self, asset_id: str) -> Optional[float]:
        """Most recent price recorded against a holding, or ``None``."""
