"""
Scheduler configuration and performance profiles.

One scheduler serves every device class; what used to differ between a
"standard" and an "optimized" updater is expressed as a config object:
throttle interval, chunk size for batch pricing, deferred-verification
delay and whether owned assets are priced first.
"""
from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

DeviceType = Literal["desktop", "tablet", "mobile"]
PerformanceMode = Literal["standard", "low", "high"]

# Throttle multiplier applied to a profile's base interval.
DEVICE_INTERVAL_MULTIPLIER: Dict[str, float] = {
    "desktop": 1.0,
    "tablet": 1.5,
    "mobile": 3.0,
}


class PerformanceProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_assets_per_batch: int = Field(..., gt=0)
    base_update_interval_ms: int = Field(..., gt=0)
    prioritize_owned_assets: bool = True


PERFORMANCE_PROFILES: Dict[str, PerformanceProfile] = {
    "standard": PerformanceProfile(max_assets_per_batch=15, base_update_interval_ms=2000),
    "low": PerformanceProfile(max_assets_per_batch=5, base_update_interval_ms=5000),
    "high": PerformanceProfile(max_assets_per_batch=50, base_update_interval_ms=1000),
}


class SchedulerConfig(BaseModel):
    """Tunables for ``UpdateScheduler``."""

    model_config = ConfigDict(frozen=True)

    throttle_interval_ms: int = Field(
        2000, ge=0,
        description="Minimum real time between two timer-driven ticks",
    )
    batch_size: int = Field(
        15, ge=0,
        description="Assets priced per chunk (0 = whole catalog in one chunk)",
    )
    verification_delay_ms: int = Field(
        250, ge=0,
        description="Delay before the post-boundary persistence check",
    )
    prioritize_owned: bool = Field(
        True,
        description="Price owned positions before the rest of the catalog",
    )

    @property
    def throttle_interval_s(self) -> float:
        return self.throttle_interval_ms / 1000.0

    @property
    def verification_delay_s(self) -> float:
        return self.verification_delay_ms / 1000.0

    @classmethod
    def for_device(
        cls,
        device: DeviceType = "desktop",
        mode: PerformanceMode = "standard",
        **overrides,
    ) -> "SchedulerConfig":
        """Config derived from a performance profile and device type.

        Raises:
            ValueError: If *device* or *mode* is not recognised.
        """
        if mode not in PERFORMANCE_PROFILES:
            raise ValueError(f"Unknown performance mode: {mode}")
        if device not in DEVICE_INTERVAL_MULTIPLIER:
            raise ValueError(f"Unknown device type: {device}")

        profile = PERFORMANCE_PROFILES[mode]
        values = {
            "throttle_interval_ms": int(
                profile.base_update_interval_ms * DEVICE_INTERVAL_MULTIPLIER[device]
            ),
            "batch_size": profile.max_assets_per_batch,
            "prioritize_owned": profile.prioritize_owned_assets,
        }
        values.update(overrides)
        return cls(**values)
