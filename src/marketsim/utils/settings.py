"""
Environment-driven engine settings.

Entry points call ``load_dotenv()`` first, then ``EngineSettings.from_env()``
picks up any ``MARKETSIM_*`` variables.  Unset variables keep the model
defaults; invalid values fail validation at startup.
"""
import os
from typing import Optional

from pydantic import BaseModel, Field

from src.marketsim.scheduler.config import DeviceType, PerformanceMode, SchedulerConfig
from src.marketsim.utils.logger import DEFAULT_RETENTION

ENV_PREFIX = "MARKETSIM_"


class EngineSettings(BaseModel):
    device: DeviceType = "desktop"
    performance_mode: PerformanceMode = "standard"
    throttle_interval_ms: Optional[int] = Field(None, ge=0)
    verification_delay_ms: int = Field(250, ge=0)
    seed: Optional[int] = None
    state_file: Optional[str] = Field(
        None, description="Path of the durable price snapshot (disabled when unset)",
    )
    catalog_file: Optional[str] = Field(
        None, description="JSON catalog overriding the built-in instrument tables",
    )
    log_dir: str = "logs"
    log_level: str = Field("INFO", description="Terminal log level")
    log_retention: str = Field(DEFAULT_RETENTION, description="How long rotated log files are kept")

    @classmethod
    def from_env(cls, **overrides) -> "EngineSettings":
        values = {}
        for field_name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def scheduler_config(self) -> SchedulerConfig:
        overrides = {"verification_delay_ms": self.verification_delay_ms}
        if self.throttle_interval_ms is not None:
            overrides["throttle_interval_ms"] = self.throttle_interval_ms
        return SchedulerConfig.for_device(self.device, self.performance_mode, **overrides)
