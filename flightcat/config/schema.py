"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field, field_validator

from flightcat.forecast.classifier import SchemeName


class AirportConfig(BaseModel):
    model_config = {"extra": "forbid"}

    icao: str = Field(min_length=4, max_length=4)
    name: str = ""
    major: bool = False
    enabled: bool = True

    @field_validator("icao")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


class ProviderConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://aviationweather.gov"
    user_agent: str = "flightcat/0.1.0"
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=5.0, ge=0.0)
    batch_size: int = Field(default=40, ge=1, le=400)


class ClassificationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    scheme: SchemeName = SchemeName.FOUR_TIER
    gust_warning_kt: int = Field(default=20, ge=1)


class OpsConfig(BaseModel):
    model_config = {"extra": "forbid"}

    fetch_interval_minutes: int = Field(default=30, ge=1)
    cache_ttl_seconds: int = Field(default=120, ge=0)
    history_step_minutes: int = Field(default=60, ge=1)
    metar_max_age_minutes: int = Field(default=90, ge=1)


class FlightcatConfig(BaseModel):
    model_config = {"extra": "forbid"}

    provider: ProviderConfig = ProviderConfig()
    classification: ClassificationConfig = ClassificationConfig()
    ops: OpsConfig = OpsConfig()
    airports: list[AirportConfig] = []

    @property
    def enabled_icaos(self) -> list[str]:
        return [a.icao for a in self.airports if a.enabled]
