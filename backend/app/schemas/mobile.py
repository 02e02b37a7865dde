from pydantic import Field

from app.models.device import Platform
from app.schemas.common import CamelModel


class VersionCheckRequest(CamelModel):
    current_version: str = Field(min_length=1, max_length=50, pattern=r"^\d+(\.\d+)*")
    platform: Platform


class VersionCheckOut(CamelModel):
    update_required: bool
    force_update: bool
    latest_version: str
    min_supported_version: str
    download_url: str


class FeatureFlags(CamelModel):
    offline_mode: bool
    background_sync: bool
    biometric_auth: bool
    dark_mode: bool
    analytics: bool


class AppLimits(CamelModel):
    max_file_size: int
    max_files_per_case: int
    location_accuracy_threshold: int
    sync_batch_size: int


class AppEndpoints(CamelModel):
    api_base_url: str
    ws_url: str


class AppConfigOut(CamelModel):
    api_version: str
    min_supported_version: str
    force_update_version: str
    features: FeatureFlags
    limits: AppLimits
    endpoints: AppEndpoints
