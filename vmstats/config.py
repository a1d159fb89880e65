from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from vmstats.errors import ConfigError


class Settings(BaseSettings):
    # --- vsphere endpoint ---
    host: str = ""
    username: str = ""
    password: str = ""
    insecure: bool = True  # skip TLS verification of the endpoint certificate

    # --- sink ---
    ingest_target: str = ""
    ingest_secret: str = ""
    ingest_tag: str = ""
    ingester_name: str = "Vmware Stats"
    ready_timeout: float = Field(default=30.0, gt=0)  # seconds to wait for the sink at startup

    # --- sampling ---
    datastore_interval: float = Field(default=60.0, gt=0)  # seconds between datastore samples
    runtime_interval: float = Field(default=5.0, gt=0)  # seconds between host/VM samples
    api_timeout: float = Field(default=5.0, gt=0)  # deadline for a single sampling call

    # --- logging ---
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "VMSTATS_"}

    def require(self) -> None:
        """Raise ConfigError for the first required value that is blank."""
        if not self.host:
            raise ConfigError("missing host")
        if not self.username or not self.password:
            raise ConfigError("missing username or password")
        if not self.ingest_target:
            raise ConfigError("missing ingest target")
        if not self.ingest_secret:
            raise ConfigError("missing ingest secret")
        if not self.ingest_tag:
            raise ConfigError("missing ingest tag")
