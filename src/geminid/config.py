"""
Configuration for geminid.

The config file is JSON with one block per virtual host:

    {
      "servers": [
        {
          "hostname": "host_one",
          "port": 5555,
          "certFile": "/var/gemini/certs/host_one_cert.pem",
          "keyFile": "/var/gemini/certs/host_one_key.pem",
          "documentRoot": "/var/gemini/host_one",
          "logFile": "/var/gemini/logs/host_one.log",
          "redirects": {"/old-page": {"permanent": true, "destination": "/new-page"}},
          "goners": ["/removed"]
        }
      ]
    }

`port`, `requireCRLF`, `logFile`, `redirects`, `goners` and `requestTimeout`
are optional. Process-wide settings (log level, default config path) come from
GEMINID_* environment variables.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .paths import canonicalize


DEFAULT_PORT = 1965


class ConfigError(ValueError):
    """The configuration file could not be read or is invalid."""

    def __init__(self, path: str | Path, cause: Exception):
        super().__init__(f"invalid configuration in {path}: {cause}")
        self.path = path
        self.cause = cause


class RedirectRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    destination: str = Field(min_length=1)
    permanent: bool = False

    @field_validator("destination")
    @classmethod
    def _canonical_destination(cls, value: str) -> str:
        # Absolute URLs ("gemini://elsewhere/page") are passed through untouched.
        if "://" in value:
            return value
        return canonicalize(value) or "/"


class VirtualHostConfig(BaseModel):
    """
    Settings for one virtual host.

    Redirect sources, redirect destinations and goners are canonicalized at
    load time so request paths can be matched against them directly.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    hostname: str = Field(min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    cert_file: str
    key_file: str
    document_root: str
    require_crlf: bool = Field(default=True, alias="requireCRLF")
    log_file: str
    redirects: dict[str, RedirectRule] = Field(default_factory=dict)
    goners: frozenset[str] = frozenset()
    request_timeout: float | None = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _default_log_file(cls, data: Any) -> Any:
        if isinstance(data, dict) and not (data.get("logFile") or data.get("log_file")):
            data = {**data, "logFile": f"./{data.get('hostname')}.log"}
        return data

    @field_validator("redirects")
    @classmethod
    def _canonical_redirects(cls, value: dict[str, RedirectRule]) -> dict[str, RedirectRule]:
        return {canonicalize(source): rule for source, rule in value.items()}

    @field_validator("goners")
    @classmethod
    def _canonical_goners(cls, value: frozenset[str]) -> frozenset[str]:
        return frozenset(canonicalize(path) for path in value)

    @property
    def line_terminator(self) -> str:
        return "\r\n" if self.require_crlf else "\n"

    def serves(self, hostname: str) -> bool:
        return hostname.lower() == self.hostname.lower()


class ServerConfig(BaseModel):
    """The whole config file: one or more virtual hosts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    servers: list[VirtualHostConfig] = Field(min_length=1)

    @model_validator(mode="after")
    def _unique_hosts(self) -> "ServerConfig":
        seen: set[tuple[str, int]] = set()
        for host in self.servers:
            key = (host.hostname.lower(), host.port)
            if key in seen:
                raise ValueError(f"duplicate virtual host {host.hostname}:{host.port}")
            seen.add(key)
        return self

    @classmethod
    def from_file(cls, path: str | Path) -> "ServerConfig":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(path, e) from e
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise ConfigError(path, e) from e


class Settings(BaseSettings):
    """Process settings loaded from GEMINID_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINID_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="DEBUG", description="Console logging level")
    config_file: Path | None = Field(default=None, description="Config file used when none is given on the command line")


@lru_cache
def get_settings() -> Settings:
    """Get the process settings instance."""
    return Settings()
