#!/usr/bin/env python3
"""
Configuration settings using Pydantic for environment variable loading
"""

import logging
import os
from typing import ClassVar, Optional, Dict, Any, Type

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()

# Native pydantic-settings lookups only happen under this prefix; the plain
# names below (SCHEDULE_AT, DISPATCH_URL, ...) are read by the field defaults.
ENV_PREFIX = "SWARM_AUTOSCALER_"

DEFAULT_SCHEDULE_AT = 15
DEFAULT_DISPATCH_URL = "http://0.0.0.0:2441/api/stats"


def parse_env_int(value: str, minimum: int = 0) -> Optional[int]:
    """Parse an integer setting, None if it is not an integer >= minimum"""
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed >= minimum else None


def env_int(name: str, default: Optional[int], minimum: int = 0) -> Optional[int]:
    """
    Read an integer of at least `minimum` from the environment.

    Invalid values are logged and ignored so a typo never prevents startup.
    """
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default

    parsed = parse_env_int(value, minimum)
    if parsed is None:
        logger.error(
            f"Invalid value for {name}: {value!r} (expected an integer >= {minimum}), "
            f"using default {default}"
        )
        return default

    return parsed


def env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class SchedulerSettings(BaseSettings):
    """Polling loop settings"""
    ENV_VARS: ClassVar[Dict[str, str]] = {"schedule_at": "SCHEDULE_AT"}
    INT_MINIMUMS: ClassVar[Dict[str, int]] = {"schedule_at": 0}

    schedule_at: int = Field(default_factory=lambda: env_int("SCHEDULE_AT", DEFAULT_SCHEDULE_AT), ge=0)

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")


class DockerSettings(BaseSettings):
    """Docker engine and statistics source settings"""
    ENV_VARS: ClassVar[Dict[str, str]] = {
        "api_version": "DOCKER_API_VERSION",
        "base_url": "DOCKER_HOST",
        "binary": "DOCKER_BINARY",
        "stats_timeout": "STATS_TIMEOUT",
    }
    INT_MINIMUMS: ClassVar[Dict[str, int]] = {"stats_timeout": 1}

    api_version: str = Field(default_factory=lambda: os.getenv("DOCKER_API_VERSION", "1.44"))
    base_url: Optional[str] = Field(default_factory=lambda: os.getenv("DOCKER_HOST") or None)
    binary: str = Field(default_factory=lambda: os.getenv("DOCKER_BINARY", "/usr/bin/docker"))
    stats_timeout: Optional[int] = Field(default_factory=lambda: env_int("STATS_TIMEOUT", 60, minimum=1))

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX + "DOCKER_", extra="ignore")


class DispatchSettings(BaseSettings):
    """Decision endpoint settings"""
    ENV_VARS: ClassVar[Dict[str, str]] = {
        "url": "DISPATCH_URL",
        "timeout": "DISPATCH_TIMEOUT",
        "workers": "DISPATCH_WORKERS",
        "max_pending": "DISPATCH_MAX_PENDING",
    }
    INT_MINIMUMS: ClassVar[Dict[str, int]] = {"timeout": 1, "workers": 1, "max_pending": 1}

    url: str = Field(default_factory=lambda: os.getenv("DISPATCH_URL", DEFAULT_DISPATCH_URL))
    # Unset means no timeout beyond the transport default
    timeout: Optional[int] = Field(default_factory=lambda: env_int("DISPATCH_TIMEOUT", None, minimum=1), ge=1)
    workers: int = Field(default_factory=lambda: env_int("DISPATCH_WORKERS", 4, minimum=1), ge=1)
    max_pending: int = Field(default_factory=lambda: env_int("DISPATCH_MAX_PENDING", 100, minimum=1), ge=1)

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX + "DISPATCH_", extra="ignore")


class MetricsSettings(BaseSettings):
    """Prometheus exporter settings, port 0 disables the exporter"""
    ENV_VARS: ClassVar[Dict[str, str]] = {"port": "METRICS_PORT"}
    INT_MINIMUMS: ClassVar[Dict[str, int]] = {"port": 0}

    port: int = Field(default_factory=lambda: env_int("METRICS_PORT", 9091), ge=0)

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX + "METRICS_", extra="ignore")


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""
    ENV_VARS: ClassVar[Dict[str, str]] = {
        "level": "LOG_LEVEL",
        "file": "LOG_FILE",
        "json_output": "LOG_JSON",
    }
    INT_MINIMUMS: ClassVar[Dict[str, int]] = {}

    level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    file: Optional[str] = Field(default_factory=lambda: os.getenv("LOG_FILE") or None)
    json_output: bool = Field(default_factory=lambda: env_bool("LOG_JSON", True))

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX + "LOG_", extra="ignore")


class Settings(BaseSettings):
    """Main settings class that includes all sub-settings"""
    # Environment
    environment: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    debug: bool = Field(default_factory=lambda: env_bool("DEBUG", False))

    # Component settings
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    docker: DockerSettings = Field(default_factory=DockerSettings)
    dispatch: DispatchSettings = Field(default_factory=DispatchSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def get_config_dict(self) -> Dict[str, Any]:
        """Flatten settings for logging at startup"""
        return {
            "environment": self.environment,
            "schedule_at": self.scheduler.schedule_at,
            "docker": {
                "api_version": self.docker.api_version,
                "base_url": self.docker.base_url,
                "binary": self.docker.binary,
                "stats_timeout": self.docker.stats_timeout,
            },
            "dispatch": {
                "url": self.dispatch.url,
                "timeout": self.dispatch.timeout,
                "workers": self.dispatch.workers,
                "max_pending": self.dispatch.max_pending,
            },
            "metrics": {"port": self.metrics.port},
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "json_output": self.logging.json_output,
            },
        }

    @classmethod
    def load_from_yaml_with_env_override(cls, yaml_path: str) -> "Settings":
        """Load settings from YAML file and override with environment variables"""
        import yaml

        yaml_config: Dict[str, Any] = {}
        if os.path.exists(yaml_path):
            with open(yaml_path, 'r') as f:
                # Process environment variables in YAML
                yaml_content = f.read()
                for key, value in os.environ.items():
                    yaml_content = yaml_content.replace(f"${{{key}}}", value)
                    yaml_content = yaml_content.replace(f"${key}", value)
                yaml_config = yaml.safe_load(yaml_content) or {}
        else:
            logger.warning(f"Config file {yaml_path} not found, using environment only")

        return cls(
            environment=os.getenv("ENVIRONMENT") or yaml_config.get("environment", "development"),
            debug=env_bool("DEBUG", bool(yaml_config.get("debug", False))),
            scheduler=_overlay(SchedulerSettings, yaml_config.get("scheduler")),
            docker=_overlay(DockerSettings, yaml_config.get("docker")),
            dispatch=_overlay(DispatchSettings, yaml_config.get("dispatch")),
            metrics=_overlay(MetricsSettings, yaml_config.get("metrics")),
            logging=_overlay(LoggingSettings, yaml_config.get("logging")),
        )


def _overlay(settings_cls: Type[BaseSettings], yaml_section: Optional[Dict[str, Any]]) -> BaseSettings:
    """Build a settings section where valid environment variables win over the YAML section"""
    from_env = settings_cls().model_dump()
    merged = dict(yaml_section or {})
    for name, env_var in settings_cls.ENV_VARS.items():
        if _env_overrides(env_var, settings_cls.INT_MINIMUMS.get(name)) or name not in merged:
            merged[name] = from_env[name]
    return settings_cls(**merged)


def _env_overrides(env_var: str, minimum: Optional[int]) -> bool:
    """An env var overrides YAML only when it is set and, for integers, parses"""
    value = os.getenv(env_var)
    if value is None or value.strip() == "":
        return False
    if minimum is None:
        return True
    return parse_env_int(value, minimum) is not None
