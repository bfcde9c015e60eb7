"""
GitConfusion Configuration Management
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from gitconfusion.utils import ConfigError

# Load .env file if present
load_dotenv()


@dataclass
class GitHubConfig:
    """GitHub API and raw content settings."""

    token: str = ""
    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    branch: Optional[str] = None  # None = each repository's default branch
    per_page: int = 100
    user_agent: str = "GitConfusion/1.0"


@dataclass
class ScannerConfig:
    """Repository scanning settings."""

    timeout: float = 30.0
    connect_timeout: float = 10.0
    max_concurrency: int = 1
    include_forks: bool = True
    include_archived: bool = True


@dataclass
class RegistryConfig:
    """Registry endpoint overrides keyed by ecosystem ("npm", "rubygems", "pypi")."""

    endpoints: Dict[str, str] = field(default_factory=dict)


@dataclass
class SearchConfig:
    """Leaked credential code search settings."""

    enable: bool = True
    terms: List[str] = field(default_factory=lambda: ["api", "secrets", "aws_key"])


@dataclass
class RateLimitConfig:
    """Retry and backoff configuration for registry probes."""

    base_delay: float = 1.0
    max_delay: float = 60.0
    backoff_multiplier: float = 2.0
    max_retries: int = 3
    jitter_ratio: float = 0.1


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(message)s"
    file_path: str = ""  # e.g. "logs/gitconfusion_{date}.log"


@dataclass
class Config:
    """GitConfusion configuration settings."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        # Convert nested dicts to dataclasses
        for field_name, cls in (
            ("github", GitHubConfig),
            ("scanner", ScannerConfig),
            ("registry", RegistryConfig),
            ("search", SearchConfig),
            ("rate_limit", RateLimitConfig),
            ("logging", LoggingConfig),
        ):
            value = getattr(self, field_name)
            if isinstance(value, dict):
                try:
                    setattr(self, field_name, cls(**value))
                except TypeError as e:
                    raise ConfigError(f"invalid {field_name} section: {e}") from e

        # Environment overrides
        if not self.github.token:
            self.github.token = os.getenv("GH_TOKEN") or os.getenv("GITHUB_TOKEN", "")

        if os.getenv("LOG_LEVEL"):
            self.logging.level = os.getenv("LOG_LEVEL").upper()

        self._validate()

    @property
    def has_token(self) -> bool:
        return bool(self.github.token)

    def _validate(self):
        if self.scanner.max_concurrency < 1:
            raise ConfigError("max_concurrency must be >=1")
        if self.scanner.timeout <= 0 or self.scanner.connect_timeout <= 0:
            raise ConfigError("timeouts must be positive")
        if self.scanner.timeout > 300:
            raise ConfigError("scanner timeout too high")
        if not 1 <= self.github.per_page <= 100:
            raise ConfigError("per_page must be between 1 and 100")
        if self.rate_limit.max_retries < 0:
            raise ConfigError("max_retries must be >=0")
        if self.rate_limit.base_delay < 0 or self.rate_limit.max_delay < 0:
            raise ConfigError("delays must be >=0")
        if not 0 <= self.rate_limit.jitter_ratio <= 1:
            raise ConfigError("jitter_ratio must be between 0 and 1")
        unknown = set(self.registry.endpoints) - {"npm", "rubygems", "pypi"}
        if unknown:
            raise ConfigError(f"unknown registry endpoints: {', '.join(sorted(unknown))}")
        for name, template in self.registry.endpoints.items():
            if "{name}" not in template:
                raise ConfigError(f"registry endpoint for {name} must contain '{{name}}'")
        valid_levels = {
            "CRITICAL",
            "ERROR",
            "WARNING",
            "INFO",
            "DEBUG",
            "NOTSET",
        }
        if self.logging.level not in valid_levels:
            raise ConfigError("invalid log level")


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from YAML file or defaults."""

    data: Dict[str, Any] = {}
    if path:
        if not Path(path).exists():
            raise FileNotFoundError(path)
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError("Invalid YAML") from e
    else:
        for name in ("config.yml", "config.yaml"):
            if Path(name).exists():
                with open(name, "r") as f:
                    try:
                        data = yaml.safe_load(f) or {}
                    except yaml.YAMLError as e:
                        raise ConfigError("Invalid YAML") from e
                break

    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")

    unknown = set(data) - set(Config.__dataclass_fields__)
    if unknown:
        raise ConfigError(f"unknown configuration sections: {', '.join(sorted(unknown))}")

    return Config(**data)
