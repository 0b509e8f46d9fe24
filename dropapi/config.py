"""Configuration management for dropapi."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from dropapi.transport import DEFAULT_BASE_URL

TOKEN_ENV_VAR = "DIGITALOCEAN_TOKEN"


class DigitalOceanConfig(BaseModel):
    """DigitalOcean API configuration."""

    token: str = Field(..., min_length=1, description="DigitalOcean API token")
    api_base: str = Field(default=DEFAULT_BASE_URL, description="API base URL")

    @field_validator("token")
    @classmethod
    def token_not_empty(cls, v: str) -> str:
        """Validate token is not empty or whitespace."""
        if not v or not v.strip():
            raise ValueError("Token cannot be empty")
        return v.strip()


class ClientConfig(BaseModel):
    """HTTP client behaviour."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    per_page: int = Field(default=20, ge=1, le=200, description="Default page size for listings")
    max_pages: int = Field(
        default=1000, ge=1, description="Maximum pages fetched when following pagination"
    )


class DropapiConfig(BaseModel):
    """Main dropapi configuration."""

    model_config = ConfigDict(extra="forbid")

    digitalocean: DigitalOceanConfig
    client: ClientConfig = Field(default_factory=ClientConfig)


class Config:
    """Manages dropapi configuration with Pydantic validation."""

    CONFIG_DIR = Path.home() / ".config" / "dropapi"
    CONFIG_FILE = CONFIG_DIR / "config.yaml"

    def __init__(self):
        """Initialize config manager."""
        self._config: DropapiConfig | None = None

    @property
    def config(self) -> DropapiConfig:
        """Get the validated configuration."""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")
        return self._config

    @classmethod
    def exists(cls) -> bool:
        """Check if config file exists."""
        return cls.CONFIG_FILE.exists()

    @classmethod
    def ensure_config_dir(cls) -> None:
        """Create config directory if it doesn't exist."""
        cls.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        # Config holds the API token
        cls.CONFIG_DIR.chmod(0o700)

    def load(self) -> None:
        """
        Load and validate configuration.

        Reads the config file when present. ``DIGITALOCEAN_TOKEN`` overrides
        the file's token and is enough on its own when there is no file.

        Raises:
            FileNotFoundError: If there is neither a config file nor a token
                in the environment
            pydantic.ValidationError: If the configuration is invalid
        """
        data: dict = {}
        if self.CONFIG_FILE.exists():
            with open(self.CONFIG_FILE) as f:
                data = yaml.safe_load(f) or {}

        env_token = os.environ.get(TOKEN_ENV_VAR)
        if env_token:
            data.setdefault("digitalocean", {})["token"] = env_token

        if not data:
            raise FileNotFoundError(
                f"Config file not found at {self.CONFIG_FILE} and {TOKEN_ENV_VAR} is not set. "
                "Run 'dropapi init' first."
            )

        self._config = DropapiConfig(**data)

    def save(self) -> None:
        """Save configuration to file."""
        if self._config is None:
            raise ValueError("No configuration to save")

        self.ensure_config_dir()

        data = self._config.model_dump(mode="python")

        with open(self.CONFIG_FILE, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        self.CONFIG_FILE.chmod(0o600)

    def create_default_config(
        self,
        token: str,
        api_base: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        per_page: int = 20,
    ) -> None:
        """Create a default configuration with validation."""
        self._config = DropapiConfig(
            digitalocean=DigitalOceanConfig(token=token, api_base=api_base),
            client=ClientConfig(timeout=timeout, per_page=per_page),
        )
