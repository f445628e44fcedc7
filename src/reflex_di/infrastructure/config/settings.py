"""Container configuration using Pydantic Settings."""

from typing import Any, Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContainerSettings(BaseSettings):
    """Static wiring applied to a container at startup.

    Nested values are read from the environment as JSON, e.g.
    ``REFLEX_DI_IMPLEMENTATIONS='{"app.ports.Mailer": "app.mail.SmtpMailer"}'``.
    """

    model_config = SettingsConfigDict(env_prefix="REFLEX_DI_", extra="ignore")

    definitions: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Injection definitions by type name.",
    )
    implementations: Dict[str, str] = Field(
        default_factory=dict,
        description="Concrete type names by abstract type name.",
    )
    shared: List[str] = Field(default_factory=list, description="Type names to share.")
    detect_cycles: bool = Field(default=True, description="Fail fast on circular dependencies.")
    strict_untyped: bool = Field(default=False, description="Fail on untyped parameters without defaults.")
    log_level: str = Field(default="warning", description="Level used by configure_logging().")
    log_format: str = Field(default="console", description="Either 'console' or 'json'.")
