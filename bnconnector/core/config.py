"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from bnconnector.domain.network.entities import NetworkSettings


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_heavy: Rate limit for discovery endpoints.
        connection_profile_name: Connection profile passed to the ledger client.
        business_network_identifier: Business network to connect to.
        participant_id: Enrollment id used to connect.
        participant_pwd: Enrollment secret used to connect. Never logged.
        network_model_dir: Directory holding local business network model files.
        registry_dsn: SQLAlchemy DSN of the local registry store.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    project_name: str = "Business Network Connector"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_heavy: str = "10/minute"

    connection_profile_name: str = "local"
    business_network_identifier: str = "org-acme-network"
    participant_id: str = "admin"
    participant_pwd: str = "adminpw"

    network_model_dir: str = "networks"
    registry_dsn: str = "sqlite:///bnconnector.db"

    def network_settings(self) -> NetworkSettings:
        """Return the immutable connection settings for the connector."""
        return NetworkSettings(
            connection_profile_name=self.connection_profile_name,
            business_network_identifier=self.business_network_identifier,
            participant_id=self.participant_id,
            participant_pwd=self.participant_pwd,
        )


settings = Settings()
