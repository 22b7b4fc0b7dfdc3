"""
Configuration settings for YCNBot's AI provider clients.

Settings are loaded from environment variables and an optional .env file.
Keys use the application's configuration key names (OpenAIBaseUrl,
AzureOpenAIBaseUrl, ...); fields can also be set by their Python name.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # === Application ===
    environment: str = Field(default="Production", alias="Environment")
    log_level: str = Field(default="INFO", alias="LogLevel")
    request_timeout: float = Field(default=120.0, alias="RequestTimeout", gt=0)

    # === OpenAI ===
    openai_base_url: Optional[str] = Field(default=None, alias="OpenAIBaseUrl")
    openai_api_key: Optional[str] = Field(default=None, alias="OpenAIApiKey")
    openai_organization: Optional[str] = Field(default=None, alias="OpenAIOrganization")
    openai_models: list[str] = Field(
        default=["gpt-3.5-turbo", "gpt-4"], alias="OpenAIModels"
    )

    # === Azure OpenAI ===
    azure_openai_base_url: Optional[str] = Field(default=None, alias="AzureOpenAIBaseUrl")
    azure_openai_api_key: Optional[str] = Field(default=None, alias="AzureOpenAIApiKey")
    azure_openai_api_version: str = Field(default="2023-05-15", alias="AzureOpenAIApiVersion")
    azure_openai_deployments: list[str] = Field(default=[], alias="AzureOpenAIDeployments")

    # === Secret store bootstrap (production only) ===
    azure_ad_cert_thumbprint: Optional[str] = Field(default=None, alias="AzureADCertThumbprint")
    azure_key_vault_uri: Optional[str] = Field(default=None, alias="AzureKeyVaultUri")
    azure_ad_tenant_id: Optional[str] = Field(default=None, alias="AzureAD__TenantId")
    azure_ad_client_id: Optional[str] = Field(default=None, alias="AzureAD__ClientId")
    azure_ad_cert_directory: Optional[str] = Field(default=None, alias="AzureADCertDirectory")
    azure_ad_cert_password: Optional[str] = Field(default=None, alias="AzureADCertPassword")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"
