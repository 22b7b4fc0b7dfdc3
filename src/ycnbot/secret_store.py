"""
Optional secret preloading from Azure Key Vault.

In production, when a certificate thumbprint and a Key Vault URI are
configured, secrets are read from the vault and layered over the settings
before any client is built. The vault is reached as the Azure AD application
named by AzureAD__TenantId / AzureAD__ClientId, authenticating with the
certificate whose thumbprint is configured.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Protocol, get_origin

from azure.identity import CertificateCredential
from azure.keyvault.secrets import SecretClient
from pydantic import ValidationError

from .config import Settings
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CERTIFICATE_SUFFIXES = (".pem", ".pfx")


class SecretStore(Protocol):
    """A source of named secrets."""

    def get_secrets(self) -> Mapping[str, str]:
        ...


SecretStoreFactory = Callable[[Settings], SecretStore]


class AzureKeyVaultSecretStore:
    """Reads every enabled secret from an Azure Key Vault."""

    def __init__(
        self,
        vault_url: str,
        credential: Any = None,
        client: Optional[SecretClient] = None,
    ):
        if client is None:
            client = SecretClient(vault_url=vault_url, credential=credential)
        self.vault_url = vault_url
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureKeyVaultSecretStore":
        """
        Build a store authenticated with the configured client certificate.

        The certificate is looked up by thumbprint in AzureADCertDirectory, as
        `<thumbprint>.pem` or `<thumbprint>.pfx`.

        Raises:
            ConfigurationError: Tenant id, client id or certificate is missing
        """
        if not settings.azure_ad_tenant_id or not settings.azure_ad_client_id:
            raise ConfigurationError(
                "AzureAD__TenantId and AzureAD__ClientId are required to read from Key Vault"
            )
        certificate = find_certificate(settings)
        credential = CertificateCredential(
            settings.azure_ad_tenant_id,
            settings.azure_ad_client_id,
            certificate_path=str(certificate),
            password=settings.azure_ad_cert_password,
        )
        return cls(settings.azure_key_vault_uri, credential)

    def get_secrets(self) -> dict[str, str]:
        secrets = {}
        for properties in self.client.list_properties_of_secrets():
            if properties.enabled is False:
                continue
            value = self.client.get_secret(properties.name).value
            if value is not None:
                secrets[properties.name] = value
        return secrets


def find_certificate(settings: Settings) -> Path:
    """Locate the client certificate matching AzureADCertThumbprint."""
    if not settings.azure_ad_cert_directory:
        raise ConfigurationError(
            "AzureADCertThumbprint is set but AzureADCertDirectory is not"
        )
    directory = Path(settings.azure_ad_cert_directory)
    thumbprint = settings.azure_ad_cert_thumbprint or ""
    for stem in dict.fromkeys((thumbprint, thumbprint.upper(), thumbprint.lower())):
        for suffix in CERTIFICATE_SUFFIXES:
            candidate = directory / f"{stem}{suffix}"
            if candidate.is_file():
                return candidate
    raise ConfigurationError(
        f"No certificate with thumbprint {thumbprint} found in {directory}"
    )


def should_preload_secrets(settings: Settings) -> bool:
    """Secrets are preloaded only in production with a certificate thumbprint."""
    return settings.is_production and bool(settings.azure_ad_cert_thumbprint)


def _settings_aliases() -> dict[str, str]:
    """Map lower-cased configuration keys and field names to configuration keys."""
    keys = {}
    for name, field in Settings.model_fields.items():
        alias = field.alias or name
        keys[name.lower()] = alias
        keys[alias.lower()] = alias
    return keys


def _list_aliases() -> set[str]:
    return {
        field.alias or name
        for name, field in Settings.model_fields.items()
        if get_origin(field.annotation) is list
    }


def preload_secrets(
    settings: Settings,
    store_factory: SecretStoreFactory | None = None,
) -> Settings:
    """
    Return settings with secrets from the external store applied.

    Key Vault secret names cannot contain ':' or '_', so hierarchical keys use
    '--' (e.g. "AzureAD--TenantId"), mapped here to the '__' form. List values
    arrive JSON-encoded, as they do from the environment.

    Args:
        settings: Settings loaded from the environment
        store_factory: Builds the secret store from the settings, defaults to
            `AzureKeyVaultSecretStore.from_settings`

    Returns:
        The original settings when preloading does not apply, otherwise new
        settings validated with the matching secrets applied

    Raises:
        ConfigurationError: The store cannot be built, or a secret value is
            not valid for its setting
    """
    if not should_preload_secrets(settings):
        return settings

    if not settings.azure_key_vault_uri:
        logger.info("Certificate thumbprint configured but no Key Vault URI; skipping secrets")
        return settings

    store = (store_factory or AzureKeyVaultSecretStore.from_settings)(settings)
    aliases = _settings_aliases()
    list_aliases = _list_aliases()
    updates = {}
    for secret_name, value in store.get_secrets().items():
        alias = aliases.get(secret_name.replace("--", "__").lower())
        if alias is None:
            logger.debug(f"Ignoring secret with no matching setting: {secret_name}")
            continue
        if alias in list_aliases:
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Secret {secret_name} is not a JSON list") from e
        updates[alias] = value

    logger.info(f"Loaded {len(updates)} secret(s) from {settings.azure_key_vault_uri}")
    if not updates:
        return settings

    values = settings.model_dump(by_alias=True)
    values.update(updates)
    try:
        return Settings(_env_file=None, **values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid secret value from Key Vault: {e}") from e
