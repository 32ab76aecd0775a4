"""Provider front end: schema, metadata and configuration of the storage client."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, fields
from typing import Any, Callable, Union

from schemastore.storage import RowStorer

log = logging.getLogger(__name__)

ATTR_AWS_PROFILE = "profile"
ATTR_AWS_REGION = "region"
ATTR_TABLE_NAME = "table_name"
ATTR_KEY_ARN = "kms_key_arn"

TYPE_NAME = "schema"


class _UnknownType(enum.Enum):
    UNKNOWN = "unknown"

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = _UnknownType.UNKNOWN
"""Marks a configuration value that is not yet known."""

ConfigValue = Union[str, _UnknownType]
ClientFactory = Callable[[str, str, str, str], RowStorer]

_UNKNOWN_MESSAGES: dict[str, tuple[str, str]] = {
    ATTR_AWS_PROFILE: (
        "Unknown profile",
        "Cannot configure the provider client with an unknown profile.",
    ),
    ATTR_AWS_REGION: (
        "Unknown region",
        "Cannot configure the provider client with an unknown region.",
    ),
    ATTR_TABLE_NAME: (
        "Unknown table name",
        "Cannot configure the provider client with an unknown DynamoDB storage table name.",
    ),
    ATTR_KEY_ARN: (
        "Unknown KMS Key ARN",
        "Cannot configure the provider client with an unknown KMS Key ARN.",
    ),
}


@dataclass(frozen=True)
class Diagnostic:
    """A problem found while configuring the provider."""

    summary: str
    detail: str
    attribute: str | None = None
    severity: str = "error"


class ConfigurationError(Exception):
    """Raised when the provider cannot be configured; carries its diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = list(diagnostics)
        super().__init__("; ".join(d.summary for d in self.diagnostics))


@dataclass(frozen=True)
class ProviderConfig:
    """Provider settings; any of them may be :data:`UNKNOWN`."""

    profile: ConfigValue
    region: ConfigValue
    table_name: ConfigValue
    kms_key_arn: ConfigValue


class SchemaProvider:
    """Describes the provider and builds its storage client from configuration."""

    def __init__(self, version: str, commit: str, client_factory: ClientFactory) -> None:
        self.version = version
        self.commit = commit
        self.client_factory = client_factory

    def metadata(self) -> dict[str, str]:
        """Return the provider's type name and version."""
        return {"type_name": TYPE_NAME, "version": f"{self.version}-{self.commit}"}

    def schema(self) -> dict[str, Any]:
        """Return the provider's configuration schema."""
        return {
            "description": "Interact with the information architecture of the engineering platform.",
            "attributes": {
                ATTR_AWS_PROFILE: {
                    "type": "string",
                    "description": "The AWS profile to use for DynamoDB storage.",
                    "required": True,
                },
                ATTR_AWS_REGION: {
                    "type": "string",
                    "description": "The AWS region to use for DynamoDB storage.",
                    "required": True,
                },
                ATTR_TABLE_NAME: {
                    "type": "string",
                    "description": "The table name to use for DynamoDB storage.",
                    "required": True,
                },
                ATTR_KEY_ARN: {
                    "type": "string",
                    "description": "The ARN of the KMS key to use for encrypting the DynamoDB storage.",
                    "required": True,
                },
            },
        }

    def configure(self, config: ProviderConfig) -> RowStorer:
        """Build the storage client shared by data sources and resources."""
        diagnostics = [
            Diagnostic(summary=summary, detail=detail, attribute=f.name)
            for f in fields(config)
            if getattr(config, f.name) is UNKNOWN
            for summary, detail in [_UNKNOWN_MESSAGES[f.name]]
        ]
        if diagnostics:
            raise ConfigurationError(diagnostics)

        log.debug(
            "configuring provider client",
            extra={ATTR_AWS_REGION: config.region, ATTR_TABLE_NAME: config.table_name},
        )
        try:
            return self.client_factory(
                config.profile, config.region, config.table_name, config.kms_key_arn
            )
        except Exception as exc:
            raise ConfigurationError(
                [
                    Diagnostic(
                        summary="Unable to create provider client",
                        detail="An unexpected error occurred when creating the provider client.\n\n"
                        + str(exc),
                    )
                ]
            ) from exc

    def data_sources(self) -> list[Callable[[], Any]]:
        """Return the data source factories the provider offers."""
        return []

    def resources(self) -> list[Callable[[], Any]]:
        """Return the resource factories the provider offers."""
        return []