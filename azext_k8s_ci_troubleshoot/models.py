# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Data models for Container Insights onboarding diagnostics
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import InvalidResourceIdError

WORKSPACE_RESOURCE_ID_KEY = "logAnalyticsWorkspaceResourceID"
WORKSPACE_DOMAIN_KEY = "omsagent.domain"

CERT_FILE_PATH_KEY = "cert_file_path"
KEY_FILE_PATH_KEY = "key_file_path"
PROXY_CONF_PATH_KEY = "omsproxy_conf_path"

DEFAULT_TIMEOUT_SECONDS = 30


class ValidationState(Enum):
    """Onboarding pipeline states, in execution order"""

    EXTENSION_CONFIG_PRESENT = "ExtensionConfigPresent"
    PROVISIONING_SUCCEEDED = "ProvisioningSucceeded"
    DOMAIN_MATCHES_CLOUD = "DomainMatchesCloud"
    WORKSPACE_RESOURCE_EXISTS = "WorkspaceResourceExists"
    INSIGHTS_SOLUTION_LINKED = "InsightsSolutionLinked"
    INGESTION_NETWORK_ACCESS_ENABLED = "IngestionNetworkAccessEnabled"
    QUERY_NETWORK_ACCESS_ENABLED = "QueryNetworkAccessEnabled"
    DAILY_QUOTA_WITHIN_EXPECTED = "DailyQuotaWithinExpected"
    DONE = "Done"


class NetworkAccess(Enum):
    """Workspace public network access settings"""

    ENABLED = "Enabled"
    DISABLED = "Disabled"


@dataclass(frozen=True)
class ResourceIdentifier:
    """Decomposed fully qualified ARM resource ID"""

    subscription_id: str
    resource_group: str
    provider_namespace: str
    resource_type: str
    resource_name: str

    @classmethod
    def parse(cls, resource_id: str) -> "ResourceIdentifier":
        """
        Decompose /subscriptions/{sub}/resourceGroups/{rg}/providers/{ns}/{type}/{name}

        Args:
            resource_id: Fully qualified resource ID

        Returns:
            ResourceIdentifier

        Raises:
            InvalidResourceIdError: If a segment is missing or the namespace is not a Microsoft one
        """
        parts = (resource_id or "").strip().split("/")
        # ['', 'subscriptions', sub, 'resourceGroups', rg, 'providers', ns, type, name]
        segments = [parts[i] if len(parts) > i else "" for i in (2, 4, 6, 7, 8)]
        subscription_id, resource_group, namespace, resource_type, name = segments

        if not all(segments):
            raise InvalidResourceIdError(
                f"invalid resource id '{resource_id}'. Please try with valid fully qualified resource id"
            )
        if not namespace.lower().startswith("microsoft."):
            raise InvalidResourceIdError(f"invalid azure resource id format: '{resource_id}'")

        return cls(subscription_id, resource_group, namespace, resource_type, name)

    @property
    def provider(self) -> str:
        return f"{self.provider_namespace}/{self.resource_type}"

    @property
    def resource_id(self) -> str:
        return (
            f"/subscriptions/{self.subscription_id}/resourceGroups/{self.resource_group}"
            f"/providers/{self.provider}/{self.resource_name}"
        )


@dataclass
class ExtensionState:
    """Monitoring extension state fetched from the cluster"""

    provisioning_state: Optional[str]
    configuration: Dict[str, str] = field(default_factory=dict)

    @property
    def workspace_resource_id(self) -> Optional[str]:
        return self.configuration.get(WORKSPACE_RESOURCE_ID_KEY) or None

    @property
    def domain(self) -> Optional[str]:
        return self.configuration.get(WORKSPACE_DOMAIN_KEY) or None


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


@dataclass
class WorkspaceState:
    """Log Analytics workspace properties relevant to ingestion"""

    resource_id: ResourceIdentifier
    public_network_access_ingestion: Optional[str] = None
    public_network_access_query: Optional[str] = None
    daily_quota_gb: Optional[Decimal] = None

    @classmethod
    def from_resource(cls, resource_id: ResourceIdentifier, resource: Mapping[str, Any]) -> "WorkspaceState":
        """Build from a generic ARM resource payload"""
        properties = resource.get("properties") or {}
        capping = properties.get("workspaceCapping") or {}
        return cls(
            resource_id=resource_id,
            public_network_access_ingestion=properties.get("publicNetworkAccessForIngestion"),
            public_network_access_query=properties.get("publicNetworkAccessForQuery"),
            daily_quota_gb=_to_decimal(capping.get("dailyQuotaGb")),
        )


@dataclass
class ValidationContext:
    """State threaded through a single validation run"""

    cluster_id: ResourceIdentifier
    active_subscription_id: str
    extension_state: Optional[ExtensionState] = None
    workspace_state: Optional[WorkspaceState] = None
    diagnostics: List[str] = field(default_factory=list)


@dataclass
class ValidationFailure:
    """Terminal failure of the pipeline at a given state"""

    state: ValidationState
    message: str
    hint: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "state": self.state.value,
            "message": self.message,
            "hint": self.hint,
        }


@dataclass
class ValidationResult:
    """Outcome of an onboarding validation run"""

    cluster_id: ResourceIdentifier
    reached_state: ValidationState
    failure: Optional[ValidationFailure] = None
    diagnostics: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.failure is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "cluster_resource_id": self.cluster_id.resource_id,
            "passed": self.passed,
            "reached_state": self.reached_state.value,
            "failure": self.failure.to_dict() if self.failure else None,
            "diagnostics": list(self.diagnostics),
        }


@dataclass(frozen=True)
class ClientConfig:
    """Transport settings for the secure client"""

    cert_path: str
    key_path: str
    proxy_config_path: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls, settings: Mapping[str, str]) -> "ClientConfig":
        """Build from a mapping loaded by load_configuration"""
        return cls(
            cert_path=settings.get(CERT_FILE_PATH_KEY, ""),
            key_path=settings.get(KEY_FILE_PATH_KEY, ""),
            proxy_config_path=settings.get(PROXY_CONF_PATH_KEY) or None,
        )
