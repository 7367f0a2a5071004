# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Provider gateway for onboarding diagnostics

Defines the read-mostly contract the onboarding validator uses to query the
control plane, and its implementation on top of pre-authenticated Azure SDK
clients from Azure CLI.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from azure.core.exceptions import AzureError, HttpResponseError, ResourceNotFoundError

from ._client_factory import cf_k8s_extensions, cf_resources
from .exceptions import InvalidResourceIdError, ProviderFetchError
from .models import ExtensionState, ResourceIdentifier

EXTENSION_NAME = "azuremonitor-containers"

# ARM api-version per resource provider, used with get_by_id
RESOURCE_API_VERSIONS = {
    "microsoft.operationalinsights/workspaces": "2021-06-01",
    "microsoft.operationsmanagement/solutions": "2015-11-01-preview",
}
DEFAULT_API_VERSION = "2021-04-01"


def _to_dict(obj: Any) -> Any:
    """
    Convert Azure SDK object to dictionary recursively.

    Args:
        obj: Azure SDK object or primitive type

    Returns:
        Dictionary representation or primitive value
    """
    if hasattr(obj, 'as_dict'):
        return obj.as_dict()
    if isinstance(obj, dict):
        return {k: _to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_dict(item) for item in obj]
    return obj


def _fetch_error(error: HttpResponseError, action: str) -> ProviderFetchError:
    error_code = error.error.code if getattr(error, "error", None) else None
    return ProviderFetchError(
        f"Failed to {action}: {error.message}",
        error_code=error_code,
        status_code=error.status_code
    )


def _transport_error(error: AzureError, action: str) -> ProviderFetchError:
    return ProviderFetchError(f"Failed to {action}: {error.message}", error_code=type(error).__name__)


class ProviderGateway(ABC):
    """Contract for control plane queries used by the onboarding validator"""

    @abstractmethod
    def fetch_extension(self, cluster_id: ResourceIdentifier) -> ExtensionState:
        """Fetch the monitoring extension installed on the cluster"""

    @abstractmethod
    def fetch_resource(self, resource_id: str) -> Dict[str, Any]:
        """Fetch a resource by its fully qualified ID"""

    @abstractmethod
    def set_active_subscription(self, subscription_id: str) -> None:
        """Make subscription_id the active subscription for subsequent queries"""

    @abstractmethod
    def list_resources(self, resource_group: str, name: str, resource_type: str) -> List[Dict[str, Any]]:
        """List resources in a resource group matching name and type"""


class AzureProviderGateway(ProviderGateway):
    """ProviderGateway backed by Azure CLI management clients"""

    def __init__(
        self,
        cli_ctx,
        subscription_id: str,
        logger: Optional[logging.Logger] = None,
        resources_client_factory: Callable = cf_resources,
        extensions_client_factory: Callable = cf_k8s_extensions
    ):
        """
        Initialize the gateway

        Args:
            cli_ctx: Azure CLI context
            subscription_id: Subscription active when the gateway is created
            logger: Optional logger instance
            resources_client_factory: Builds a ResourcesOperations client for a subscription
            extensions_client_factory: Builds an ExtensionsOperations client for a subscription
        """
        self.cli_ctx = cli_ctx
        self.subscription_id = subscription_id
        self.logger = logger or logging.getLogger("k8s_ci_troubleshoot.provider_gateway")
        self._resources_client_factory = resources_client_factory
        self._extensions_client_factory = extensions_client_factory
        self._resources_client = None

    @property
    def resources_client(self):
        if self._resources_client is None:
            self._resources_client = self._resources_client_factory(self.cli_ctx, self.subscription_id)
        return self._resources_client

    def fetch_extension(self, cluster_id: ResourceIdentifier) -> ExtensionState:
        client = self._extensions_client_factory(self.cli_ctx, cluster_id.subscription_id)
        try:
            extension = client.get(
                resource_group_name=cluster_id.resource_group,
                cluster_rp=cluster_id.provider_namespace,
                cluster_resource_name=cluster_id.resource_type,
                cluster_name=cluster_id.resource_name,
                extension_name=EXTENSION_NAME
            )
        except ResourceNotFoundError as e:
            raise ProviderFetchError(
                f"Extension '{EXTENSION_NAME}' not found on cluster '{cluster_id.resource_name}'",
                error_code="ResourceNotFound",
                status_code=404
            ) from e
        except HttpResponseError as e:
            raise _fetch_error(e, f"get extension '{EXTENSION_NAME}'") from e
        except AzureError as e:
            raise _transport_error(e, f"get extension '{EXTENSION_NAME}'") from e

        self.logger.info("extension: %s", _to_dict(extension))

        provisioning_state = getattr(extension, "provisioning_state", None)
        return ExtensionState(
            provisioning_state=getattr(provisioning_state, "value", provisioning_state),
            configuration=dict(getattr(extension, "configuration_settings", None) or {})
        )

    def fetch_resource(self, resource_id: str) -> Dict[str, Any]:
        try:
            provider = ResourceIdentifier.parse(resource_id).provider.lower()
        except InvalidResourceIdError as e:
            raise ProviderFetchError(str(e)) from e
        api_version = RESOURCE_API_VERSIONS.get(provider, DEFAULT_API_VERSION)
        try:
            resource = self.resources_client.get_by_id(resource_id, api_version)
        except ResourceNotFoundError as e:
            raise ProviderFetchError(
                f"Resource {resource_id} doesnt exist",
                error_code="ResourceNotFound",
                status_code=404
            ) from e
        except HttpResponseError as e:
            raise _fetch_error(e, f"get resource {resource_id}") from e
        except AzureError as e:
            raise _transport_error(e, f"get resource {resource_id}") from e
        return _to_dict(resource)

    def set_active_subscription(self, subscription_id: str) -> None:
        from azure.cli.core._profile import Profile

        try:
            Profile(cli_ctx=self.cli_ctx).set_active_subscription(subscription_id)
        except Exception as e:  # pylint: disable=broad-except
            raise ProviderFetchError(f"Failed to set active subscription {subscription_id}: {e}") from e

        self.subscription_id = subscription_id
        # Subscription-scoped clients are rebuilt on next use
        self._resources_client = None

    def list_resources(self, resource_group: str, name: str, resource_type: str) -> List[Dict[str, Any]]:
        resource_filter = f"resourceType eq '{resource_type}' and name eq '{name}'"
        try:
            resources = self.resources_client.list_by_resource_group(resource_group, filter=resource_filter)
            return [_to_dict(r) for r in resources]
        except HttpResponseError as e:
            raise _fetch_error(e, f"list resources in resource group {resource_group}") from e
        except AzureError as e:
            raise _transport_error(e, f"list resources in resource group {resource_group}") from e
