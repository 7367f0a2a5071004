# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Tests for the Azure SDK backed provider gateway
"""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError, ServiceRequestError, ServiceResponseError

from azext_k8s_ci_troubleshoot.exceptions import ProviderFetchError
from azext_k8s_ci_troubleshoot.models import ValidationState
from azext_k8s_ci_troubleshoot.onboarding_validator import OnboardingValidator
from azext_k8s_ci_troubleshoot.provider_gateway import EXTENSION_NAME, AzureProviderGateway

from .conftest import CLUSTER_SUBSCRIPTION, WORKSPACE_SUBSCRIPTION, workspace_resource_id


@pytest.fixture
def resources_clients():
    return {}


@pytest.fixture
def extensions_client():
    return MagicMock()


@pytest.fixture
def azure_gateway(resources_clients, extensions_client):
    def _resources_factory(_cli_ctx, subscription_id):
        return resources_clients.setdefault(subscription_id, MagicMock(name=f"resources-{subscription_id}"))

    return AzureProviderGateway(
        cli_ctx=MagicMock(),
        subscription_id=CLUSTER_SUBSCRIPTION,
        resources_client_factory=_resources_factory,
        extensions_client_factory=lambda _cli_ctx, _subscription_id: extensions_client
    )


class TestFetchExtension:

    def test_maps_extension(self, azure_gateway, extensions_client, cluster_id):
        extensions_client.get.return_value = SimpleNamespace(
            provisioning_state=SimpleNamespace(value="Succeeded"),
            configuration_settings={"omsagent.domain": "opinsights.azure.com"}
        )

        state = azure_gateway.fetch_extension(cluster_id)

        assert state.provisioning_state == "Succeeded"
        assert state.domain == "opinsights.azure.com"
        extensions_client.get.assert_called_once_with(
            resource_group_name="arc-rg",
            cluster_rp="Microsoft.Kubernetes",
            cluster_resource_name="connectedClusters",
            cluster_name="arc-cluster",
            extension_name=EXTENSION_NAME
        )

    def test_extension_payload_is_logged(self, azure_gateway, extensions_client, cluster_id, caplog):
        extensions_client.get.return_value = SimpleNamespace(provisioning_state="Succeeded",
                                                             configuration_settings={})

        with caplog.at_level(logging.INFO, logger=azure_gateway.logger.name):
            azure_gateway.fetch_extension(cluster_id)

        assert any(m.startswith("extension: ") for m in caplog.messages)

    def test_missing_configuration_settings(self, azure_gateway, extensions_client, cluster_id):
        extensions_client.get.return_value = SimpleNamespace(provisioning_state="Failed",
                                                             configuration_settings=None)

        state = azure_gateway.fetch_extension(cluster_id)

        assert state.provisioning_state == "Failed"
        assert state.configuration == {}

    def test_not_found(self, azure_gateway, extensions_client, cluster_id):
        extensions_client.get.side_effect = ResourceNotFoundError(message="not found")

        with pytest.raises(ProviderFetchError) as exc_info:
            azure_gateway.fetch_extension(cluster_id)

        assert exc_info.value.status_code == 404

    def test_http_error(self, azure_gateway, extensions_client, cluster_id):
        extensions_client.get.side_effect = HttpResponseError(message="AuthorizationFailed")

        with pytest.raises(ProviderFetchError, match="AuthorizationFailed"):
            azure_gateway.fetch_extension(cluster_id)

    def test_connection_error(self, azure_gateway, extensions_client, cluster_id):
        extensions_client.get.side_effect = ServiceRequestError("connection refused")

        with pytest.raises(ProviderFetchError, match="connection refused") as exc_info:
            azure_gateway.fetch_extension(cluster_id)

        assert exc_info.value.error_code == "ServiceRequestError"

    def test_connection_error_fails_validation(self, azure_gateway, extensions_client, cluster_id):
        extensions_client.get.side_effect = ServiceRequestError("connection refused")

        result = OnboardingValidator(azure_gateway, "AzureCloud").run(cluster_id)

        assert result.reached_state == ValidationState.EXTENSION_CONFIG_PRESENT
        assert "connection refused" in result.failure.message


class TestResources:

    def test_fetch_resource_uses_provider_api_version(self, azure_gateway, resources_clients):
        azure_gateway.resources_client.get_by_id.return_value = {"name": "ws1"}

        resource = azure_gateway.fetch_resource(workspace_resource_id())

        assert resource == {"name": "ws1"}
        resources_clients[CLUSTER_SUBSCRIPTION].get_by_id.assert_called_once_with(
            workspace_resource_id(), "2021-06-01"
        )

    def test_fetch_resource_not_found(self, azure_gateway):
        azure_gateway.resources_client.get_by_id.side_effect = ResourceNotFoundError(message="gone")

        with pytest.raises(ProviderFetchError, match="doesnt exist"):
            azure_gateway.fetch_resource(workspace_resource_id())

    def test_fetch_resource_response_error(self, azure_gateway):
        azure_gateway.resources_client.get_by_id.side_effect = ServiceResponseError("connection reset")

        with pytest.raises(ProviderFetchError, match="connection reset"):
            azure_gateway.fetch_resource(workspace_resource_id())

    def test_fetch_resource_malformed_id(self, azure_gateway):
        with pytest.raises(ProviderFetchError):
            azure_gateway.fetch_resource("ws1")

    def test_list_resources_filters_by_type_and_name(self, azure_gateway):
        azure_gateway.resources_client.list_by_resource_group.return_value = iter([{"name": "ws1"}])

        result = azure_gateway.list_resources("ws-rg", "ws1", "Microsoft.OperationalInsights/workspaces")

        assert result == [{"name": "ws1"}]
        azure_gateway.resources_client.list_by_resource_group.assert_called_once_with(
            "ws-rg", filter="resourceType eq 'Microsoft.OperationalInsights/workspaces' and name eq 'ws1'"
        )

    def test_list_resources_connection_error(self, azure_gateway):
        azure_gateway.resources_client.list_by_resource_group.side_effect = ServiceRequestError("timed out")

        with pytest.raises(ProviderFetchError, match="timed out"):
            azure_gateway.list_resources("ws-rg", "ws1", "Microsoft.OperationalInsights/workspaces")


class TestSetActiveSubscription:

    def test_switches_profile_and_rescopes_clients(self, azure_gateway, resources_clients):
        _ = azure_gateway.resources_client

        with patch("azure.cli.core._profile.Profile") as profile_cls:
            azure_gateway.set_active_subscription(WORKSPACE_SUBSCRIPTION)

        profile_cls.return_value.set_active_subscription.assert_called_once_with(WORKSPACE_SUBSCRIPTION)
        assert azure_gateway.subscription_id == WORKSPACE_SUBSCRIPTION
        assert azure_gateway.resources_client is resources_clients[WORKSPACE_SUBSCRIPTION]

    def test_failure_raises_fetch_error(self, azure_gateway):
        with patch("azure.cli.core._profile.Profile") as profile_cls:
            profile_cls.return_value.set_active_subscription.side_effect = Exception("not logged in")

            with pytest.raises(ProviderFetchError, match="not logged in"):
                azure_gateway.set_active_subscription(WORKSPACE_SUBSCRIPTION)

        assert azure_gateway.subscription_id == CLUSTER_SUBSCRIPTION
