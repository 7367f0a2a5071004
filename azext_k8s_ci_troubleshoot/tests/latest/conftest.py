# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Shared fixtures for Container Insights troubleshooting tests
"""

import copy
import logging

import pytest

from azext_k8s_ci_troubleshoot.exceptions import ProviderFetchError
from azext_k8s_ci_troubleshoot.models import ExtensionState, ResourceIdentifier
from azext_k8s_ci_troubleshoot.provider_gateway import ProviderGateway

CLUSTER_SUBSCRIPTION = "11111111-1111-1111-1111-111111111111"
WORKSPACE_SUBSCRIPTION = "22222222-2222-2222-2222-222222222222"

CLUSTER_RESOURCE_ID = (
    f"/subscriptions/{CLUSTER_SUBSCRIPTION}/resourceGroups/arc-rg"
    "/providers/Microsoft.Kubernetes/connectedClusters/arc-cluster"
)


def workspace_resource_id(subscription_id=CLUSTER_SUBSCRIPTION):
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/ws-rg"
        "/providers/Microsoft.OperationalInsights/workspaces/ws1"
    )


def solution_resource_id(subscription_id=CLUSTER_SUBSCRIPTION):
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/ws-rg"
        "/providers/Microsoft.OperationsManagement/solutions/ContainerInsights(ws1)"
    )


class FakeGateway(ProviderGateway):
    """In-memory gateway recording every call in order"""

    def __init__(self, extension, resources, workspaces=None):
        self.extension = extension
        self.resources = resources
        self.workspaces = [{"name": "ws1"}] if workspaces is None else workspaces
        self.calls = []

    def fetch_extension(self, cluster_id):
        self.calls.append(("fetch_extension", cluster_id.resource_name))
        if isinstance(self.extension, Exception):
            raise self.extension
        return self.extension

    def fetch_resource(self, resource_id):
        self.calls.append(("fetch_resource", resource_id))
        if resource_id not in self.resources:
            raise ProviderFetchError(f"Resource {resource_id} doesnt exist", status_code=404)
        return copy.deepcopy(self.resources[resource_id])

    def set_active_subscription(self, subscription_id):
        self.calls.append(("set_active_subscription", subscription_id))

    def list_resources(self, resource_group, name, resource_type):
        self.calls.append(("list_resources", resource_group, name, resource_type))
        return self.workspaces


def build_gateway(
    workspace_subscription=CLUSTER_SUBSCRIPTION,
    provisioning_state="Succeeded",
    domain="opinsights.azure.com",
    ingestion="Enabled",
    query="Enabled",
    daily_quota_gb=1.0,
    configuration=None,
    workspaces=None,
    with_solution=True
):
    """Gateway for a healthy onboarding, with individual fields overridable"""
    if configuration is None:
        configuration = {
            "logAnalyticsWorkspaceResourceID": workspace_resource_id(workspace_subscription),
            "omsagent.domain": domain,
        }

    properties = {
        "publicNetworkAccessForIngestion": ingestion,
        "publicNetworkAccessForQuery": query,
    }
    if daily_quota_gb is not None:
        properties["workspaceCapping"] = {"dailyQuotaGb": daily_quota_gb}

    resources = {
        workspace_resource_id(workspace_subscription): {"name": "ws1", "properties": properties},
    }
    if with_solution:
        resources[solution_resource_id(workspace_subscription)] = {"name": "ContainerInsights(ws1)"}

    return FakeGateway(
        extension=ExtensionState(provisioning_state=provisioning_state, configuration=configuration),
        resources=resources,
        workspaces=workspaces
    )


@pytest.fixture
def cluster_id():
    return ResourceIdentifier.parse(CLUSTER_RESOURCE_ID)


@pytest.fixture
def gateway():
    return build_gateway()


@pytest.fixture
def test_logger():
    logger = logging.getLogger("k8s_ci_troubleshoot.tests")
    logger.setLevel(logging.DEBUG)
    return logger
