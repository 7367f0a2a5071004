# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

from azure.cli.core.commands.client_factory import get_mgmt_service_client


def cf_resources(cli_ctx, subscription_id=None):
    from azure.mgmt.resource import ResourceManagementClient
    return get_mgmt_service_client(cli_ctx, ResourceManagementClient, subscription_id=subscription_id).resources


def cf_k8s_extensions(cli_ctx, subscription_id=None):
    from azure.mgmt.kubernetesconfiguration import SourceControlConfigurationClient
    return get_mgmt_service_client(cli_ctx, SourceControlConfigurationClient,
                                   subscription_id=subscription_id).extensions
