# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

from knack.help_files import helps


helps['k8s-ci-troubleshoot'] = """
    type: group
    short-summary: Troubleshoot Azure Monitor for containers on Azure Arc enabled Kubernetes clusters.
"""

helps['k8s-ci-troubleshoot onboarding'] = """
    type: command
    short-summary: Troubleshoot errors related to onboarding of Azure Monitor for containers.
    long-summary: |
        Runs an ordered sequence of read-only checks and stops at the first failure:
        - azuremonitor-containers extension configuration present
        - Extension provisioning state is Succeeded
        - Log Analytics domain matches the Azure cloud
        - Log Analytics workspace exists
        - ContainerInsights solution is linked to the workspace
        - Public network access for ingestion and query is enabled
        - Workspace daily quota matches the expected value

        If the workspace is in a different subscription than the cluster, the workspace
        subscription is made active while checking it and the original subscription is
        restored afterwards.

        Every message is also appended to TroubleshootDump.log (see --log-file).
    examples:
        - name: Troubleshoot onboarding of a connected cluster
          text: |
            az k8s-ci-troubleshoot onboarding \\
                --resource-id /subscriptions/<sub>/resourceGroups/<rg>/providers/Microsoft.Kubernetes/connectedClusters/<name>
        - name: Troubleshoot and save results as JSON
          text: |
            az k8s-ci-troubleshoot onboarding --resource-id <cluster resource id> \\
                --kube-context my-context --json-report report.json
"""

helps['k8s-ci-troubleshoot transport'] = """
    type: command
    short-summary: Build the agent's certificate-authenticated HTTP client from its settings file.
    long-summary: |
        Loads the client certificate and key, and the proxy from omsproxy_conf_path when that file
        exists. A broken certificate or proxy configuration is fatal: the error is reported and the
        command exits after a 30 second grace interval.
    examples:
        - name: Verify the agent transport settings
          text: az k8s-ci-troubleshoot transport --settings-file /etc/opt/microsoft/docker-cimprov/out_oms.conf
"""
