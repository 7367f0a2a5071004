# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

from knack.log import get_logger
from azure.cli.core.azclierror import (
    AzureResponseError,
    InvalidArgumentValueError,
    ValidationError as CLIValidationError
)
from azext_k8s_ci_troubleshoot.config_source import load_configuration
from azext_k8s_ci_troubleshoot.crash_reporting import report_and_terminate
from azext_k8s_ci_troubleshoot.exceptions import ConfigurationError, ProviderFetchError, ValidationError
from azext_k8s_ci_troubleshoot.models import ClientConfig
from azext_k8s_ci_troubleshoot.provider_gateway import AzureProviderGateway
from azext_k8s_ci_troubleshoot.secure_client import SecureClientFactory
from azext_k8s_ci_troubleshoot.troubleshooter import DEFAULT_LOG_FILE, run_troubleshooting

logger = get_logger(__name__)


def troubleshoot_onboarding(cmd, resource_id, kube_context=None, json_report=None, log_file=DEFAULT_LOG_FILE):
    """
    Troubleshoot Container Insights onboarding on an Azure Arc enabled Kubernetes cluster.

    Args:
        cmd: Command context
        resource_id: Cluster resource ID
        kube_context: Name of the kube context
        json_report: Path to save JSON report
        log_file: Path of the append-only dump log

    Returns:
        Troubleshooting report dictionary
    """
    from azure.cli.core._profile import Profile

    # The validator may switch subscriptions; restore the user's afterwards
    profile = Profile(cli_ctx=cmd.cli_ctx)
    original_subscription_id = profile.get_subscription_id()

    gateway = AzureProviderGateway(cmd.cli_ctx, original_subscription_id, logger=logger)
    try:
        report = run_troubleshooting(
            gateway=gateway,
            cluster_resource_id=resource_id,
            cloud_name=cmd.cli_ctx.cloud.name,
            kube_context=kube_context,
            json_report_path=json_report,
            log_file=log_file,
            logger=logger
        )
    except ValidationError as e:
        raise InvalidArgumentValueError(str(e)) from e
    except ProviderFetchError as e:
        raise AzureResponseError(str(e)) from e
    finally:
        if (gateway.subscription_id or "").lower() != (original_subscription_id or "").lower():
            logger.warning("restoring subscription id: %s as current subscription", original_subscription_id)
            try:
                profile.set_active_subscription(original_subscription_id)
            except Exception as e:  # pylint: disable=broad-except
                logger.error("Failed to restore subscription id %s: %s", original_subscription_id, e)

    failure = report["validation"]["failure"]
    if failure:
        raise CLIValidationError(f"{failure['state']}: {failure['message']}", recommendation=failure["hint"])

    return report


def verify_transport(cmd, settings_file):  # pylint: disable=unused-argument
    """
    Build the agent's certificate-authenticated HTTP client from a property file.

    Misconfiguration is fatal: the error is reported and the command exits
    after the crash telemetry grace interval.

    Args:
        cmd: Command context
        settings_file: Path of the key=value property file

    Returns:
        Summary of the resolved transport settings
    """
    try:
        settings = load_configuration(settings_file, logger=logger)
    except ConfigurationError as e:
        report_and_terminate(e, fault_type="configuration-read-error", logger=logger)

    config = ClientConfig.from_settings(settings)
    client = SecureClientFactory(logger=logger).build(config)
    try:
        result = client.to_dict()
    finally:
        client.close()

    result.update({
        "cert_file_path": config.cert_path,
        "key_file_path": config.key_path,
        "omsproxy_conf_path": config.proxy_config_path,
    })
    return result
