# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Container Insights onboarding troubleshooter

Top-level runner: sets up the dump log, validates input, makes the cluster
subscription active and runs the onboarding validator.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from azext_k8s_ci_troubleshoot._version import __version__
from azext_k8s_ci_troubleshoot.exceptions import ProviderFetchError, ValidationError
from azext_k8s_ci_troubleshoot.models import ValidationResult
from azext_k8s_ci_troubleshoot.onboarding_validator import OnboardingValidator
from azext_k8s_ci_troubleshoot.provider_gateway import ProviderGateway
from azext_k8s_ci_troubleshoot.validators import InputValidator

DEFAULT_LOG_FILE = "TroubleshootDump.log"


def run_troubleshooting(
    gateway: ProviderGateway,
    cluster_resource_id: str,
    cloud_name: str,
    kube_context: Optional[str] = None,
    json_report_path: Optional[str] = None,
    log_file: Optional[str] = DEFAULT_LOG_FILE,
    logger: Optional[logging.Logger] = None
) -> Dict[str, Any]:
    """
    Troubleshoot Container Insights onboarding on an Azure Arc enabled Kubernetes cluster.

    Every message is shown on the console and appended to the dump log.
    The subscription active before the run is not restored here.

    Args:
        gateway: Control plane gateway
        cluster_resource_id: Fully qualified cluster resource ID
        cloud_name: Name of the Azure cloud
        kube_context: Name of the kube context, informational only
        json_report_path: Path to save JSON report (if provided)
        log_file: Path of the append-only dump log (None disables it)
        logger: Optional logger instance

    Returns:
        Dictionary containing the troubleshooting report

    Raises:
        ValidationError: If the cluster resource ID is invalid or the log file is outside the current directory
        ProviderFetchError: If the cluster subscription cannot be made active
    """
    if logger is None:
        logger = _setup_logging()

    dump_handler = None
    if log_file:
        dump_handler = _attach_dump_log(logger, InputValidator.validate_output_path(log_file, suffix=".log"))
    try:
        logger.warning("clusterResourceId is %s", cluster_resource_id)
        cluster_id = InputValidator.validate_cluster_resource_id(cluster_resource_id)
        logger.warning("cluster SubscriptionId: %s", cluster_id.subscription_id)
        logger.warning("cluster ResourceGroup: %s", cluster_id.resource_group)
        logger.warning("cluster ProviderName: %s", cluster_id.provider.lower())
        logger.warning("cluster Name: %s", cluster_id.resource_name)

        if kube_context:
            logger.warning("name of kube-context is %s", kube_context)
        else:
            logger.warning("using current kube config context since --kube-context parameter not set")

        logger.warning("azure cloud name: %s", cloud_name)

        cluster_subscription_id = cluster_id.subscription_id.lower()
        logger.warning("[1/2] Setting subscription id: %s as current subscription...", cluster_subscription_id)
        gateway.set_active_subscription(cluster_subscription_id)

        logger.warning("[2/2] Validating Container Insights extension...")
        validator = OnboardingValidator(
            gateway=gateway,
            cloud_name=cloud_name,
            active_subscription_id=cluster_subscription_id,
            logger=logger
        )
        result = validator.run(cluster_id)

        report = _build_report(result, cloud_name, kube_context)

        if json_report_path:
            _save_json_report(report, json_report_path, logger)

        return report
    except (ValidationError, ProviderFetchError) as e:
        logger.error("error %s", e)
        raise
    finally:
        if dump_handler is not None:
            logger.removeHandler(dump_handler)
            dump_handler.close()


def _build_report(result: ValidationResult, cloud_name: str, kube_context: Optional[str]) -> Dict[str, Any]:
    return {
        "metadata": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "generated_by": "Container Insights Troubleshooter (Python)",
        },
        "cluster": {
            "resource_id": result.cluster_id.resource_id,
            "subscription": result.cluster_id.subscription_id,
            "resource_group": result.cluster_id.resource_group,
            "name": result.cluster_id.resource_name,
            "cloud": cloud_name,
            "kube_context": kube_context,
        },
        "validation": result.to_dict(),
    }


def _save_json_report(report: Dict[str, Any], json_report_path: str, logger: logging.Logger):
    path = InputValidator.validate_output_path(json_report_path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)
        os.chmod(path, 0o600)
        logger.info("[DOC] JSON report saved to: %s", path)
    except OSError as e:
        logger.error("Failed to save JSON report: %s", e)


def _attach_dump_log(logger: logging.Logger, log_file: str) -> logging.Handler:
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt="%(message)s"))
    handler.setLevel(logging.INFO)
    logger.addHandler(handler)
    return handler


def _setup_logging() -> logging.Logger:
    """
    Configure logging with appropriate handlers and formatters.

    Returns:
        Configured logger instance
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    logger = logging.getLogger("k8s_ci_troubleshoot")
    logger.propagate = False

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.setLevel(logging.INFO)

    return logger
