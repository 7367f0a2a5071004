# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Onboarding Validator for Container Insights

Walks a fixed, ordered sequence of read-only checks across the cluster's
monitoring extension and its Log Analytics workspace:

- Extension configuration present
- Extension provisioning succeeded
- Log Analytics domain matches the cloud
- Workspace exists (switching to the workspace subscription if needed)
- ContainerInsights solution linked to the workspace
- Public network access for ingestion and query enabled
- Daily quota matches the expected value

The first failing check ends the run.
"""

import logging
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from .exceptions import (
    CheckFailedError,
    InvalidResourceIdError,
    MismatchError,
    MissingFieldError,
    ProviderFetchError
)
from .models import (
    WORKSPACE_DOMAIN_KEY,
    WORKSPACE_RESOURCE_ID_KEY,
    NetworkAccess,
    ResourceIdentifier,
    ValidationContext,
    ValidationFailure,
    ValidationResult,
    ValidationState,
    WorkspaceState
)
from .provider_gateway import ProviderGateway

CONTACT_US_MESSAGE = (
    "Please contact us by emailing askcoin@microsoft.com if you need any help with this script captured logs"
)
DATA_CAP_HELP_MESSAGE = (
    "Please review and increase data cap "
    "https://docs.microsoft.com/en-us/azure/azure-monitor/logs/manage-cost-storage"
)
WORKSPACE_PRIVATE_LINK_MESSAGE = (
    "Please review this doc https://docs.microsoft.com/en-us/azure/azure-monitor/logs/private-link-security"
)

WORKSPACE_RESOURCE_TYPE = "Microsoft.OperationalInsights/workspaces"
SOLUTION_RESOURCE_TYPE = "Microsoft.OperationsManagement/solutions"
PROVISIONING_STATE_SUCCEEDED = "Succeeded"
EXPECTED_DAILY_QUOTA_GB = Decimal("1.0")

CLOUD_LOG_DOMAINS = {
    "azurecloud": "opinsights.azure.com",
    "azureusgovernment": "opinsights.azure.us",
    "azurechinacloud": "opinsights.azure.cn",
}

_REMEDIATION_HINTS = {
    ValidationState.INGESTION_NETWORK_ACCESS_ENABLED: WORKSPACE_PRIVATE_LINK_MESSAGE,
    ValidationState.QUERY_NETWORK_ACCESS_ENABLED: WORKSPACE_PRIVATE_LINK_MESSAGE,
    ValidationState.DAILY_QUOTA_WITHIN_EXPECTED: DATA_CAP_HELP_MESSAGE,
}


class OnboardingValidator:
    """Fail-fast validation pipeline for Container Insights onboarding"""

    def __init__(
        self,
        gateway: ProviderGateway,
        cloud_name: str,
        active_subscription_id: Optional[str] = None,
        expected_daily_quota_gb: Decimal = EXPECTED_DAILY_QUOTA_GB,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the validator

        Args:
            gateway: Control plane gateway
            cloud_name: Name of the Azure cloud, e.g. AzureCloud
            active_subscription_id: Subscription active on the gateway session.
                                    Defaults to the cluster subscription.
            expected_daily_quota_gb: Daily quota the workspace must be configured with
            logger: Optional logger instance
        """
        self.gateway = gateway
        self.cloud_name = "".join((cloud_name or "").split()).lower()
        self.active_subscription_id = active_subscription_id
        self.expected_daily_quota_gb = Decimal(expected_daily_quota_gb)
        self.logger = logger or logging.getLogger("k8s_ci_troubleshoot.OnboardingValidator")
        self._checks: List[Tuple[ValidationState, Callable[[ValidationContext], None]]] = [
            (ValidationState.EXTENSION_CONFIG_PRESENT, self._check_extension_config),
            (ValidationState.PROVISIONING_SUCCEEDED, self._check_provisioning_state),
            (ValidationState.DOMAIN_MATCHES_CLOUD, self._check_domain),
            (ValidationState.WORKSPACE_RESOURCE_EXISTS, self._check_workspace_exists),
            (ValidationState.INSIGHTS_SOLUTION_LINKED, self._check_insights_solution),
            (ValidationState.INGESTION_NETWORK_ACCESS_ENABLED, self._check_ingestion_access),
            (ValidationState.QUERY_NETWORK_ACCESS_ENABLED, self._check_query_access),
            (ValidationState.DAILY_QUOTA_WITHIN_EXPECTED, self._check_daily_quota),
        ]

    def run(self, cluster_id: ResourceIdentifier) -> ValidationResult:
        """
        Run every check in order, stopping at the first failure

        Args:
            cluster_id: Cluster resource identifier

        Returns:
            ValidationResult naming the state reached and the failure, if any
        """
        context = ValidationContext(
            cluster_id=cluster_id,
            active_subscription_id=(self.active_subscription_id or cluster_id.subscription_id).lower()
        )

        for state, check in self._checks:
            self.logger.debug("Running check %s", state.value)
            try:
                check(context)
            except CheckFailedError as e:
                failure = self._fail(context, state, str(e))
                return ValidationResult(cluster_id, state, failure, context.diagnostics)

        self._log(context, "Everything looks good according to this script.")
        self._log(context, CONTACT_US_MESSAGE)
        return ValidationResult(cluster_id, ValidationState.DONE, None, context.diagnostics)

    def _log(self, context: ValidationContext, message: str, level: int = logging.WARNING):
        context.diagnostics.append(message)
        self.logger.log(level, "%s", message)

    def _fail(self, context: ValidationContext, state: ValidationState, message: str) -> ValidationFailure:
        hints = [h for h in (_REMEDIATION_HINTS.get(state), CONTACT_US_MESSAGE) if h]
        self._log(context, f"error {message}", level=logging.ERROR)
        for hint in hints:
            self._log(context, hint)
        return ValidationFailure(state=state, message=message, hint=" ".join(hints))

    def _check_extension_config(self, context: ValidationContext):
        extension = self.gateway.fetch_extension(context.cluster_id)
        context.extension_state = extension
        self._log(context, f"extension provisioningState: {extension.provisioning_state}")

        if not extension.configuration:
            raise MissingFieldError("configurationSettings")
        if not extension.workspace_resource_id:
            raise MissingFieldError(
                WORKSPACE_RESOURCE_ID_KEY,
                f"{WORKSPACE_RESOURCE_ID_KEY} either null or empty in the config settings"
            )

    def _check_provisioning_state(self, context: ValidationContext):
        provisioning_state = context.extension_state.provisioning_state
        if not provisioning_state:
            raise MissingFieldError("provisioningState")
        if provisioning_state != PROVISIONING_STATE_SUCCEEDED:
            raise MismatchError(
                "provisioningState",
                PROVISIONING_STATE_SUCCEEDED,
                provisioning_state,
                f"expected state of extension provisioningState MUST be {PROVISIONING_STATE_SUCCEEDED} "
                f"state but actual state is {provisioning_state}"
            )

    def _check_domain(self, context: ValidationContext):
        domain = context.extension_state.domain
        if not domain:
            raise MissingFieldError(
                WORKSPACE_DOMAIN_KEY,
                "logAnalyticsWorkspaceDomain either null or empty in the config settings"
            )

        expected = CLOUD_LOG_DOMAINS.get(self.cloud_name)
        if expected is None:
            self._log(context, f"no known log analytics domain for cloud '{self.cloud_name}', "
                               f"skipping domain check for {domain}")
            return
        if domain.strip().lower() != expected:
            raise MismatchError("logAnalyticsWorkspaceDomain", expected, domain)

    def _check_workspace_exists(self, context: ValidationContext):
        raw_id = context.extension_state.workspace_resource_id
        try:
            workspace_id = ResourceIdentifier.parse(raw_id)
        except InvalidResourceIdError as e:
            raise MismatchError(WORKSPACE_RESOURCE_ID_KEY, "a fully qualified workspace resource id",
                                raw_id, str(e)) from e
        if workspace_id.provider.lower() != WORKSPACE_RESOURCE_TYPE.lower():
            raise MismatchError(WORKSPACE_RESOURCE_ID_KEY, WORKSPACE_RESOURCE_TYPE, workspace_id.provider)

        workspace_subscription_id = workspace_id.subscription_id.lower()
        if workspace_subscription_id != context.active_subscription_id:
            self._log(context, "switch subscription id of workspace as active subscription since workspace "
                               f"in different subscription than cluster: {workspace_subscription_id}")
            self.gateway.set_active_subscription(workspace_subscription_id)
            context.active_subscription_id = workspace_subscription_id

        workspaces = self.gateway.list_resources(
            workspace_id.resource_group, workspace_id.resource_name, WORKSPACE_RESOURCE_TYPE
        )
        if not workspaces:
            raise ProviderFetchError(f"workspace:{raw_id} doesnt exist", error_code="ResourceNotFound")

        resource = self.gateway.fetch_resource(workspace_id.resource_id)
        context.workspace_state = WorkspaceState.from_resource(workspace_id, resource)

    def _check_insights_solution(self, context: ValidationContext):
        workspace_id = context.workspace_state.resource_id
        solution_name = f"ContainerInsights({workspace_id.resource_name})"
        solution_id = (
            f"/subscriptions/{workspace_id.subscription_id}/resourceGroups/{workspace_id.resource_group}"
            f"/providers/{SOLUTION_RESOURCE_TYPE}/{solution_name}"
        )
        missing_message = f"ContainerInsights solution on workspace {workspace_id.resource_id} doesnt exist"

        try:
            solution = self.gateway.fetch_resource(solution_id)
        except ProviderFetchError as e:
            raise ProviderFetchError(f"{missing_message}: {e}", e.error_code, e.status_code) from e

        if solution.get("name") != solution_name:
            raise MismatchError("solution name", solution_name, solution.get("name"), missing_message)

    def _check_network_access(self, context: ValidationContext, field_name: str, value: Optional[str],
                              purpose: str):
        self._log(context, f"workspace {field_name}: {value}")
        if not value:
            raise MissingFieldError(field_name)
        if value != NetworkAccess.ENABLED.value:
            raise MismatchError(
                field_name,
                NetworkAccess.ENABLED.value,
                value,
                f"Unless private link configured, {field_name} MUST be enabled for {purpose} "
                f"but actual value is {value}"
            )

    def _check_ingestion_access(self, context: ValidationContext):
        self._check_network_access(context, "publicNetworkAccessForIngestion",
                                   context.workspace_state.public_network_access_ingestion, "data ingestion")

    def _check_query_access(self, context: ValidationContext):
        self._check_network_access(context, "publicNetworkAccessForQuery",
                                   context.workspace_state.public_network_access_query, "data query")

    def _check_daily_quota(self, context: ValidationContext):
        daily_quota_gb = context.workspace_state.daily_quota_gb
        self._log(context, f"workspaceCapping dailyQuotaGb: {daily_quota_gb}")
        if daily_quota_gb is None:
            raise MissingFieldError(
                "workspaceCapping.dailyQuotaGb",
                f"workspace daily quota is not set, expected {self.expected_daily_quota_gb}"
            )
        if daily_quota_gb != self.expected_daily_quota_gb:
            raise MismatchError(
                "workspaceCapping.dailyQuotaGb",
                self.expected_daily_quota_gb,
                daily_quota_gb,
                f"workspace configured daily quota {daily_quota_gb} differs from expected "
                f"{self.expected_daily_quota_gb}, verify ingestion data reaching over the quota"
            )
