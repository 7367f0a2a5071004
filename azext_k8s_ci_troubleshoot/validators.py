# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Input validation utilities for Container Insights troubleshooting

Provides validation for user inputs including:
- Cluster resource IDs (Azure Arc enabled Kubernetes only)
- Report and log file paths (prevent path traversal attacks)
"""

from pathlib import Path

from .exceptions import InvalidResourceIdError, ValidationError
from .models import ResourceIdentifier

CONNECTED_CLUSTER_PROVIDER = "microsoft.kubernetes/connectedclusters"


class InputValidator:
    """Validates user inputs for security and correctness"""

    @staticmethod
    def validate_cluster_resource_id(resource_id: str) -> ResourceIdentifier:
        """
        Validate and decompose the cluster resource ID

        Args:
            resource_id: Fully qualified cluster resource ID

        Returns:
            ResourceIdentifier of the cluster

        Raises:
            ValidationError: If the ID is malformed or not an Azure Arc enabled Kubernetes cluster
        """
        try:
            cluster_id = ResourceIdentifier.parse(resource_id)
        except InvalidResourceIdError as exc:
            raise ValidationError(str(exc)) from exc

        if cluster_id.provider.lower() != CONNECTED_CLUSTER_PROVIDER:
            raise ValidationError("not valid azure arc enabled kubernetes cluster resource id")

        return cluster_id

    @staticmethod
    def validate_output_path(filepath: str, suffix: str = ".json") -> str:
        """
        Validate and sanitize output file path

        Args:
            filepath: User-provided file path
            suffix: Extension the file must carry

        Returns:
            Validated file path

        Raises:
            ValidationError: If path is invalid or unsafe
        """
        # Resolve the path to prevent traversal attacks
        resolved_path = Path(filepath).expanduser().resolve()
        current_dir = Path.cwd().resolve()

        try:
            resolved_path.relative_to(current_dir)
        except ValueError as exc:
            raise ValidationError("Output file path must be within the current directory") from exc

        if not str(resolved_path).lower().endswith(suffix):
            resolved_path = resolved_path.with_suffix(suffix)

        return str(resolved_path)
