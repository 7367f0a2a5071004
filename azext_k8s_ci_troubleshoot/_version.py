# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""Version information for the Container Insights Troubleshooting Extension"""

__version__ = "0.1.0"
__author__ = "Azure Monitor for containers Team"
__description__ = "Read-only troubleshooting of Azure Monitor for containers onboarding (Preview)"
