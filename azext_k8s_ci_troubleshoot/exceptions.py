# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Custom exceptions for standardized error handling
"""


class TroubleshootError(Exception):
    """Base exception for Container Insights troubleshooting"""


class CheckFailedError(TroubleshootError):
    """An onboarding check did not hold"""


class ProviderFetchError(CheckFailedError):
    """Fetching state from the control plane failed"""

    def __init__(self, message: str, error_code: str = None, status_code: int = None):
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class MissingFieldError(CheckFailedError):
    """Required field absent in fetched state"""

    def __init__(self, field_name: str, message: str = None):
        self.field_name = field_name
        super().__init__(message or f"{field_name} either null or empty")


class MismatchError(CheckFailedError):
    """Fetched value differs from the required value"""

    def __init__(self, field_name: str, expected, actual, message: str = None):
        self.field_name = field_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"expected value of {field_name} MUST be {expected} but actual value is {actual}"
        )


class InvalidResourceIdError(TroubleshootError):
    """Resource ID could not be decomposed"""


class ConfigurationError(TroubleshootError):
    """Property file could not be loaded"""


class ConfigurationOpenError(ConfigurationError):
    """Property file could not be opened"""


class ConfigurationReadError(ConfigurationError):
    """Property file could not be fully read"""


class TransportConfigurationError(TroubleshootError):
    """Client certificate or proxy configuration is unusable"""


class ValidationError(TroubleshootError):
    """Input validation failed"""
