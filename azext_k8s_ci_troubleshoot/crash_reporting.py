# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Fatal error reporting for unrecoverable startup misconfiguration

Errors are recorded with Azure CLI telemetry, then the process waits a fixed
grace interval so the telemetry upload can complete, then exits non-zero.
"""

import logging
import time
from typing import Callable, Optional

from azure.cli.core import telemetry

GRACE_INTERVAL_SECONDS = 30
FATAL_EXIT_CODE = 1


def report_and_terminate(
    error: Exception,
    fault_type: str,
    logger: Optional[logging.Logger] = None,
    grace_interval: float = GRACE_INTERVAL_SECONDS,
    sleep: Callable[[float], None] = time.sleep
):
    """
    Report a fatal error, wait the grace interval, then terminate.

    Never returns.

    Args:
        error: The error to report
        fault_type: Short telemetry fault classification
        logger: Optional logger instance
        grace_interval: Seconds to wait between reporting and exiting
        sleep: Sleep function

    Raises:
        SystemExit: Always, with a non-zero code
    """
    logger = logger or logging.getLogger("k8s_ci_troubleshoot.crash_reporting")

    logger.error("%s", error)
    telemetry.set_exception(exception=error, fault_type=fault_type, summary=str(error))

    logger.debug("Waiting %s seconds for crash telemetry to flush", grace_interval)
    sleep(grace_interval)

    raise SystemExit(FATAL_EXIT_CODE) from error
