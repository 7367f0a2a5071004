# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Secure HTTP client used by the agent to post collected data to the ingestion endpoint

The client authenticates with a client certificate (mutual TLS) and is
optionally routed through the proxy configured in the omsproxy file.
Misconfiguration is fatal: the error is reported, the process waits for
crash telemetry to flush, then exits.
"""

import logging
import os
import ssl
import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter

from .crash_reporting import GRACE_INTERVAL_SECONDS, report_and_terminate
from .exceptions import TransportConfigurationError
from .models import ClientConfig


class _ClientCertificateAdapter(HTTPAdapter):
    """HTTPAdapter presenting a client certificate on direct and proxied connections"""

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs):
        # init_poolmanager runs inside HTTPAdapter.__init__
        self._ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = self._ssl_context
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        proxy_kwargs["ssl_context"] = self._ssl_context
        return super().proxy_manager_for(proxy, **proxy_kwargs)


class SecureClient:
    """Certificate-authenticated HTTP client with a fixed per-request timeout"""

    def __init__(self, session: requests.Session, proxy_url: Optional[str], timeout: float):
        self.session = session
        self.proxy_url = proxy_url
        self.timeout = timeout

    def post(self, url: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """Send a POST request; retries are left to the caller."""
        return self.session.post(url, data=data, headers=headers, timeout=self.timeout)

    def close(self):
        self.session.close()

    def to_dict(self) -> Dict[str, Any]:
        return {"proxy_url": self.proxy_url, "timeout": self.timeout}


def _load_client_certificate(cert_path: str, key_path: str) -> ssl.SSLContext:
    if not cert_path or not key_path:
        raise TransportConfigurationError(
            "Error when loading cert: certificate and key file paths must both be configured"
        )
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    try:
        context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    except (OSError, ssl.SSLError) as e:
        raise TransportConfigurationError(f"Error when loading cert {e}") from e
    return context


def _redact_proxy_url(proxy_config: str) -> str:
    parsed = urlparse(proxy_config)
    if not parsed.password:
        return proxy_config
    userinfo, _, hostinfo = parsed.netloc.rpartition("@")
    username = userinfo.partition(":")[0]
    return parsed._replace(netloc=f"{username}:****@{hostinfo}").geturl()


def _parse_proxy_url(proxy_config: str) -> str:
    try:
        parsed = urlparse(proxy_config)
        _ = parsed.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise TransportConfigurationError(f"Error parsing omsproxy url {e}") from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise TransportConfigurationError(f"Error parsing omsproxy url '{_redact_proxy_url(proxy_config)}'")
    return proxy_config


def _resolve_proxy_url(proxy_config_path: Optional[str], logger: logging.Logger) -> Optional[str]:
    if not proxy_config_path or not os.path.exists(proxy_config_path):
        return None

    try:
        with open(proxy_config_path, "r", encoding="utf-8") as f:
            proxy_config = f.read().strip()
    except (OSError, UnicodeDecodeError) as e:
        raise TransportConfigurationError(f"Error Reading omsproxy configuration {e}") from e

    logger.info("proxy configuration %s", _redact_proxy_url(proxy_config))
    return _parse_proxy_url(proxy_config)


class SecureClientFactory:
    """Builds SecureClient instances from ClientConfig"""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        grace_interval: float = GRACE_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the factory

        Args:
            logger: Optional logger instance
            grace_interval: Seconds to wait before exiting on a fatal error
            sleep: Sleep function used for the grace interval
        """
        self.logger = logger or logging.getLogger("k8s_ci_troubleshoot.secure_client")
        self.grace_interval = grace_interval
        self.sleep = sleep

    def build(self, config: ClientConfig) -> SecureClient:
        """
        Build a certificate-authenticated client.

        Does not return on misconfiguration: the error is reported and the
        process exits after the grace interval.

        Args:
            config: Transport settings

        Returns:
            Ready to use SecureClient
        """
        try:
            ssl_context = _load_client_certificate(config.cert_path, config.key_path)
            proxy_url = _resolve_proxy_url(config.proxy_config_path, self.logger)
        except TransportConfigurationError as e:
            report_and_terminate(
                e,
                fault_type="transport-configuration-error",
                logger=self.logger,
                grace_interval=self.grace_interval,
                sleep=self.sleep
            )

        session = requests.Session()
        # Only the configured proxy applies; environment proxy variables are ignored
        session.trust_env = False
        adapter = _ClientCertificateAdapter(ssl_context, max_retries=0)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        if proxy_url:
            session.proxies = {"http": proxy_url, "https": proxy_url}

        self.logger.info("Successfully created HTTP client")
        return SecureClient(session, proxy_url, config.timeout)
