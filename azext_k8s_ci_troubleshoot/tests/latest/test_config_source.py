# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------

"""
Tests for the key=value property file loader
"""

import pytest

from azext_k8s_ci_troubleshoot.config_source import load_configuration
from azext_k8s_ci_troubleshoot.exceptions import (
    ConfigurationError,
    ConfigurationOpenError,
    ConfigurationReadError
)
from azext_k8s_ci_troubleshoot.models import ClientConfig


@pytest.fixture
def write_config(tmp_path):
    def _write(content, mode="w"):
        path = tmp_path / "out_oms.conf"
        if mode == "wb":
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return str(path)
    return _write


class TestLoadConfiguration:

    @pytest.mark.parametrize("path", ["", None])
    def test_empty_path_returns_empty_mapping(self, path):
        assert load_configuration(path) == {}

    def test_parses_key_value_lines(self, write_config):
        path = write_config(
            "cert_file_path=/etc/oms/certs/oms.crt\n"
            "  key_file_path = /etc/oms/certs/oms.key  \n"
            "omsproxy_conf_path=/etc/opt/microsoft/docker-cimprov/proxy.conf\n"
        )

        assert load_configuration(path) == {
            "cert_file_path": "/etc/oms/certs/oms.crt",
            "key_file_path": "/etc/oms/certs/oms.key",
            "omsproxy_conf_path": "/etc/opt/microsoft/docker-cimprov/proxy.conf",
        }

    def test_skips_lines_without_separator_and_empty_keys(self, write_config):
        path = write_config("# comment\n\n=orphan\n   = also orphan\nvalid=1\njust text\n")

        assert load_configuration(path) == {"valid": "1"}

    def test_last_value_wins(self, write_config):
        path = write_config("mode=first\nmode=second\nother=x\nmode=third\n")

        assert load_configuration(path) == {"mode": "third", "other": "x"}

    def test_value_split_at_first_separator(self, write_config):
        path = write_config("endpoint=https://host/path?a=b\nempty=\n")

        assert load_configuration(path) == {"endpoint": "https://host/path?a=b", "empty": ""}

    def test_missing_file_raises_open_error(self, tmp_path):
        with pytest.raises(ConfigurationOpenError):
            load_configuration(str(tmp_path / "missing.conf"))

    def test_undecodable_file_raises_read_error(self, write_config):
        path = write_config(b"key=value\n\xff\xfe\xfa=bad\n", mode="wb")

        with pytest.raises(ConfigurationReadError) as exc_info:
            load_configuration(path)

        assert isinstance(exc_info.value, ConfigurationError)


class TestClientConfigFromSettings:

    def test_recognised_keys(self):
        config = ClientConfig.from_settings({
            "cert_file_path": "/certs/oms.crt",
            "key_file_path": "/certs/oms.key",
            "omsproxy_conf_path": "/conf/proxy.conf",
            "unknown": "ignored",
        })

        assert config == ClientConfig("/certs/oms.crt", "/certs/oms.key", "/conf/proxy.conf", 30)

    def test_missing_proxy_key(self):
        config = ClientConfig.from_settings({"cert_file_path": "a", "key_file_path": "b"})

        assert config.proxy_config_path is None
