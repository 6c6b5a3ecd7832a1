"""
Unit tests for configuration validation functionality.

Tests the validation of the [irc], [oper], [polling] and [exporter] tables
and of a whole configuration document.
"""

import logging

import pytest

from statsbot.config.validators import (
    validate_configuration,
    validate_exporter_config,
    validate_oper_config,
    validate_session_config,
)
from statsbot.models import Configuration, ExporterConfig, OperCredentials
from statsbot.validation import ValidationError


@pytest.mark.unit
class TestSessionConfigValidation:
    """Test cases for the [irc] table."""

    def test_full_table(self, sample_config_data):
        config = validate_session_config(sample_config_data["irc"])

        assert config.server == "irc.example.net"
        assert config.port == 6697
        assert config.use_tls is True
        assert config.nickname == "statsbot"
        assert config.effective_username == "statsbot"
        assert config.effective_realname == "Stats Bot"
        assert config.password is None

    def test_defaults(self):
        config = validate_session_config({"server": "irc.test", "nickname": "bot"})

        assert config.port == 6667
        assert config.use_tls is False
        assert config.username is None

    def test_missing_server(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_session_config({"nickname": "bot"})
        assert exc_info.value.field_name == "irc.server"

    @pytest.mark.parametrize("nickname", ["", "9bot", "bot bot", "bot!", None])
    def test_invalid_nickname(self, nickname):
        with pytest.raises(ValidationError) as exc_info:
            validate_session_config({"server": "irc.test", "nickname": nickname})
        assert exc_info.value.field_name == "irc.nickname"

    @pytest.mark.parametrize("port", [0, 70000, "abc", True])
    def test_invalid_port(self, port):
        with pytest.raises(ValidationError) as exc_info:
            validate_session_config({"server": "irc.test", "nickname": "bot", "port": port})
        assert exc_info.value.field_name == "irc.port"

    def test_use_tls_must_be_boolean(self):
        with pytest.raises(ValidationError):
            validate_session_config({"server": "irc.test", "nickname": "bot", "use_tls": "yes"})

    def test_username_with_space(self):
        with pytest.raises(ValidationError):
            validate_session_config({"server": "irc.test", "nickname": "bot", "username": "a b"})

    @pytest.mark.parametrize("field", ["server", "username", "realname", "password"])
    @pytest.mark.parametrize("bad", ["x\r\nQUIT :bye", "x\nJOIN #c", "x\0"])
    def test_line_breaks_rejected(self, sample_config_data, field, bad):
        irc = dict(sample_config_data["irc"], **{field: bad})

        with pytest.raises(ValidationError) as exc_info:
            validate_session_config(irc)

        assert exc_info.value.field_name == f"irc.{field}"

    def test_realname_injection_fails_whole_document(self, sample_config_data):
        sample_config_data["irc"]["realname"] = "Stats\r\nQUIT :bye"
        with pytest.raises(ValidationError):
            validate_configuration(sample_config_data)


@pytest.mark.unit
class TestOperConfigValidation:
    """Test cases for the optional [oper] table."""

    def test_credentials(self):
        oper = validate_oper_config({"name": "op", "password": "secret"})
        assert oper == OperCredentials(name="op", password="secret")

    def test_absent(self):
        assert validate_oper_config({}) is None

    @pytest.mark.parametrize("table", [{"name": "op"}, {"password": "secret"}])
    def test_incomplete(self, table):
        with pytest.raises(ValidationError):
            validate_oper_config(table)

    def test_password_not_in_repr(self):
        oper = validate_oper_config({"name": "op", "password": "secret"})
        assert "secret" not in repr(oper)

    @pytest.mark.parametrize("field", ["name", "password"])
    @pytest.mark.parametrize("bad", ["x\r\nQUIT", "x\ny", "x\0y"])
    def test_line_breaks_rejected(self, field, bad):
        table = {"name": "op", "password": "secret", field: bad}

        with pytest.raises(ValidationError) as exc_info:
            validate_oper_config(table)

        assert exc_info.value.field_name == f"oper.{field}"


@pytest.mark.unit
class TestExporterConfigValidation:
    """Test cases for the [exporter] table."""

    def test_defaults(self):
        assert validate_exporter_config({}) == ExporterConfig()

    def test_ipv6_listen(self):
        config = validate_exporter_config({"listen": "[::1]:9100"})
        assert config.host == "::1"
        assert config.port == 9100
        assert config.address == "[::1]:9100"

    @pytest.mark.parametrize("listen", ["9187", "127.0.0.1", ":9187", "127.0.0.1:99999", "[::1]9187"])
    def test_invalid_listen(self, listen):
        with pytest.raises(ValidationError) as exc_info:
            validate_exporter_config({"listen": listen})
        assert exc_info.value.field_name == "exporter.listen"

    @pytest.mark.parametrize("prefix", ["1ircd", "ircd-stats", "irc d"])
    def test_invalid_metric_prefix(self, prefix):
        with pytest.raises(ValidationError):
            validate_exporter_config({"metric_prefix": prefix})


@pytest.mark.unit
class TestConfigurationValidation:
    """Test cases for whole documents."""

    def test_sample(self, sample_config_data):
        config = validate_configuration(sample_config_data)

        assert isinstance(config, Configuration)
        assert config.servers == ("hub.example.net", "leaf1.example.net", "leaf2.example.net")
        assert config.oper == OperCredentials(name="statsbot", password="hunter2")
        assert config.exporter.metric_prefix == "ircd"

    def test_equal_documents_give_equal_configurations(self, sample_config_data):
        assert validate_configuration(sample_config_data) == validate_configuration(sample_config_data)

    def test_server_order_matters(self, sample_config_data):
        first = validate_configuration(sample_config_data)
        sample_config_data["polling"]["servers"].reverse()
        assert validate_configuration(sample_config_data) != first

    @pytest.mark.parametrize("section", ["irc", "polling"])
    def test_missing_required_section(self, sample_config_data, section):
        del sample_config_data[section]
        with pytest.raises(ValidationError) as exc_info:
            validate_configuration(sample_config_data)
        assert exc_info.value.field_name == section

    def test_duplicate_server(self, sample_config_data):
        sample_config_data["polling"]["servers"].append("hub.example.net")
        with pytest.raises(ValidationError):
            validate_configuration(sample_config_data)

    @pytest.mark.parametrize("server", ['bad"name', "two words", "a,b", ""])
    def test_label_unsafe_server(self, sample_config_data, server):
        sample_config_data["polling"]["servers"] = [server]
        with pytest.raises(ValidationError):
            validate_configuration(sample_config_data)

    def test_empty_server_list_warns(self, sample_config_data, caplog):
        sample_config_data["polling"]["servers"] = []

        with caplog.at_level(logging.WARNING):
            config = validate_configuration(sample_config_data)

        assert config.servers == ()
        assert "polling.servers is empty" in caplog.text

    def test_unknown_section_warns(self, sample_config_data, caplog):
        sample_config_data["metrics"] = {}

        with caplog.at_level(logging.WARNING):
            validate_configuration(sample_config_data)

        assert "metrics" in caplog.text
