"""
Unit tests for session configuration.
"""

import dataclasses
from pathlib import Path

import pytest

from safe_sqlplus.config import (
    DEFAULT_CLIENT,
    ConfigFile,
    SessionConfig,
    build_template,
    load_config_file,
    resolve_config,
)
from safe_sqlplus.exceptions import ConfigError

REQUIRED = {
    "oracle_home": "/opt/oracle",
    "username_program": "/usr/local/bin/get_user",
    "password_program": "/usr/local/bin/get_pw prod",
}


class TestSessionConfig:
    """Tests for SessionConfig."""

    def test_valid_config(self):
        """Test construction with defaults."""
        config = SessionConfig(
            template="{{username}}/{{password}}@DB",
            client_home=Path("/opt/oracle"),
            username_command="/bin/user",
            password_command="/bin/pw",
        )

        assert config.client_name == DEFAULT_CLIENT
        assert config.client_args == ""
        assert config.debug is False

    def test_client_executable(self):
        """Test client path under Oracle home."""
        config = SessionConfig(
            template="x",
            client_home=Path("/opt/oracle"),
            username_command="/bin/user",
            password_command="/bin/pw",
        )

        assert config.client_executable == Path("/opt/oracle/bin/sqlplus")

    def test_frozen(self):
        """Test that configuration cannot be modified."""
        config = SessionConfig(
            template="x",
            client_home=Path("/opt/oracle"),
            username_command="/bin/user",
            password_command="/bin/pw",
        )

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.template = "y"

    def test_empty_values_rejected(self):
        """Test that every required value is checked."""
        with pytest.raises(ConfigError) as exc_info:
            SessionConfig(
                template="",
                client_home=Path("/opt/oracle"),
                username_command=" ",
                password_command="",
            )

        assert len(exc_info.value.problems) == 3


class TestBuildTemplate:
    """Tests for build_template()."""

    def test_connect_descriptor(self):
        """Test the default connect descriptor."""
        template = build_template("db1", 1521, "SERVICE_NAME=pluggable1")

        assert template == (
            '{{username}}/"{{password}}"@"(DESCRIPTION=(ADDRESS=(PROTOCOL=TCP)'
            '(HOST=db1)(PORT=1521))(CONNECT_DATA=(SERVICE_NAME=pluggable1)))"'
        )


class TestResolveConfig:
    """Tests for resolve_config()."""

    def test_from_host_and_connect_data(self):
        """Test template built from connection options with default port."""
        config = resolve_config(host="db1", connect_data="SID=orcl", **REQUIRED)

        assert "(HOST=db1)(PORT=1521)" in config.template
        assert "(CONNECT_DATA=(SID=orcl))" in config.template
        assert config.client_home == Path("/opt/oracle")
        assert config.password_command == "/usr/local/bin/get_pw prod"

    def test_custom_port(self):
        """Test explicit port."""
        config = resolve_config(host="db1", port=1522, connect_data="SID=orcl", **REQUIRED)
        assert "(PORT=1522)" in config.template

    def test_explicit_template(self):
        """Test that a template replaces host/connect data."""
        config = resolve_config(template="{{username}}/{{password}}@DB", **REQUIRED)
        assert config.template == "{{username}}/{{password}}@DB"

    def test_all_missing(self):
        """Test that all missing values are reported together."""
        with pytest.raises(ConfigError) as exc_info:
            resolve_config()

        problems = exc_info.value.problems
        assert len(problems) == 5
        assert any("(-u)" in p for p in problems)
        assert any("(-p)" in p for p in problems)
        assert any("(-o)" in p for p in problems)

    def test_blank_program_rejected(self):
        """Test that a whitespace-only program is missing."""
        with pytest.raises(ConfigError, match="password program"):
            resolve_config(
                template="x",
                oracle_home="/opt/oracle",
                username_program="/bin/user",
                password_program="  ",
            )

    def test_file_values(self):
        """Test values taken from a configuration file."""
        file = ConfigFile(
            host="db1",
            connect_data="SID=orcl",
            oracle_home="/opt/oracle",
            username_program="/bin/user",
            password_program="/bin/pw",
            client="sqlplus64",
            client_args="-S",
            debug=True,
        )

        config = resolve_config(file)

        assert "(HOST=db1)" in config.template
        assert config.client_name == "sqlplus64"
        assert config.client_args == "-S"
        assert config.debug is True

    def test_arguments_override_file(self):
        """Test that command-line values take precedence."""
        file = ConfigFile(host="db1", connect_data="SID=orcl", **REQUIRED)

        config = resolve_config(file, host="db2", password_program="/bin/other")

        assert "(HOST=db2)" in config.template
        assert config.password_command == "/bin/other"

    @pytest.mark.parametrize("port", [0, -1, 65536, 99999])
    def test_port_out_of_range(self, port):
        """Test that a command-line port outside 1..65535 is rejected."""
        with pytest.raises(ConfigError, match="Port must be between 1 and 65535") as exc_info:
            resolve_config(host="db1", port=port, connect_data="SID=orcl", **REQUIRED)

        assert len(exc_info.value.problems) == 1

    def test_highest_port_accepted(self):
        """Test the upper bound of the port range."""
        config = resolve_config(host="db1", port=65535, connect_data="SID=orcl", **REQUIRED)
        assert "(PORT=65535)" in config.template

    def test_empty_oracle_home_rejected(self):
        """Test that an empty Oracle home is missing, not the current directory."""
        values = dict(REQUIRED, oracle_home="")

        with pytest.raises(ConfigError, match="Oracle home"):
            resolve_config(template="x", **values)


class TestLoadConfigFile:
    """Tests for load_config_file()."""

    def test_load(self, tmp_path):
        """Test loading a valid file."""
        path = tmp_path / "safe_sqlplus.toml"
        path.write_text(
            'host = "db1"\n'
            "port = 1522\n"
            'connect_data = "SERVICE_NAME=pdb1"\n'
            'oracle_home = "/opt/oracle"\n'
            'username_program = "/bin/user"\n'
            'password_program = "/bin/pw prod"\n'
        )

        file = load_config_file(path)

        assert file.host == "db1"
        assert file.port == 1522
        assert file.oracle_home == "/opt/oracle"
        assert file.password_program == "/bin/pw prod"

    def test_missing_file(self, tmp_path):
        """Test that a missing file is a configuration error."""
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        """Test that a malformed file is rejected."""
        path = tmp_path / "bad.toml"
        path.write_text("host = \n")

        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config_file(path)

    def test_unknown_key(self, tmp_path):
        """Test that unknown keys (e.g. a password) are rejected."""
        path = tmp_path / "bad.toml"
        path.write_text('password = "s3cret!"\n')

        with pytest.raises(ConfigError) as exc_info:
            load_config_file(path)

        assert any("password" in p for p in exc_info.value.problems)

    def test_invalid_port(self, tmp_path):
        """Test port validation."""
        path = tmp_path / "bad.toml"
        path.write_text("port = 0\n")

        with pytest.raises(ConfigError, match="port"):
            load_config_file(path)

    def test_empty_oracle_home(self, tmp_path):
        """Test that an empty oracle_home is rejected instead of meaning '.'."""
        path = tmp_path / "bad.toml"
        path.write_text('oracle_home = ""\n')

        with pytest.raises(ConfigError) as exc_info:
            load_config_file(path)

        assert any(p.startswith("oracle_home") for p in exc_info.value.problems)
