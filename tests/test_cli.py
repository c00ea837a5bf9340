"""
Tests for the sqlsession CLI.
"""

import json

import pytest

from sqlsession import __version__
from sqlsession.cli.commands import main_cli
from sqlsession.utils.encrypter import ConfigEncrypter


@pytest.fixture
def config_file(tmp_path, dev_config):
    path = tmp_path / "sqlsession.xml"
    path.write_text(dev_config)
    return path


def test_check_configuration(config_file, capsys):
    assert main_cli([str(config_file)]) == 0

    out = capsys.readouterr().out
    assert "Session factory built (environment: dev, database: sqlite)" in out


def test_show_masks_secrets(tmp_path, capsys):
    path = tmp_path / "sqlsession.xml"
    path.write_text("""<configuration>
      <properties><property name="db_password" value="s3cret"/></properties>
      <environments default="dev">
        <environment id="dev">
          <transactionManager type="JDBC"/>
          <dataSource type="POOLED">
            <property name="url" value="sqlite://"/>
            <property name="password" value="${db_password}"/>
          </dataSource>
        </environment>
      </environments>
    </configuration>""")

    assert main_cli([str(path), "--show"]) == 0

    out = capsys.readouterr().out
    assert "s3cret" not in out
    summary = json.loads(out[out.index("{"):])
    assert summary["variables"]["db_password"] == "******"
    assert summary["environment"]["data_source"]["password"] == "******"


def test_environment_and_properties(config_file, capsys):
    assert main_cli([str(config_file), "-e", "test", "-p", "timeout=45", "--show"]) == 0

    out = capsys.readouterr().out
    summary = json.loads(out[out.index("{"):])
    assert summary["environment"]["id"] == "test"
    assert summary["settings"]["default_statement_timeout"] == 45


def test_test_connection(config_file, capsys):
    assert main_cli([str(config_file), "--test-connection"]) == 0

    assert "Connection test succeeded" in capsys.readouterr().out


def test_build_error_exit_code(config_file, capsys):
    assert main_cli([str(config_file), "-e", "prod"]) == 1

    assert "Error building session factory" in capsys.readouterr().out


def test_invalid_property_argument(config_file, capsys):
    assert main_cli([str(config_file), "-p", "no-separator"]) == 1

    assert "expected KEY=VALUE" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
    assert main_cli([str(tmp_path / "missing.xml")]) == 1

    assert "cannot open" in capsys.readouterr().out


def test_missing_config_argument(capsys):
    assert main_cli([]) == 1


def test_version(capsys):
    assert main_cli(["--version"]) == 0

    assert __version__ in capsys.readouterr().out


def test_generate_key_and_encrypt(tmp_path, capsys):
    key_path = tmp_path / "secret.key"

    assert main_cli(["--generate-key", "--key-file", str(key_path)]) == 0
    assert key_path.exists()
    capsys.readouterr()

    assert main_cli(["--encrypt", "s3cret", "--key-file", str(key_path)]) == 0
    token = capsys.readouterr().out.strip()
    assert ConfigEncrypter(key_path=key_path).decrypt_value(token) == "s3cret"


def test_encrypt_without_key(tmp_path, capsys):
    assert main_cli(["--encrypt", "s3cret", "--key-file", str(tmp_path / "missing.key")]) == 1

    assert "No encryption key available" in capsys.readouterr().out


def test_test_connection_reports_engine_errors(tmp_path, capsys):
    path = tmp_path / "sqlsession.xml"
    path.write_text("""<configuration>
      <environments default="dev">
        <environment id="dev">
          <transactionManager type="JDBC"/>
          <dataSource type="POOLED">
            <property name="url" value="sqlite://"/>
            <property name="poolTimeToWait" value="1000"/>
          </dataSource>
        </environment>
      </environments>
    </configuration>""")

    assert main_cli([str(path), "--test-connection"]) == 1

    assert "Connection test failed" in capsys.readouterr().out


def test_test_connection_reports_missing_driver(config_file, capsys, monkeypatch):
    def _create_engine(url, **options):
        raise ModuleNotFoundError("No module named 'psycopg2'")

    monkeypatch.setattr("sqlsession.session.factory.create_engine", _create_engine)

    assert main_cli([str(config_file), "--test-connection"]) == 1

    out = capsys.readouterr().out
    assert "Connection test failed" in out
    assert "psycopg2" in out
