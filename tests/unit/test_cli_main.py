"""
Unit tests for CLI main entry point and broker commands.

Commands run against a MockAdapter injected through the CLI context object.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from osbclient._version import __version__
from osbclient.cli.context import CLIContext
from osbclient.cli.main import cli
from osbclient.exceptions import TransportError
from osbclient.sdk.adapters.mock import MockAdapter


BASE = "http://broker.example.com"
INSTANCE_URL = BASE + "/v2/service_instances/db-1"


@pytest.fixture(autouse=True)
def restore_root_handlers():
    """Keep CLI logging setup from leaking the runner's streams into other tests."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def adapter():
    return MockAdapter()


@pytest.fixture
def invoke(adapter, temp_dir):
    """Run the CLI against the mock adapter with a config-free environment."""
    runner = CliRunner()
    missing_config = str(temp_dir / "missing.yaml")

    def _invoke(*args):
        return runner.invoke(
            cli,
            ['--config', missing_config, '--log-level', 'ERROR', '--url', BASE, *args],
            obj=CLIContext(adapter=adapter),
        )

    return _invoke


class TestCLIMain:
    """Test CLI main entry point."""

    def test_cli_help(self):
        """Test CLI help output."""
        runner = CliRunner()
        result = runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        assert 'osbclient' in result.output
        assert '--config' in result.output
        assert '--log-level' in result.output
        assert '--verbose' in result.output
        assert '--api-version' in result.output

    def test_cli_version(self):
        """Test CLI version output."""
        result = CliRunner().invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize("group", ['instance', 'binding'])
    def test_command_groups(self, group):
        """Test command groups exist."""
        result = CliRunner().invoke(cli, [group, '--help'])
        assert result.exit_code == 0
        assert group in result.output.lower()

    def test_invalid_config_file(self, temp_dir):
        """Test a malformed configuration file is reported."""
        path = temp_dir / "config.yaml"
        path.write_text("broker: [unclosed\n")

        result = CliRunner().invoke(cli, ['--config', str(path), 'catalog'])

        assert result.exit_code == 1
        assert 'Invalid configuration' in result.output


class TestBrokerCommands:
    """Test commands against a mock broker."""

    def test_catalog(self, invoke, adapter, make_response):
        """Test catalog output is JSON."""
        adapter.add("GET", BASE + "/v2/catalog", make_response(200, {"services": [{"id": "svc", "name": "mysql"}]}))

        result = invoke('catalog')

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["outcome"] == "sync_result"
        assert payload["response"]["services"][0]["name"] == "mysql"

    def test_api_version_override(self, invoke, adapter, make_response):
        """Test the version header follows --api-version."""
        adapter.add("GET", BASE + "/v2/catalog", make_response(200, {}))
        result = invoke('--api-version', '2.12', 'catalog')

        assert result.exit_code == 0, result.output
        assert adapter.sent_requests[0].headers["X-Broker-API-Version"] == "2.12"

    def test_provision_with_wait(self, invoke, adapter, make_response):
        """Test an async provision polled to completion."""
        adapter.add("PUT", INSTANCE_URL, make_response(202, {"operation": "task-9"}))
        adapter.add("GET", INSTANCE_URL + "/last_operation", make_response(200, {"state": "succeeded"}))

        result = invoke(
            'instance', 'provision', '-i', 'db-1', '-s', 'mysql', '-p', 'small',
            '--organization-guid', 'org-1', '--space-guid', 'space-1',
            '--parameters', '{"storage_gb": 10}', '--accepts-incomplete', '--wait',
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["outcome"] == "async_accepted"
        assert payload["operation"] == "task-9"
        assert payload["poll"]["state"] == "succeeded"
        assert json.loads(adapter.sent_requests[0].body)["parameters"] == {"storage_gb": 10}

    def test_provision_invalid_parameters(self, invoke):
        """Test non-object JSON parameters are rejected by option parsing."""
        result = invoke(
            'instance', 'provision', '-i', 'db-1', '-s', 'mysql', '-p', 'small',
            '--organization-guid', 'org-1', '--space-guid', 'space-1', '--parameters', '[1]',
        )
        assert result.exit_code == 2

    def test_broker_failure_exit_code(self, invoke, adapter, make_response):
        """Test a failure outcome is printed and exits non-zero."""
        adapter.add("DELETE", INSTANCE_URL, make_response(422, {"error": "ConcurrencyError"}))

        result = invoke('instance', 'deprovision', '-i', 'db-1', '-s', 'mysql', '-p', 'small')

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["error"]["error"] == "ConcurrencyError"

    def test_operation_not_allowed(self, invoke, adapter):
        """Test version-gated commands fail locally."""
        result = invoke('--api-version', '2.13', 'instance', 'get', '-i', 'db-1')

        assert result.exit_code == 1
        assert 'must have API version >= 2.14' in result.output
        assert adapter.sent_requests == []

    def test_invalid_identity(self, invoke, adapter):
        """Test a malformed originating identity is reported."""
        result = invoke('catalog', '--identity-platform', 'cloudfoundry', '--identity-value', 'nope')

        assert result.exit_code == 1
        assert 'originating identity' in result.output
        assert adapter.sent_requests == []

    def test_transport_error(self, invoke, adapter):
        """Test transport failures are reported."""
        adapter.add("GET", BASE + "/v2/catalog", TransportError("connection refused"))

        result = invoke('catalog')

        assert result.exit_code == 1
        assert 'connection refused' in result.output

    def test_binding_rotate(self, invoke, adapter, make_response):
        """Test binding rotation."""
        adapter.add(
            "PUT", INSTANCE_URL + "/service_bindings/b2",
            make_response(201, {"credentials": {"user": "u2"}}),
        )

        result = invoke('binding', 'rotate', '-i', 'db-1', '-b', 'b2', '--predecessor-binding-id', 'b1')

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["response"]["credentials"] == {"user": "u2"}

    def test_binding_last_operation(self, invoke, adapter, make_response):
        """Test binding last-operation queries."""
        adapter.add(
            "GET", INSTANCE_URL + "/service_bindings/b1/last_operation",
            make_response(200, {"state": "in progress"}),
        )

        result = invoke('last-operation', '-i', 'db-1', '-b', 'b1', '-o', 'op-3')

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["response"]["state"] == "in progress"
        assert adapter.sent_requests[0].params == {"operation": "op-3"}
