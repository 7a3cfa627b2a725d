"""
Unit tests for SDK client.

Tests the BrokerClient facade end to end over a MockAdapter: configuration
validation, request shaping, outcome classification and polling.
"""

import threading

import pytest

from osbclient.config.settings import AuthConfig, BasicAuthConfig, BearerConfig, PollingConfig
from osbclient.core import messages as m
from osbclient.core import operations as ops
from osbclient.core.poller import PollState
from osbclient.core.response import OutcomeKind
from osbclient.core.version import VERSION_2_13, VERSION_2_14, VERSION_2_16
from osbclient.exceptions import (
    InvalidConfigurationError,
    MissingRequiredFieldError,
    OperationNotAllowedError,
    PollExceededRetriesError,
    TransportError,
)
from osbclient.logging_config import get_correlation_id
from osbclient.sdk.client import BrokerClient


BASE = "http://broker.example.com"
INSTANCE_URL = BASE + "/v2/service_instances/inst-1"
INSTANCE_LAST_OP_URL = INSTANCE_URL + "/last_operation"
BINDING_URL = INSTANCE_URL + "/service_bindings/bind-1"
BINDING_LAST_OP_URL = BINDING_URL + "/last_operation"


def provision_request(**overrides):
    values = dict(
        instance_id="inst-1", service_id="svc-1", plan_id="plan-1",
        organization_guid="org-1", space_guid="space-1",
    )
    values.update(overrides)
    return m.ProvisionRequest(**values)


@pytest.fixture
def client(make_config, mock_adapter):
    config = make_config(polling=PollingConfig(default_delay_seconds=0.01))
    with BrokerClient(config, adapter=mock_adapter) as broker_client:
        yield broker_client


class TestClientConstruction:
    """Test configuration handling at construction."""

    def test_auth_conflict_is_fatal(self, make_config, mock_adapter):
        """Test configuring both credentials fails construction."""
        auth = AuthConfig(basic=BasicAuthConfig("u", "p"), bearer=BearerConfig("t"))
        with pytest.raises(InvalidConfigurationError, match="Only one auth config"):
            BrokerClient(make_config(auth=auth), adapter=mock_adapter)

    def test_default_adapter(self, make_config):
        """Test the HTTP adapter is used by default."""
        from osbclient.sdk.adapters.http import HttpAdapter

        client = BrokerClient(make_config())
        assert isinstance(client._adapter, HttpAdapter)
        client.close()
        assert not client._adapter.is_connected

    def test_from_config_file(self, temp_dir, monkeypatch):
        """Test construction from a YAML file."""
        path = temp_dir / "config.yaml"
        path.write_text("broker:\n  url: http://b\n  api_version: '2.13'\n")
        client = BrokerClient.from_config_file(str(path))
        assert client.api_version == VERSION_2_13
        client.close()


class TestOperations:
    """Test individual operations through the mock transport."""

    def test_get_catalog(self, client, mock_adapter, make_response):
        """Test a catalog round trip."""
        mock_adapter.add("GET", BASE + "/v2/catalog", make_response(200, {
            "services": [{"id": "svc-1", "name": "mysql", "bindable": True,
                          "plans": [{"id": "plan-1", "name": "small"}]}],
        }))

        catalog = client.get_catalog().result()

        assert catalog.services[0].plans[0].name == "small"
        sent = mock_adapter.sent_requests[0]
        assert sent.headers["X-Broker-API-Version"] == "2.17"

    def test_provision_sync(self, client, mock_adapter, make_response):
        """Test a synchronous provision."""
        mock_adapter.add("PUT", INSTANCE_URL, make_response(201, {"dashboard_url": "https://dash"}))

        outcome = client.provision_instance(provision_request())

        assert outcome.kind is OutcomeKind.SYNC_RESULT
        assert outcome.status_code == 201
        assert outcome.response.dashboard_url == "https://dash"

    def test_missing_field_does_no_io(self, client, mock_adapter):
        """Test validation failures happen before sending."""
        with pytest.raises(MissingRequiredFieldError):
            client.provision_instance(provision_request(space_guid=""))
        assert mock_adapter.sent_requests == []

    def test_operation_not_allowed_does_no_io(self, make_config, mock_adapter):
        """Test version gating happens before sending."""
        client = BrokerClient(make_config(api_version=VERSION_2_16), adapter=mock_adapter)
        request = m.RotateBindingRequest(instance_id="inst-1", binding_id="bind-1", predecessor_binding_id="b0")

        with pytest.raises(OperationNotAllowedError):
            client.rotate_binding(request)
        assert mock_adapter.sent_requests == []

    def test_transport_error_propagates(self, client, mock_adapter):
        """Test adapter errors reach the caller unchanged."""
        error = TransportError("connection refused")
        mock_adapter.add("GET", BASE + "/v2/catalog", error)

        with pytest.raises(TransportError) as exc_info:
            client.get_catalog()
        assert exc_info.value is error

    def test_request_identity_bound_while_sending(self, client, mock_adapter, make_response):
        """Test events logged during a call carry its request identity."""
        seen = []

        def respond(request):
            seen.append((get_correlation_id(), request.headers["X-Broker-API-Request-Identity"]))
            return make_response(200, {})

        mock_adapter.add("GET", BASE + "/v2/catalog", respond)
        client.get_catalog()

        bound, sent = seen[0]
        assert bound == sent
        assert get_correlation_id() is None

    def test_deprovision_gone(self, client, mock_adapter, make_response):
        """Test an already deleted instance counts as deprovisioned."""
        mock_adapter.add("DELETE", INSTANCE_URL, make_response(410, {}))
        outcome = client.deprovision_instance(
            m.DeprovisionRequest(instance_id="inst-1", service_id="svc-1", plan_id="plan-1")
        )
        assert outcome.kind is OutcomeKind.SYNC_RESULT
        assert outcome.response == m.DeprovisionResponse()

    def test_broker_failure_returned(self, client, mock_adapter, make_response):
        """Test a conventional failure comes back as a failure outcome."""
        mock_adapter.add("PUT", INSTANCE_URL, make_response(
            422, {"error": "AsyncRequired", "description": "This service plan requires client support for asynchronous service operations."},
        ))
        outcome = client.provision_instance(provision_request())
        assert outcome.is_failure
        assert outcome.error.is_async_required

    def test_get_instance(self, client, mock_adapter, make_response):
        """Test fetching an instance."""
        mock_adapter.add("GET", INSTANCE_URL, make_response(200, {"service_id": "svc-1", "plan_id": "plan-1"}))
        response = client.get_instance(m.GetInstanceRequest(instance_id="inst-1")).result()
        assert response.plan_id == "plan-1"

    def test_update_instance(self, client, mock_adapter, make_response):
        """Test an instance update."""
        mock_adapter.add("PATCH", INSTANCE_URL, make_response(200, {}))
        outcome = client.update_instance(
            m.UpdateInstanceRequest(instance_id="inst-1", service_id="svc-1", plan_id="plan-2")
        )
        assert outcome.kind is OutcomeKind.SYNC_RESULT
        assert b'"plan_id":"plan-2"' in mock_adapter.sent_requests[0].body

    def test_bind_and_get_binding(self, client, mock_adapter, make_response):
        """Test binding creation and retrieval."""
        mock_adapter.add("PUT", BINDING_URL, make_response(201, {"credentials": {"password": "s3cret"}}))
        mock_adapter.add("GET", BINDING_URL, make_response(200, {"credentials": {"password": "s3cret"}}))

        bound = client.bind(m.BindRequest(
            binding_id="bind-1", instance_id="inst-1", service_id="svc-1", plan_id="plan-1",
        )).result()
        fetched = client.get_binding(m.GetBindingRequest(instance_id="inst-1", binding_id="bind-1")).result()

        assert bound.credentials == fetched.credentials == {"password": "s3cret"}

    def test_unbind_and_rotate(self, client, mock_adapter, make_response):
        """Test unbinding and rotating a binding."""
        mock_adapter.add("DELETE", BINDING_URL, make_response(200, {}))
        mock_adapter.add("PUT", BINDING_URL, make_response(201, {"credentials": {"v": 2}}))

        client.unbind(m.UnbindRequest(
            instance_id="inst-1", binding_id="bind-1", service_id="svc-1", plan_id="plan-1",
        )).result()
        rotated = client.rotate_binding(m.RotateBindingRequest(
            instance_id="inst-1", binding_id="bind-1", predecessor_binding_id="bind-0",
        )).result()

        assert rotated.credentials == {"v": 2}
        assert mock_adapter.sent_requests[1].body == b'{"predecessor_binding_id":"bind-0"}'

    def test_poll_last_operation(self, client, mock_adapter, make_response):
        """Test a direct last_operation query."""
        mock_adapter.add("GET", INSTANCE_LAST_OP_URL, make_response(200, {"state": "succeeded"}))
        response = client.poll_last_operation(m.LastOperationRequest(instance_id="inst-1")).result()
        assert response.state is m.LastOperationState.SUCCEEDED


class TestAsyncLifecycle:
    """Test accepted operations followed by polling."""

    def test_provision_then_poll(self, client, mock_adapter, make_response):
        """Test the operation key and identifiers are carried into polling."""
        mock_adapter.add("PUT", INSTANCE_URL, make_response(202, {"operation": "task-1"}))
        mock_adapter.add("GET", INSTANCE_LAST_OP_URL, [
            make_response(200, {"state": "in progress"}, headers={"Retry-After": "0.01"}),
            make_response(200, {"state": "succeeded", "description": "ready"}),
        ])
        request = provision_request(accepts_incomplete=True)

        outcome = client.provision_instance(request)
        result = client.wait_for_completion(ops.PROVISION_INSTANCE, request, outcome)

        assert outcome.is_async
        assert outcome.operation_key == "task-1"
        assert result.state is PollState.SUCCEEDED
        assert result.description == "ready"
        assert result.attempts == 2

        sent = mock_adapter.sent_requests
        assert sent[0].params == {"accepts_incomplete": "true"}
        assert sent[1].params == {"service_id": "svc-1", "plan_id": "plan-1", "operation": "task-1"}

    def test_unbind_gone_while_polling(self, client, mock_adapter, make_response):
        """Test 410 while polling an unbind is success."""
        mock_adapter.add("DELETE", BINDING_URL, make_response(202, {"operation": "u-1"}))
        mock_adapter.add("GET", BINDING_LAST_OP_URL, make_response(410, {}))
        request = m.UnbindRequest(
            instance_id="inst-1", binding_id="bind-1", service_id="svc-1",
            plan_id="plan-1", accepts_incomplete=True,
        )

        outcome = client.unbind(request)
        result = client.wait_for_completion(ops.UNBIND, request, outcome)

        assert result.succeeded

    def test_deprovision_gone_with_empty_body_while_polling(self, client, mock_adapter, make_response):
        """Test a bodiless 410 while polling a deprovision is success."""
        mock_adapter.add("DELETE", INSTANCE_URL, make_response(202, {"operation": "op"}))
        mock_adapter.add("GET", INSTANCE_LAST_OP_URL, make_response(410, b""))
        request = m.DeprovisionRequest(
            instance_id="inst-1", service_id="svc-1", plan_id="plan-1", accepts_incomplete=True,
        )

        outcome = client.deprovision_instance(request)
        result = client.wait_for_completion(ops.DEPROVISION_INSTANCE, request, outcome)

        assert result.state is PollState.SUCCEEDED
        assert result.attempts == 1
        assert len(mock_adapter.sent_requests) == 2

    def test_poller_for_requires_async_outcome(self, client, mock_adapter, make_response):
        """Test only accepted outcomes can be polled."""
        mock_adapter.add("PUT", INSTANCE_URL, make_response(201, {}))
        request = provision_request()
        outcome = client.provision_instance(request)

        with pytest.raises(ValueError, match="not an asynchronous acceptance"):
            client.poller_for(ops.PROVISION_INSTANCE, request, outcome)

    def test_poller_for_unpollable_operation(self, client, mock_adapter, make_response):
        """Test operations without a last_operation query."""
        mock_adapter.add("GET", BASE + "/v2/catalog", make_response(200, {}))
        outcome = client.get_catalog()
        with pytest.raises(ValueError, match="no last_operation"):
            client.poller_for(ops.GET_CATALOG, m.CatalogRequest(), outcome)

    def test_poll_retries_exceeded(self, client, mock_adapter, make_response):
        """Test repeated transport errors abandon polling."""
        mock_adapter.add("PUT", INSTANCE_URL, make_response(202, {}))
        mock_adapter.add("GET", INSTANCE_LAST_OP_URL, TransportError("reset"))
        request = provision_request(accepts_incomplete=True)
        outcome = client.provision_instance(request)

        with pytest.raises(PollExceededRetriesError):
            client.wait_for_completion(ops.PROVISION_INSTANCE, request, outcome, max_retries=1)

    def test_poll_cancelled(self, client, mock_adapter, make_response):
        """Test a set cancel event abandons polling."""
        mock_adapter.add("PUT", INSTANCE_URL, make_response(202, {}))
        request = provision_request(accepts_incomplete=True)
        outcome = client.provision_instance(request)
        event = threading.Event()
        event.set()

        result = client.wait_for_completion(ops.PROVISION_INSTANCE, request, outcome, cancel_event=event)

        assert result.state is PollState.ABANDONED
        assert len(mock_adapter.sent_requests) == 1

    def test_bind_poll_uses_binding_query(self, make_config, mock_adapter, make_response):
        """Test binding operations poll the binding last_operation endpoint."""
        client = BrokerClient(
            make_config(api_version=VERSION_2_14, polling=PollingConfig(default_delay_seconds=0.01)),
            adapter=mock_adapter,
        )
        mock_adapter.add("PUT", BINDING_URL, make_response(202, {"operation": "b-1"}))
        mock_adapter.add("GET", BINDING_LAST_OP_URL, make_response(200, {"state": "failed", "description": "no capacity"}))
        request = m.BindRequest(
            binding_id="bind-1", instance_id="inst-1", service_id="svc-1",
            plan_id="plan-1", accepts_incomplete=True,
        )

        result = client.wait_for_completion(ops.BIND, request, client.bind(request))

        assert result.state is PollState.FAILED
        assert result.description == "no capacity"
        assert mock_adapter.sent_requests[1].params["operation"] == "b-1"
