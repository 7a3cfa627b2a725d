"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Shared helpers for CLI commands.

Provides JSON option parsing, originating identity options and the
run-and-render loop used by every broker command.
"""

import json
import sys
from typing import Any, Dict, Optional

import click

from osbclient.core import codec
from osbclient.core.messages import OriginatingIdentity
from osbclient.core.operations import Operation
from osbclient.core.poller import PollResult
from osbclient.core.response import OperationOutcome
from osbclient.exceptions import OSBClientError


def parse_json_object(ctx, param, value: Optional[str]) -> Optional[Dict[str, Any]]:
    """Click callback parsing an option value as a JSON object."""
    if value is None:
        return None
    try:
        parsed = json.loads(value)
    except ValueError as e:
        raise click.BadParameter(f"must be valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise click.BadParameter("must be a JSON object")
    return parsed


def identity_options(f):
    """Add --identity-platform/--identity-value options to a command."""
    f = click.option(
        '--identity-value',
        default=None,
        help='Originating identity as a JSON value (requires --identity-platform)',
    )(f)
    f = click.option(
        '--identity-platform',
        default=None,
        help='Platform of the originating identity (e.g. cloudfoundry, kubernetes)',
    )(f)
    return f


def async_options(f):
    """Add --accepts-incomplete and --wait options to a command."""
    f = click.option(
        '--wait',
        is_flag=True,
        help='Poll an asynchronously accepted operation until it finishes',
    )(f)
    f = click.option(
        '--accepts-incomplete',
        is_flag=True,
        help='Allow the broker to complete the operation asynchronously',
    )(f)
    return f


def build_identity(platform: Optional[str], value: Optional[str]) -> Optional[OriginatingIdentity]:
    """
    Build an originating identity from CLI options.

    Raises:
        InvalidIdentityAssertionError: If only one of the two parts is given
            or the value is not JSON
    """
    if platform is None and value is None:
        return None
    return OriginatingIdentity(platform=platform or "", value=value or "")


def outcome_to_dict(outcome: OperationOutcome, config) -> Dict[str, Any]:
    """Render an operation outcome as a JSON-ready dict."""
    data: Dict[str, Any] = {
        "outcome": outcome.kind.value,
        "status_code": outcome.status_code,
    }
    if outcome.is_failure:
        error = outcome.error
        data["error"] = {
            "error": error.error_message,
            "description": error.description,
            "response_error": str(error.response_error) if error.response_error else None,
        }
        return data

    if outcome.response is not None:
        data["response"] = codec.to_wire(
            outcome.response, config.api_version, config.enable_alpha_features, where=None
        )
    if outcome.operation_key:
        data["operation"] = outcome.operation_key
    return data


def poll_result_to_dict(result: PollResult) -> Dict[str, Any]:
    """Render a polling result as a JSON-ready dict."""
    data: Dict[str, Any] = {
        "state": result.state.value,
        "attempts": result.attempts,
        "description": result.description,
    }
    if result.error is not None:
        data["error"] = str(result.error)
    return data


def run_operation(
    cli_ctx,
    operation: Operation,
    build_request,
    wait: bool = False,
) -> None:
    """
    Execute one operation and print its outcome as JSON.

    ``build_request`` is called inside the error boundary so that local
    validation failures are reported like any other client error.

    Exits with status 1 on client errors, broker failures and polls that do
    not finish in the succeeded state.
    """
    try:
        with cli_ctx.client() as client:
            request = build_request()
            outcome = client.execute(operation, request)
            payload = outcome_to_dict(outcome, cli_ctx.config)
            succeeded = not outcome.is_failure

            if wait and outcome.is_async:
                result = client.wait_for_completion(operation, request, outcome)
                payload["poll"] = poll_result_to_dict(result)
                succeeded = result.succeeded
    except OSBClientError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(payload, indent=2, sort_keys=True))
    if not succeeded:
        sys.exit(1)
