"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

CLI commands for the broker catalog and last-operation queries.
"""

from typing import Optional

import click

from osbclient.cli.common import build_identity, identity_options, run_operation
from osbclient.core import messages as m
from osbclient.core import operations as ops


@click.command('catalog')
@identity_options
@click.pass_context
def catalog(ctx, identity_platform: Optional[str], identity_value: Optional[str]):
    """
    Fetch the broker's catalog of services and plans.

    Examples:

        osbclient --url http://broker:8080 catalog
    """
    run_operation(
        ctx.obj,
        ops.GET_CATALOG,
        lambda: m.CatalogRequest(
            originating_identity=build_identity(identity_platform, identity_value),
        ),
    )


@click.command('last-operation')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--binding-id', '-b', default=None, help='Binding ID (polls the binding instead)')
@click.option('--service-id', default=None, help='Service offering ID')
@click.option('--plan-id', default=None, help='Plan ID')
@click.option('--operation', '-o', 'operation_key', default=None,
              help='Operation key returned when the request was accepted')
@identity_options
@click.pass_context
def last_operation(
    ctx,
    instance_id: str,
    binding_id: Optional[str],
    service_id: Optional[str],
    plan_id: Optional[str],
    operation_key: Optional[str],
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Query the state of an asynchronous instance or binding operation.

    Examples:

        osbclient last-operation -i my-instance -o task-42

        osbclient last-operation -i my-instance -b my-binding
    """
    def build_request():
        common = dict(
            instance_id=instance_id,
            service_id=service_id,
            plan_id=plan_id,
            operation=m.OperationKey(operation_key) if operation_key else None,
            originating_identity=build_identity(identity_platform, identity_value),
        )
        if binding_id is not None:
            return m.BindingLastOperationRequest(binding_id=binding_id, **common)
        return m.LastOperationRequest(**common)

    operation = ops.POLL_BINDING_LAST_OPERATION if binding_id is not None else ops.POLL_LAST_OPERATION
    run_operation(ctx.obj, operation, build_request)
