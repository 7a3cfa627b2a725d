"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

CLI commands for service binding management.
"""

from typing import Any, Dict, Optional

import click

from osbclient.cli.common import (
    async_options,
    build_identity,
    identity_options,
    parse_json_object,
    run_operation,
)
from osbclient.core import messages as m
from osbclient.core import operations as ops


@click.command('bind')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--binding-id', '-b', required=True, help='Binding ID')
@click.option('--service-id', '-s', required=True, help='Service offering ID')
@click.option('--plan-id', '-p', required=True, help='Plan ID')
@click.option('--app-guid', default=None, help='GUID of the application being bound')
@click.option('--route', default=None, help='Route being bound (route services)')
@click.option('--parameters', callback=parse_json_object, default=None,
              help='Binding parameters as a JSON object')
@click.option('--context', 'context_data', callback=parse_json_object, default=None,
              help='Platform context as a JSON object (API 2.13+)')
@async_options
@identity_options
@click.pass_context
def bind(
    ctx,
    instance_id: str,
    binding_id: str,
    service_id: str,
    plan_id: str,
    app_guid: Optional[str],
    route: Optional[str],
    parameters: Optional[Dict[str, Any]],
    context_data: Optional[Dict[str, Any]],
    accepts_incomplete: bool,
    wait: bool,
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Create a binding to a service instance.

    Asynchronous binding requires API 2.14 or later.

    Examples:

        osbclient binding bind -i db-1 -b app-1-db -s mysql -p small --app-guid app-1
    """
    def build_request():
        resource = m.BindResource(app_guid=app_guid, route=route)
        return m.BindRequest(
            binding_id=binding_id,
            instance_id=instance_id,
            service_id=service_id,
            plan_id=plan_id,
            accepts_incomplete=accepts_incomplete,
            app_guid=app_guid,
            bind_resource=resource if resource.is_not_empty() else None,
            parameters=parameters,
            context=context_data,
            originating_identity=build_identity(identity_platform, identity_value),
        )

    run_operation(ctx.obj, ops.BIND, build_request, wait=wait)


@click.command('unbind')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--binding-id', '-b', required=True, help='Binding ID')
@click.option('--service-id', '-s', required=True, help='Service offering ID')
@click.option('--plan-id', '-p', required=True, help='Plan ID')
@async_options
@identity_options
@click.pass_context
def unbind(
    ctx,
    instance_id: str,
    binding_id: str,
    service_id: str,
    plan_id: str,
    accepts_incomplete: bool,
    wait: bool,
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Delete a binding. A 410 Gone from the broker is reported as success.

    Examples:

        osbclient binding unbind -i db-1 -b app-1-db -s mysql -p small
    """
    run_operation(
        ctx.obj,
        ops.UNBIND,
        lambda: m.UnbindRequest(
            instance_id=instance_id,
            binding_id=binding_id,
            service_id=service_id,
            plan_id=plan_id,
            accepts_incomplete=accepts_incomplete,
            originating_identity=build_identity(identity_platform, identity_value),
        ),
        wait=wait,
    )


@click.command('rotate')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--binding-id', '-b', required=True, help='ID of the new binding')
@click.option('--predecessor-binding-id', required=True, help='ID of the binding being replaced')
@async_options
@identity_options
@click.pass_context
def rotate(
    ctx,
    instance_id: str,
    binding_id: str,
    predecessor_binding_id: str,
    accepts_incomplete: bool,
    wait: bool,
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Create a binding that replaces an existing one (API 2.17+).

    Examples:

        osbclient --api-version 2.17 binding rotate -i db-1 -b app-1-db-v2 \\
            --predecessor-binding-id app-1-db
    """
    run_operation(
        ctx.obj,
        ops.ROTATE_BINDING,
        lambda: m.RotateBindingRequest(
            instance_id=instance_id,
            binding_id=binding_id,
            predecessor_binding_id=predecessor_binding_id,
            accepts_incomplete=accepts_incomplete,
            originating_identity=build_identity(identity_platform, identity_value),
        ),
        wait=wait,
    )


@click.command('get')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--binding-id', '-b', required=True, help='Binding ID')
@identity_options
@click.pass_context
def get(
    ctx,
    instance_id: str,
    binding_id: str,
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Fetch a binding (API 2.14+).

    Examples:

        osbclient binding get -i db-1 -b app-1-db
    """
    run_operation(
        ctx.obj,
        ops.GET_BINDING,
        lambda: m.GetBindingRequest(
            instance_id=instance_id,
            binding_id=binding_id,
            originating_identity=build_identity(identity_platform, identity_value),
        ),
    )
