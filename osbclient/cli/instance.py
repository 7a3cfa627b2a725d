"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

CLI commands for service instance management.

Provides commands for provisioning, updating, deprovisioning and
retrieving service instances.
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


@click.command('provision')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--service-id', '-s', required=True, help='Service offering ID')
@click.option('--plan-id', '-p', required=True, help='Plan ID')
@click.option('--organization-guid', required=True, help='Platform organization GUID')
@click.option('--space-guid', required=True, help='Platform space GUID')
@click.option('--parameters', callback=parse_json_object, default=None,
              help='Configuration parameters as a JSON object')
@click.option('--context', 'context_data', callback=parse_json_object, default=None,
              help='Platform context as a JSON object (API 2.12+)')
@async_options
@identity_options
@click.pass_context
def provision(
    ctx,
    instance_id: str,
    service_id: str,
    plan_id: str,
    organization_guid: str,
    space_guid: str,
    parameters: Optional[Dict[str, Any]],
    context_data: Optional[Dict[str, Any]],
    accepts_incomplete: bool,
    wait: bool,
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Provision a new service instance.

    Examples:

        osbclient instance provision -i db-1 -s mysql -p small \\
            --organization-guid org-1 --space-guid space-1

        osbclient instance provision -i db-1 -s mysql -p small \\
            --organization-guid org-1 --space-guid space-1 \\
            --parameters '{"storage_gb": 10}' --accepts-incomplete --wait
    """
    run_operation(
        ctx.obj,
        ops.PROVISION_INSTANCE,
        lambda: m.ProvisionRequest(
            instance_id=instance_id,
            service_id=service_id,
            plan_id=plan_id,
            organization_guid=organization_guid,
            space_guid=space_guid,
            accepts_incomplete=accepts_incomplete,
            parameters=parameters,
            context=context_data,
            originating_identity=build_identity(identity_platform, identity_value),
        ),
        wait=wait,
    )


@click.command('update')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--service-id', '-s', required=True, help='Service offering ID')
@click.option('--plan-id', '-p', default=None, help='New plan ID (omit to keep the current plan)')
@click.option('--parameters', callback=parse_json_object, default=None,
              help='Configuration parameters as a JSON object')
@click.option('--context', 'context_data', callback=parse_json_object, default=None,
              help='Platform context as a JSON object (API 2.12+)')
@async_options
@identity_options
@click.pass_context
def update(
    ctx,
    instance_id: str,
    service_id: str,
    plan_id: Optional[str],
    parameters: Optional[Dict[str, Any]],
    context_data: Optional[Dict[str, Any]],
    accepts_incomplete: bool,
    wait: bool,
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Update the plan or parameters of a service instance.

    Examples:

        osbclient instance update -i db-1 -s mysql -p large --accepts-incomplete
    """
    run_operation(
        ctx.obj,
        ops.UPDATE_INSTANCE,
        lambda: m.UpdateInstanceRequest(
            instance_id=instance_id,
            service_id=service_id,
            plan_id=plan_id,
            accepts_incomplete=accepts_incomplete,
            parameters=parameters,
            context=context_data,
            originating_identity=build_identity(identity_platform, identity_value),
        ),
        wait=wait,
    )


@click.command('deprovision')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--service-id', '-s', required=True, help='Service offering ID')
@click.option('--plan-id', '-p', required=True, help='Plan ID')
@async_options
@identity_options
@click.pass_context
def deprovision(
    ctx,
    instance_id: str,
    service_id: str,
    plan_id: str,
    accepts_incomplete: bool,
    wait: bool,
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Deprovision a service instance.

    A 410 Gone from the broker is reported as success.

    Examples:

        osbclient instance deprovision -i db-1 -s mysql -p small --accepts-incomplete --wait
    """
    run_operation(
        ctx.obj,
        ops.DEPROVISION_INSTANCE,
        lambda: m.DeprovisionRequest(
            instance_id=instance_id,
            service_id=service_id,
            plan_id=plan_id,
            accepts_incomplete=accepts_incomplete,
            originating_identity=build_identity(identity_platform, identity_value),
        ),
        wait=wait,
    )


@click.command('get')
@click.option('--instance-id', '-i', required=True, help='Service instance ID')
@click.option('--service-id', '-s', default=None, help='Service offering ID')
@click.option('--plan-id', '-p', default=None, help='Plan ID')
@identity_options
@click.pass_context
def get(
    ctx,
    instance_id: str,
    service_id: Optional[str],
    plan_id: Optional[str],
    identity_platform: Optional[str],
    identity_value: Optional[str],
):
    """
    Fetch a service instance (API 2.14+).

    Examples:

        osbclient --api-version 2.14 instance get -i db-1
    """
    run_operation(
        ctx.obj,
        ops.GET_INSTANCE,
        lambda: m.GetInstanceRequest(
            instance_id=instance_id,
            service_id=service_id,
            plan_id=plan_id,
            originating_identity=build_identity(identity_platform, identity_value),
        ),
    )
