"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

CLI context for osbclient.

Provides shared context object and decorators for CLI commands.
"""

import click

from osbclient.sdk.client import BrokerClient


# Global context object to share configuration across commands
class CLIContext:
    """Context object for CLI commands."""
    
    def __init__(self, adapter=None):
        self.config = None
        self.config_path = None
        self.verbose = False
        # Transport override; None selects the HTTP adapter.
        self.adapter = adapter

    def client(self) -> BrokerClient:
        """Create a broker client from the loaded configuration."""
        return BrokerClient(self.config, adapter=self.adapter)


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
