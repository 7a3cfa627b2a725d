"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Command-line interface for osbclient.
"""
