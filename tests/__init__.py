"""
Test suite for schemarecon.

This package contains unit tests for the schema store, the correspondence
and reconciliation engine, configuration and the command-line interface.
"""
