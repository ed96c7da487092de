"""Declarative management of Zendesk OAuth clients and tokens."""

__version__ = "0.1.0"
