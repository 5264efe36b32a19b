"""Command trees, output formatting and gNMI query parsing for ONOS service clients."""

__version__ = "0.1.0"