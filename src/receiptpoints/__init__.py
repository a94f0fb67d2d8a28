"""Receipt processing and loyalty points service."""

__version__ = "0.1.0"
