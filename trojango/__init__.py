"""Proxy core: configuration, relaying, logging, geodata decoding and command-line entry."""

__version__ = "0.1.0"