"""
CLI Module for LazyConfig

Provides command-line tools for managing settings files:
- lazyconfigctl: get/set/list/check settings and run the demo flow

Usage:
    python -m lazyconfig.cli.lazyconfigctl list
    python -m lazyconfig.cli.lazyconfigctl set User alice
"""

from .lazyconfigctl import ConfigCLI, main as lazyconfigctl_main

__all__ = [
    'ConfigCLI',
    'lazyconfigctl_main',
]
