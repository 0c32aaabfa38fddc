# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the schema mapper.
"""

from core.config.defaults import (
    SchemaDefaults,
    NamingDefaults,
    ConnectionDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "SchemaDefaults",
    "NamingDefaults",
    "ConnectionDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
