"""
CLI command modules.

This package contains all Click command definitions, organized by functional area.
"""
