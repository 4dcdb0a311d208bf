"""
CLI orchestrators for multi-step workflows.

Orchestrators coordinate multiple services to implement complex operations.
They are pure Python (no Click dependencies) and can be tested independently.
"""
from .setup import SetupOrchestrator

__all__ = ['SetupOrchestrator']
