"""
Runtime package: front ends that drive order machines from concurrent callers.
"""

from .async_support import AsyncOrderStateMachine

__all__ = ["AsyncOrderStateMachine"]
