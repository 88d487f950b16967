"""
Core Module Package

Functionality shared across the application:
- retry: Retry decorator for idempotent API reads

Usage:
    from funcli.core.retry import retry_on_failure
"""

from funcli.core import retry as retry
from funcli.core.retry import retry_on_failure

__all__ = ['retry', 'retry_on_failure']
