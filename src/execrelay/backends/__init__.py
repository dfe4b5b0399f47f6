"""
Remote execution backends.

This package exposes clients for the two services code is relayed to.
``PestoBackend`` is tried first for the languages it supports;
``PistonBackend`` is the fallback and accepts any language slug.
Additional backends can be added by implementing the
``ExecutionBackend`` interface from ``base.py``.
"""

from .base import BackendError, ExecutionBackend
from .pesto import (
    PestoAPIError,
    PestoBackend,
    PestoError,
    PestoMonthlyLimitExceededError,
    PestoRuntimeNotFoundError,
    PestoServerRateLimitedError,
)
from .piston import PistonBackend, PistonEngineFault, PistonError

__all__ = [
    "BackendError",
    "ExecutionBackend",
    "PestoAPIError",
    "PestoBackend",
    "PestoError",
    "PestoMonthlyLimitExceededError",
    "PestoRuntimeNotFoundError",
    "PestoServerRateLimitedError",
    "PistonBackend",
    "PistonEngineFault",
    "PistonError",
]
