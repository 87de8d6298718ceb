"""Shutdown coordination module for managing graceful shutdown of application components."""

from .coordinator import (
    LifecycleState,
    ShutdownConfig,
    ShutdownCoordinator,
    ShutdownHandler,
    ShutdownOutcome,
)

__all__ = ['LifecycleState', 'ShutdownConfig', 'ShutdownCoordinator', 'ShutdownHandler', 'ShutdownOutcome']
