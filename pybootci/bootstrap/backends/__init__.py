"""Execution backends for bootstrap methods."""

from pybootci.bootstrap.backends.cpu import CPUBootstrapBackend, CPUJackknifeBackend

__all__ = ["CPUBootstrapBackend", "CPUJackknifeBackend"]
