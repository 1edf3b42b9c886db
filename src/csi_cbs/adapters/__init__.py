"""Adapters module - provider implementations."""

from csi_cbs.adapters.cbs import CbsDiskGateway

__all__ = ["CbsDiskGateway"]
