"""CSI controller for Tencent Cloud CBS block volumes."""

__version__ = "0.1.0"
