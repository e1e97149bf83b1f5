from .capture_session import CaptureLimits, CaptureSession

__all__ = ["CaptureLimits", "CaptureSession"]
