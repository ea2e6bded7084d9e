"""
Snap Errors - Exceptions raised by the snap pipeline
"""


class SnapError(Exception):
    """Base class for all snap effect errors"""


class SnapConfigError(SnapError, ValueError):
    """Invalid effect configuration (bucket count, duration, callback...)"""


class CaptureNotReadyError(SnapError, RuntimeError):
    """The subject could not be captured yet; the snap may be retried"""


class AnimationInProgressError(SnapError, RuntimeError):
    """start() was called while a snap cycle is running or completed"""
