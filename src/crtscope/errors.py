"""
Error types raised by crtscope.

Everything here is local and recoverable: a bad configuration is
rejected before any frame is drawn, and an unavailable source only
causes the current frame to be skipped.
"""


class CrtScopeError(Exception):
    """Base class for crtscope errors."""


class ConfigurationError(CrtScopeError, ValueError):
    """Invalid parameter value, preset, style or palette."""


class ResourceUnavailable(CrtScopeError):
    """The source image or rendering context cannot be used this frame."""
