"""Exceptions raised before a frame is touched."""


class ConfigurationError(ValueError):
    """Filter configuration is invalid or incompatible with the frame size."""


class DimensionMismatch(ValueError):
    """Color buffer length does not match the declared width and height."""
