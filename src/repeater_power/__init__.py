"""Serial relay power control for radio repeater sites."""

__version__ = "1.1.0"
