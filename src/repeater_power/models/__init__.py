"""Data models for relay channels and the persisted configuration."""

from .relay import Channel, Polarity
from .configuration import (
    Configuration,
    load_configuration,
    load_or_default,
    save_configuration,
)
