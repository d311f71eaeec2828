"""Relay channel and wiring polarity models."""

from __future__ import annotations

from enum import Enum


class Channel(str, Enum):
    """The two independently switched relay circuits."""

    AC = "ac"
    DC = "dc"

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def parse(cls, text: str) -> Channel:
        """Accept ``"ac"``/``"AC"``/``" dc "`` style names."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown channel {text!r}. Valid: {[c.value for c in cls]}"
            ) from None


class Polarity(Enum):
    """How the load is wired to the relay contacts.

    The persisted boolean keeps the original meaning: ``True`` is
    normally-open.
    """

    NORMALLY_OPEN = True
    NORMALLY_CLOSED = False

    @property
    def short(self) -> str:
        return "NO" if self is Polarity.NORMALLY_OPEN else "NC"

    @property
    def description(self) -> str:
        if self is Polarity.NORMALLY_OPEN:
            return "NO (Normally Open)"
        return "NC (Normally Closed)"

    @classmethod
    def from_mode(cls, mode: bool | Polarity) -> Polarity:
        if isinstance(mode, Polarity):
            return mode
        return cls.NORMALLY_OPEN if mode else cls.NORMALLY_CLOSED

    @classmethod
    def parse(cls, text: str) -> Polarity:
        """Parse operator input ``no`` or ``nc``."""
        value = text.strip().lower()
        if value == "no":
            return cls.NORMALLY_OPEN
        if value == "nc":
            return cls.NORMALLY_CLOSED
        raise ValueError(f"Invalid mode {text!r}. Please enter 'no' or 'nc'.")
