"""Anchor role enum."""

from enum import Enum


class AnchorRole(Enum):
    """Which end of the route an anchor marks."""

    START = "start"
    END = "end"
