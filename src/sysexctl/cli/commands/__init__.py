"""CLI commands for sysexctl."""

from . import codec, device
from .config import config_group
from .list import list_group

__all__ = ["codec", "config_group", "device", "list_group"]
