"""MIDI transport."""

from .port import DevicePort, FrameCallback, list_ports, locate_port

__all__ = ["DevicePort", "FrameCallback", "list_ports", "locate_port"]
