"""Device schemas: the declarative description of every supported synth."""

from .model import (
    FORMS,
    Contexts,
    Control,
    Device,
    Form,
    IndexedControl,
    Key,
    Mode,
    ModeField,
    Sysex,
    Vendor,
)
from .registry import SchemaRegistry, get_registry, load_vendor, reset_registry

__all__ = [
    "FORMS",
    "Contexts",
    "Control",
    "Device",
    "Form",
    "IndexedControl",
    "Key",
    "Mode",
    "ModeField",
    "SchemaRegistry",
    "Sysex",
    "Vendor",
    "get_registry",
    "load_vendor",
    "reset_registry",
]
