"""
Schema registry: every vendor and device known to the process.

The registry reads the JSON schema documents bundled in ``schema/data/``
and any extra directories listed in the user configuration. It is built
once, on first use, and shared read-only afterwards:

::

    get_registry()
        │  first call only, under a lock
        ↓
    SchemaRegistry(extra_dirs)
        ├── schema/data/*.json         bundled, errors are fatal
        └── <schema_dirs>/*.json       user supplied, bad files are skipped
        ↓
    vendors ─→ devices ─→ controls / indexed controls

Adding a device means adding a schema document, not code.
"""

import logging
import threading
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from ..exceptions import SchemaLoadError, UnknownDeviceError, collect_errors, wrap_pydantic_error
from .model import Device, Vendor

logger = logging.getLogger(__name__)

BUNDLED_SCHEMA_DIR = Path(__file__).parent / "data"


def load_vendor(path: Path) -> Vendor:
    """
    Load one vendor schema document.

    Raises:
        SchemaLoadError: File unreadable or invalid
    """
    try:
        return Vendor.from_json_file(path)
    except ValidationError as e:
        wrapped = wrap_pydantic_error(e, str(path))
        raise SchemaLoadError(str(path), wrapped.user_message) from e
    except OSError as e:
        raise SchemaLoadError(str(path), str(e)) from e


class SchemaRegistry:
    """
    All vendors and devices loaded from schema documents.

    The registry never changes after construction.
    """

    def __init__(
        self,
        extra_dirs: Optional[Iterable[Path]] = None,
        bundled_dir: Optional[Path] = BUNDLED_SCHEMA_DIR,
        vendors: Optional[Iterable[Vendor]] = None,
    ):
        """
        Initialize the registry.

        Args:
            extra_dirs: User directories searched for more ``*.json`` schemas
            bundled_dir: Directory of schemas shipped with the package, None to skip
            vendors: Already loaded vendors, mostly for tests
        """
        self._vendors: list[Vendor] = list(vendors or [])

        if bundled_dir is not None:
            for path in sorted(bundled_dir.glob("*.json")):
                self._vendors.append(load_vendor(path))

        collector = collect_errors("load user schemas")
        for directory in extra_dirs or []:
            directory = Path(directory).expanduser()
            if not directory.is_dir():
                logger.warning(f"Schema directory {directory} does not exist, skipping")
                continue
            for path in sorted(directory.glob("*.json")):
                with collector.try_operation(path.name):
                    self._vendors.append(load_vendor(path))
        if collector.has_errors:
            logger.warning(collector.get_summary())

        self._device_vendor: dict[str, Vendor] = {}
        for vendor in self._vendors:
            for device in vendor.devices:
                if device.name in self._device_vendor:
                    logger.warning(
                        f"Device '{device.name}' of {vendor.name} shadows an earlier definition"
                    )
                    continue
                self._device_vendor[device.name] = vendor

        logger.info(
            f"Loaded {len(self._vendors)} vendor schema(s) with "
            f"{len(self._device_vendor)} device(s)"
        )

    @property
    def vendors(self) -> list[Vendor]:
        return list(self._vendors)

    @property
    def devices(self) -> list[Device]:
        return [self.resolve_device(name) for name in self._device_vendor]

    def resolve_device(self, name: str) -> Device:
        """
        Find a device by name, ignoring case.

        Raises:
            UnknownDeviceError: No loaded schema declares the device
        """
        vendor = self._device_vendor.get(name)
        if vendor is None:
            lowered = name.lower()
            name = next((n for n in self._device_vendor if n.lower() == lowered), name)
            vendor = self._device_vendor.get(name)
        if vendor is None:
            raise UnknownDeviceError(name)
        return next(d for d in vendor.devices if d.name == name)

    def vendor_of(self, device: Device) -> Vendor:
        return self._device_vendor[device.name]

    def find_device_for_port(self, port_name: str) -> Optional[Device]:
        """Device whose port prefix starts the given MIDI port name."""
        for device in self.devices:
            if port_name.startswith(device.port_prefix):
                logger.debug(f"Detected {device.name} from port: {port_name}")
                return device
        logger.debug(f"No device matched port: {port_name}")
        return None

    def find_vendor_by_manufacturer(self, manufacturer: bytes) -> Optional[Vendor]:
        """Vendor whose SysEx prefix equals a manufacturer id."""
        return next((v for v in self._vendors if bytes(v.sysex) == manufacturer), None)


_registry: Optional[SchemaRegistry] = None
_registry_lock = threading.Lock()


def get_registry(extra_dirs: Optional[Iterable[Path]] = None) -> SchemaRegistry:
    """
    Get the process-wide SchemaRegistry, building it on first call.

    ``extra_dirs`` only matters on the first call.
    """
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = SchemaRegistry(extra_dirs)
    return _registry


def reset_registry() -> None:
    """Drop the shared registry so the next call reloads it."""
    global _registry
    with _registry_lock:
        _registry = None
