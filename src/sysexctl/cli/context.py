"""Shared state of one CLI invocation and error reporting."""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click

from sysexctl.config import AppConfig, DEFAULT_CONFIG_PATH
from sysexctl.exceptions import SysexCtlError, format_error_for_display
from sysexctl.schema import Device, SchemaRegistry, get_registry

logger = logging.getLogger(__name__)


class CliContext:
    """
    Options of the root command, with the config loaded on first use.

    Loading lazily keeps ``config reset`` usable when the config file is broken.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        timeout_ms: Optional[int] = None,
        log_path: Optional[Path] = None,
    ):
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.timeout_ms = timeout_ms
        self.log_path = log_path
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = AppConfig.load_or_default(self.config_path)
        return self._config

    @property
    def timeout(self) -> float:
        """Reply window in seconds; ``--timeout`` wins over the config."""
        if self.timeout_ms is not None:
            return self.timeout_ms / 1000
        return self.config.query_timeout

    @property
    def registry(self) -> SchemaRegistry:
        return get_registry(self.config.schema_dirs)

    def device(self, name: str) -> Device:
        return self.registry.resolve_device(name)

    @contextmanager
    def session(self, device_name: str):
        """Open the device's port and yield a session on it."""
        from sysexctl.midi import DevicePort
        from sysexctl.session import DeviceSession

        device = self.device(device_name)
        with DevicePort.for_device(device, client_name=self.config.client_name) as port:
            yield DeviceSession(device, port, self.registry, timeout=self.timeout)


pass_cli_context = click.make_pass_decorator(CliContext, ensure=True)


@contextmanager
def report_errors(cli_ctx: CliContext) -> Iterator[None]:
    """
    Print sysexctl errors without a traceback and exit with code 1.

    Anything else propagates so real bugs keep their traceback.
    """
    try:
        yield
    except SysexCtlError as e:
        logger.error(f"Command failed: {e.technical_message}")

        user_message, recovery_hint = format_error_for_display(e)

        click.echo("\n" + "=" * 70, err=True)
        click.echo(f"ERROR: {user_message}", err=True)
        click.echo("=" * 70, err=True)

        if recovery_hint:
            click.echo(f"\n{recovery_hint}", err=True)

        if cli_ctx.log_path:
            click.echo(f"\nFor details, check the log file: {cli_ctx.log_path}", err=True)

        sys.exit(1)
