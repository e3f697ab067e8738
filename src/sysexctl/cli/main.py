"""Main CLI entry point."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import click

from sysexctl import __version__
from sysexctl.config import DEFAULT_LOG_DIR

from .commands import codec, config_group, device, list_group
from .context import CliContext

logger = logging.getLogger(__name__)

_file_handler: Optional[logging.Handler] = None


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Where log records go for the given flags."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "sysexctl-debug.log"
    return DEFAULT_LOG_DIR / "sysexctl.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging in the current directory
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file
    """
    global _file_handler

    # Determine log level based on flags
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Override with explicit log level if provided
    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Create rotating file handler (keeps last 5 files, max 10MB each)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    if _file_handler is not None:
        # Repeated invocations in one process (tests) replace the handler
        root_logger.removeHandler(_file_handler)
        _file_handler.close()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    _file_handler = file_handler

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="sysexctl")
@click.option(
    '--timeout',
    '-t',
    type=click.IntRange(10, 60_000),
    default=None,
    help='Reply window in milliseconds (default: from config, 500)'
)
@click.option(
    '--config',
    'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.sysexctl/config.json)'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./sysexctl-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    timeout: Optional[int],
    config_path: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    sysexctl - edit hidden synth parameters over MIDI SysEx.

    Parameters are addressed by name, with an index for repeated
    parameters and a mode for parameters that have modes:

    \b
      Name            e.g. Play
      Name/Index      e.g. Seq/1
      Name:Mode       for parameters that have modes

    \b
    Examples:
      # Show what a MicroBrute exposes
      sysexctl list controls MicroBrute

      # Read every parameter back
      sysexctl get MicroBrute

      # Write parameters
      sysexctl set MicroBrute Play NoteOn
      sysexctl set MicroBrute Seq/1 C4 D#4 _ G4

      # Inspect the bytes without a device
      sysexctl encode MicroBrute BendRange 12
      sysexctl decode "f0 00 20 6b 05 01 00 01 2c 0b f7"

      # Enable debug logging
      sysexctl --debug get MicroBrute
    """
    log_path = setup_logging(verbose, debug, log_file, log_level)
    ctx.obj = CliContext(config_path=config_path, timeout_ms=timeout, log_path=log_path)


cli.add_command(list_group)
cli.add_command(device.get)
cli.add_command(device.set_command)
cli.add_command(device.reset)
cli.add_command(device.detect)
cli.add_command(codec.encode)
cli.add_command(codec.decode)
cli.add_command(config_group)


def main():
    """Console script entry point."""
    cli(prog_name="sysexctl")


if __name__ == "__main__":
    main()
