"""Shared utilities for CLI commands."""

import logging
from pathlib import Path

from idlmap.config import ConfigError, IdlMapConfig, load_config
from idlmap.schema import Idl, is_shank_idl
from idlmap.schema.idl import load_idl

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def load_project(config_path: str | Path) -> tuple[IdlMapConfig, Idl]:
    """Load the config at ``config_path`` and the IDL it points to.

    Raises:
        ConfigError: If the config is invalid, the IDL file does not exist or
            the IDL was produced by a different generator than configured.
        IdlParseError: If the IDL cannot be decoded.
    """
    config = load_config(config_path)
    idl_path = config.idl_path
    if not idl_path.exists():
        raise ConfigError(f'IDL file does not exist: {idl_path}')
    logger.debug(f'Loading IDL from {idl_path}')
    idl = load_idl(idl_path)
    idl_generator = 'shank' if is_shank_idl(idl) else 'anchor'
    if idl_generator != config.idl_generator:
        raise ConfigError(
            f'IDL was generated by {idl_generator}, '
            f'but idlGenerator is {config.idl_generator}: {idl_path}'
        )
    return config, idl
