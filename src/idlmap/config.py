"""Project configuration for idlmap.

The configuration is a JSON file, for example::

    {
        "programName": "token_vault",
        "idlDir": "idl",
        "sdkDir": "src/generated",
        "idlGenerator": "shank",
        "typeAliases": {"UnixTimestamp": "i64"}
    }
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

__all__ = ['ConfigError', 'IdlMapConfig', 'load_config']

IdlGenerator = Literal['anchor', 'shank']
_IDL_GENERATORS = ('anchor', 'shank')


class ConfigError(Exception):
    """Exception raised for invalid idlmap configurations."""
    pass


@dataclass(slots=True)
class IdlMapConfig:
    program_name: str
    idl_dir: Path
    sdk_dir: Path
    idl_generator: IdlGenerator = 'anchor'
    program_id: str | None = None
    type_aliases: dict[str, str] = field(default_factory=dict)

    @property
    def idl_path(self) -> Path:
        return self.idl_dir / f'{self.program_name}.json'

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> IdlMapConfig:
        """Create a config from its JSON representation.

        Relative directories are resolved against ``base_dir`` when given.
        """
        if not isinstance(data, dict):
            raise ConfigError(f'Config must be an object, got {type(data).__name__}')

        def required_str(key: str) -> str:
            value = data.get(key)
            if value is None:
                raise ConfigError(f'Missing required config key: {key}')
            if not isinstance(value, str) or not value:
                raise ConfigError(f'Config key {key} must be a non-empty string')
            return value

        def resolve_dir(raw: str) -> Path:
            path = Path(raw)
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            return path

        idl_generator = data.get('idlGenerator', 'anchor')
        if idl_generator not in _IDL_GENERATORS:
            raise ConfigError(
                f'Unknown idlGenerator: {idl_generator} (expected one of {", ".join(_IDL_GENERATORS)})'
            )

        program_id = data.get('programId')
        if program_id is not None and not isinstance(program_id, str):
            raise ConfigError('Config key programId must be a string')
        if idl_generator == 'anchor' and not program_id:
            raise ConfigError('programId is required when idlGenerator is anchor')

        type_aliases = data.get('typeAliases', {})
        if not isinstance(type_aliases, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in type_aliases.items()
        ):
            raise ConfigError('Config key typeAliases must map alias names to primitive types')

        return cls(
            program_name=required_str('programName'),
            idl_dir=resolve_dir(required_str('idlDir')),
            sdk_dir=resolve_dir(required_str('sdkDir')),
            idl_generator=idl_generator,
            program_id=program_id,
            type_aliases=dict(type_aliases),
        )


def load_config(path: str | Path) -> IdlMapConfig:
    """Load the config file at ``path``."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f'Config file does not exist: {path}')
    if not path.is_file():
        raise ConfigError(f'Config path is not a file: {path}')

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f'Invalid JSON in config file {path}: {e}') from e
    return IdlMapConfig.from_dict(data, base_dir=path.resolve().parent)
