"""Decode IDL JSON documents into schema type expressions and records."""
import json
import logging
from pathlib import Path
from typing import Any

from idlmap.schema import (
    DataEnum,
    DataEnumVariant,
    Defined,
    FixedArray,
    Idl,
    IdlAccount,
    IdlDefinedTypeDefinition,
    IdlDiscriminant,
    IdlErrorCode,
    IdlField,
    IdlInstruction,
    IdlInstructionAccount,
    IdlInstructionArg,
    IdlStruct,
    IdlType,
    Option,
    Primitive,
    ScalarEnum,
    Vector
)

logger = logging.getLogger(__name__)


class IdlParseError(Exception):
    """Exception raised for errors in the IDL parsing."""
    def __init__(self, message: str):
        super().__init__(message)


def _require(data: dict[str, Any], key: str, context: str) -> Any:
    if not isinstance(data, dict):
        raise IdlParseError(f'Expected an object for {context}, got {type(data).__name__}')
    if key not in data:
        raise IdlParseError(f'Missing "{key}" in {context}')
    return data[key]


def _list(data: dict[str, Any], key: str, context: str) -> list[Any]:
    # A missing key and an explicit null both mean an empty section
    value = data.get(key) or []
    if not isinstance(value, list):
        raise IdlParseError(f'"{key}" in {context} must be a list, got {type(value).__name__}')
    return value


def _int(value: Any, context: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise IdlParseError(f'{context} must be an integer, got {value!r}')
    return value


def _metadata(data: dict[str, Any]) -> dict[str, Any]:
    metadata = data.get('metadata') or {}
    if not isinstance(metadata, dict):
        raise IdlParseError(f'IDL metadata must be an object, got {type(metadata).__name__}')
    return dict(metadata)


class IdlDecoder:
    def parse_type(self, raw: Any, context: str = 'type') -> IdlType:
        if isinstance(raw, str):
            return Primitive(raw)
        if not isinstance(raw, dict):
            raise IdlParseError(f'Invalid type for {context}: {raw!r}')

        if 'defined' in raw:
            name = raw['defined']
            if not isinstance(name, str) or not name:
                raise IdlParseError(f'Invalid defined type name for {context}: {name!r}')
            return Defined(name)

        # Both Rust Option and the C-compatible COption are encoded the same
        for key in ('option', 'coption'):
            if key in raw:
                return Option(self.parse_type(raw[key], context))

        if 'vec' in raw:
            return Vector(self.parse_type(raw['vec'], context))

        if 'array' in raw:
            array = raw['array']
            if not isinstance(array, list) or len(array) != 2:
                raise IdlParseError(f'Array type for {context} must be [type, size]')
            inner, size = array
            if not isinstance(size, int) or isinstance(size, bool) or size < 0:
                raise IdlParseError(f'Array size for {context} must be a non-negative integer')
            return FixedArray(self.parse_type(inner, context), size)

        if raw.get('kind') == 'enum':
            return self.parse_enum(raw, context)

        raise IdlParseError(f'Type {raw!r} required for {context} is not supported')

    def parse_enum(self, raw: dict[str, Any], context: str) -> ScalarEnum | DataEnum:
        variants = _require(raw, 'variants', context)
        if not isinstance(variants, list):
            raise IdlParseError(f'Enum variants for {context} must be a list')

        # Data enums are recognized by the first variant carrying fields
        if variants and isinstance(variants[0], dict) and 'fields' in variants[0]:
            return DataEnum([
                DataEnumVariant(
                    name=_require(v, 'name', f'{context} variant'),
                    fields=[
                        self.parse_field(f, f'{context}.{v["name"]}')
                        for f in _list(v, 'fields', f'{context}.{v["name"]}')
                    ],
                )
                for v in variants
            ])
        return ScalarEnum([_require(v, 'name', f'{context} variant') for v in variants])

    def parse_field(self, raw: dict[str, Any], context: str) -> IdlField:
        name = _require(raw, 'name', context)
        field_context = f'{context}.{name}'
        return IdlField(
            name=name,
            type=self.parse_type(_require(raw, 'type', field_context), field_context),
            attrs=list(_list(raw, 'attrs', field_context)),
        )

    def _parse_struct(self, raw: dict[str, Any], context: str) -> IdlStruct:
        if not isinstance(raw, dict):
            raise IdlParseError(f'Expected an object for {context}, got {type(raw).__name__}')
        kind = raw.get('kind', 'struct')
        if kind != 'struct':
            raise IdlParseError(f'Expected struct for {context}, got {kind}')
        return IdlStruct([self.parse_field(f, context) for f in _list(raw, 'fields', context)])

    def _parse_instruction(self, raw: dict[str, Any]) -> IdlInstruction:
        name = _require(raw, 'name', 'instruction')
        accounts = [
            IdlInstructionAccount(
                name=_require(a, 'name', f'instruction {name} account'),
                is_mut=bool(a.get('isMut', False)),
                is_signer=bool(a.get('isSigner', False)),
                desc=a.get('desc'),
                optional=bool(a.get('optional', False)),
            )
            for a in _list(raw, 'accounts', f'instruction {name}')
        ]
        args = [
            IdlInstructionArg(
                name=_require(a, 'name', f'instruction {name} arg'),
                type=self.parse_type(_require(a, 'type', f'{name} arg'), f'{name}.{a["name"]}'),
            )
            for a in _list(raw, 'args', f'instruction {name}')
        ]

        discriminant = None
        if isinstance(raw.get('discriminant'), dict):
            raw_discriminant = raw['discriminant']
            discriminant = IdlDiscriminant(
                type=self.parse_type(_require(raw_discriminant, 'type', f'{name} discriminant')),
                value=_int(
                    _require(raw_discriminant, 'value', f'{name} discriminant'),
                    f'{name} discriminant value',
                ),
            )
        return IdlInstruction(name, accounts, args, discriminant)

    def _parse_defined_type(self, raw: dict[str, Any]) -> IdlDefinedTypeDefinition:
        name = _require(raw, 'name', 'type definition')
        ty = _require(raw, 'type', f'type {name}')
        if isinstance(ty, dict) and ty.get('kind') == 'enum':
            return IdlDefinedTypeDefinition(name, self.parse_enum(ty, name))
        return IdlDefinedTypeDefinition(name, self._parse_struct(ty, name))

    def parse_idl(self, data: dict[str, Any]) -> Idl:
        """Decode an IDL JSON object."""
        idl = Idl(
            version=_require(data, 'version', 'idl'),
            name=_require(data, 'name', 'idl'),
            instructions=[self._parse_instruction(i) for i in _list(data, 'instructions', 'idl')],
            accounts=[
                IdlAccount(
                    name=_require(a, 'name', 'account'),
                    type=self._parse_struct(_require(a, 'type', 'account'), a['name']),
                )
                for a in _list(data, 'accounts', 'idl')
            ],
            types=[self._parse_defined_type(t) for t in _list(data, 'types', 'idl')],
            errors=[
                IdlErrorCode(
                    code=_int(_require(e, 'code', 'error'), 'error code'),
                    name=_require(e, 'name', 'error'),
                    msg=e.get('msg'),
                )
                for e in _list(data, 'errors', 'idl')
            ],
            metadata=_metadata(data),
        )
        logger.debug(
            f'Parsed IDL {idl.name}: {len(idl.instructions)} instructions, '
            f'{len(idl.accounts)} accounts, {len(idl.types)} types'
        )
        return idl


def load_idl(path: str | Path) -> Idl:
    """Read and decode the IDL stored at ``path``."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise IdlParseError(f'Invalid IDL JSON in {path}: {e}') from e
    return IdlDecoder().parse_idl(data)
