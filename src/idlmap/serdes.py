"""Serde packages and the primary type table.

The primary type table maps every supported primitive key to the native
(TypeScript) type it is declared as and to the combinator that knows how to
encode and decode it, together with the packages exporting both.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from idlmap.errors import UnknownSerdePackageError

BEET_PACKAGE = '@metaplex-foundation/beet'
BEET_SOLANA_PACKAGE = '@metaplex-foundation/beet-solana'
SOLANA_WEB3_PACKAGE = '@solana/web3.js'
SOLANA_SPL_TOKEN_PACKAGE = '@solana/spl-token'
# Placeholder package the templating layer substitutes with the program id module
PROGRAM_ID_PACKAGE = '<program-id>'

BEET_EXPORT_NAME = 'beet'
BEET_SOLANA_EXPORT_NAME = 'beetSolana'
SOLANA_WEB3_EXPORT_NAME = 'web3'
SOLANA_SPL_TOKEN_EXPORT_NAME = 'splToken'
PROGRAM_ID_EXPORT_NAME = '<program-id-export>'

_EXPORT_NAMES = {
    BEET_PACKAGE: BEET_EXPORT_NAME,
    BEET_SOLANA_PACKAGE: BEET_SOLANA_EXPORT_NAME,
    SOLANA_WEB3_PACKAGE: SOLANA_WEB3_EXPORT_NAME,
    SOLANA_SPL_TOKEN_PACKAGE: SOLANA_SPL_TOKEN_EXPORT_NAME,
    PROGRAM_ID_PACKAGE: PROGRAM_ID_EXPORT_NAME,
}
SERDE_PACKAGES = frozenset(_EXPORT_NAMES)


def is_known_serde_package(pack: str) -> bool:
    return pack in _EXPORT_NAMES


def assert_known_serde_package(pack: str) -> None:
    if not is_known_serde_package(pack):
        raise UnknownSerdePackageError(
            f'{pack} is an unknown and thus not yet supported de/serializer package'
        )


def serde_package_export_name(pack: str) -> str:
    """Return the alias a package is imported as in generated code."""
    assert_known_serde_package(pack)
    return _EXPORT_NAMES[pack]


@dataclass(frozen=True, slots=True)
class SupportedTypeDefinition:
    """A single entry of the primary type table.

    Attributes:
        combinator: Name of the combinator exported by ``source_pack``.
        is_fixable: True if the encoding of this type is variable-length.
        source_pack: Package exporting the combinator.
        native: Native type the value is declared as, if known.
        pack: Package the native type has to be qualified with, if any.
    """
    combinator: str
    is_fixable: bool
    source_pack: str
    native: str | None = None
    pack: str | None = None


def _beet(combinator: str, native: str | None, is_fixable: bool = False, pack: str | None = None):
    return SupportedTypeDefinition(combinator, is_fixable, BEET_PACKAGE, native, pack)


_NUMBERS_TYPE_MAP = {
    # <= 32-bit numbers are plain numbers
    'u8': _beet('u8', 'number'),
    'u16': _beet('u16', 'number'),
    'u32': _beet('u32', 'number'),
    'i8': _beet('i8', 'number'),
    'i16': _beet('i16', 'number'),
    'i32': _beet('i32', 'number'),
    'bool': _beet('bool', 'boolean'),
    # Everything larger is a big number
    'u64': _beet('u64', 'bignum', pack=BEET_PACKAGE),
    'u128': _beet('u128', 'bignum', pack=BEET_PACKAGE),
    'u256': _beet('u256', 'bignum', pack=BEET_PACKAGE),
    'u512': _beet('u512', 'bignum', pack=BEET_PACKAGE),
    'i64': _beet('i64', 'bignum', pack=BEET_PACKAGE),
    'i128': _beet('i128', 'bignum', pack=BEET_PACKAGE),
    'i256': _beet('i256', 'bignum', pack=BEET_PACKAGE),
    'i512': _beet('i512', 'bignum', pack=BEET_PACKAGE),
}

_STRING_TYPE_MAP = {
    'string': _beet('utf8String', 'string', is_fixable=True),
    'fixedSizeUtf8String': _beet('fixedSizeUtf8String', 'string'),
    'utf8String': _beet('utf8String', 'string', is_fixable=True),
}

_COLLECTIONS_TYPE_MAP = {
    'Array': _beet('array', 'Array', is_fixable=True),
    'FixedSizeArray': _beet('fixedSizeArray', 'Array'),
    'UniformFixedSizeArray': _beet('uniformFixedSizeArray', 'Array'),
    'Buffer': _beet('fixedSizeBuffer', 'Buffer'),
    'FixedSizeUint8Array': _beet('fixedSizeUint8Array', 'Uint8Array'),
    'Uint8Array': _beet('uint8Array', 'Uint8Array', is_fixable=True),
}

_COMPOSITES_TYPE_MAP = {
    'option': _beet('coption', 'COption<Inner>', is_fixable=True),
    'coption': _beet('coption', 'COption<Inner>', is_fixable=True),
}

_ENUMS_TYPE_MAP = {
    'fixedScalarEnum': _beet('fixedScalarEnum', '<TypeName>'),
    'dataEnum': _beet('dataEnum', 'DataEnum<Kind, Inner>', is_fixable=True),
}

_UNIT_TYPE_MAP = {
    'unit': _beet('unit', 'void'),
}

BEET_SUPPORTED_TYPE_MAP: Mapping[str, SupportedTypeDefinition] = MappingProxyType({
    **_NUMBERS_TYPE_MAP,
    **_STRING_TYPE_MAP,
    **_COLLECTIONS_TYPE_MAP,
    **_COMPOSITES_TYPE_MAP,
    **_ENUMS_TYPE_MAP,
    **_UNIT_TYPE_MAP,
})

BEET_SOLANA_SUPPORTED_TYPE_MAP: Mapping[str, SupportedTypeDefinition] = MappingProxyType({
    'publicKey': SupportedTypeDefinition(
        combinator='publicKey',
        is_fixable=False,
        source_pack=BEET_SOLANA_PACKAGE,
        native='PublicKey',
        pack=SOLANA_WEB3_PACKAGE,
    ),
})

DEFAULT_PRIMARY_TYPE_MAP: Mapping[str, SupportedTypeDefinition] = MappingProxyType({
    **BEET_SUPPORTED_TYPE_MAP,
    **BEET_SOLANA_SUPPORTED_TYPE_MAP,
})


def serde_var_name_from_type_name(type_name: str) -> str:
    """Derive the name of the serde variable generated for ``type_name``.

    ``Foo`` becomes ``fooBeet``.
    """
    return f'{type_name[:1].lower()}{type_name[1:]}Beet'
