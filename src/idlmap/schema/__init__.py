from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from typing import Any, Iterator

IDL_FIELD_ATTR_PADDING = 'padding'


################################
# Schema type expressions
################################

@dataclass
class IdlType(ABC):
    ...


@dataclass
class Primitive(IdlType):
    key: str


@dataclass
class Defined(IdlType):
    name: str


@dataclass
class Option(IdlType):
    inner: IdlType


@dataclass
class Vector(IdlType):
    inner: IdlType


@dataclass
class FixedArray(IdlType):
    inner: IdlType
    size: int


@dataclass
class ScalarEnum(IdlType):
    variants: list[str]


@dataclass
class DataEnumVariant:
    name: str
    fields: list[IdlField]


@dataclass
class DataEnum(IdlType):
    variants: list[DataEnumVariant]


################################
# IDL records
################################

@dataclass
class IdlField:
    name: str
    type: IdlType
    attrs: list[str] = field(default_factory=list)


@dataclass
class IdlInstructionArg:
    name: str
    type: IdlType


@dataclass
class IdlInstructionAccount:
    name: str
    is_mut: bool
    is_signer: bool
    desc: str | None = None
    optional: bool = False


@dataclass
class IdlDiscriminant:
    type: IdlType
    value: int


@dataclass
class IdlInstruction:
    name: str
    accounts: list[IdlInstructionAccount]
    args: list[IdlInstructionArg]
    discriminant: IdlDiscriminant | None = None


@dataclass
class IdlStruct:
    fields: list[IdlField]


@dataclass
class IdlAccount:
    name: str
    type: IdlStruct


@dataclass
class IdlDefinedTypeDefinition:
    name: str
    type: IdlStruct | ScalarEnum | DataEnum


@dataclass
class IdlErrorCode:
    code: int
    name: str
    msg: str | None = None


@dataclass
class Idl:
    version: str
    name: str
    instructions: list[IdlInstruction]
    accounts: list[IdlAccount] = field(default_factory=list)
    types: list[IdlDefinedTypeDefinition] = field(default_factory=list)
    errors: list[IdlErrorCode] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


def is_shank_idl(idl: Idl) -> bool:
    return idl.metadata.get('origin') == 'shank'


def has_padding_attr(field: IdlField) -> bool:
    return IDL_FIELD_ATTR_PADDING in field.attrs


def walk_type(ty: IdlType) -> Iterator[IdlType]:
    """Yield ``ty`` and every type expression nested inside it, depth first."""
    yield ty
    if isinstance(ty, (Option, Vector, FixedArray)):
        yield from walk_type(ty.inner)
    elif isinstance(ty, DataEnum):
        for variant in ty.variants:
            for f in variant.fields:
                yield from walk_type(f.type)


def iter_idl_fields(idl: Idl) -> Iterator[tuple[str, IdlField | IdlInstructionArg]]:
    """Yield every field of ``idl`` together with the declaration it belongs to."""
    for account in idl.accounts:
        for f in account.type.fields:
            yield account.name, f
    for definition in idl.types:
        if isinstance(definition.type, IdlStruct):
            for f in definition.type.fields:
                yield definition.name, f
        elif isinstance(definition.type, DataEnum):
            for variant in definition.type.variants:
                for f in variant.fields:
                    yield f'{definition.name}.{variant.name}', f
    for instruction in idl.instructions:
        if instruction.discriminant is not None:
            yield instruction.name, IdlInstructionArg('discriminant', instruction.discriminant.type)
        for arg in instruction.args:
            yield instruction.name, arg
