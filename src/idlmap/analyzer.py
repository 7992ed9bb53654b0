"""Map all accounts, types and instructions of an IDL."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, Mapping, Sequence

from idlmap.schema import (
    DataEnum,
    Idl,
    IdlField,
    IdlInstructionArg,
    IdlStruct,
    ScalarEnum,
    has_padding_attr
)
from idlmap.serdes import (
    BEET_PACKAGE,
    SOLANA_WEB3_PACKAGE,
    SupportedTypeDefinition,
    serde_var_name_from_type_name
)
from idlmap.type_mapper import (
    TypeMappedDataEnumVariant,
    TypeMapper,
    TypeMapperConfig,
    force_fixable_for
)

logger = logging.getLogger(__name__)

INSTRUCTION_DISCRIMINATOR_FIELD = 'instructionDiscriminator'

# Account and instruction templates always reference these
_TEMPLATE_PACKAGES = (BEET_PACKAGE, SOLANA_WEB3_PACKAGE)

DeclarationKind = Literal['account', 'type', 'instruction']


@dataclass(slots=True)
class MappedField:
    name: str
    type: str
    serde: str
    padding: bool = False


@dataclass(slots=True)
class MappedDeclaration:
    """The mapping of a single account, custom type or instruction."""
    name: str
    kind: DeclarationKind
    path: Path
    serde_var: str
    fields: list[MappedField] = field(default_factory=list)
    scalar_variants: list[str] | None = None
    data_variants: list[TypeMappedDataEnumVariant] | None = None
    serde: str | None = None
    fixable: bool = False
    imports: list[str] = field(default_factory=list)


@dataclass(slots=True)
class IdlAnalysis:
    accounts: list[MappedDeclaration]
    types: list[MappedDeclaration]
    instructions: list[MappedDeclaration]
    fixable_types: set[str]

    def declarations(self) -> list[MappedDeclaration]:
        return [*self.accounts, *self.types, *self.instructions]


def declaration_paths(idl: Idl, sdk_dir: Path) -> tuple[dict[str, str], dict[str, str]]:
    """Return the paths declaring each account and each custom type."""
    accounts = {a.name: str(sdk_dir / 'accounts' / f'{a.name}.ts') for a in idl.accounts}
    types = {t.name: str(sdk_dir / 'types' / f'{t.name}.ts') for t in idl.types}
    return accounts, types


def find_fixable_types(idl: Idl, config: TypeMapperConfig) -> set[str]:
    """Find the accounts and custom types whose encoding is variable-length.

    A struct referencing a fixable type is itself fixable, so this iterates
    until no further type is found.
    """
    fixable = {t.name for t in idl.types if isinstance(t.type, DataEnum)}
    structs = [(a.name, a.type) for a in idl.accounts]
    structs += [(t.name, t.type) for t in idl.types if isinstance(t.type, IdlStruct)]

    changed = True
    while changed:
        changed = False
        mapper = TypeMapper(replace(config, force_fixable=force_fixable_for(fixable)))
        for name, struct in structs:
            if name in fixable:
                continue
            mapper.clear_usages()
            mapper.map_serde_fields(struct.fields)
            if mapper.used_fixable_serde:
                fixable.add(name)
                changed = True
    return fixable


def _map_fields(mapper: TypeMapper, fields: Sequence[IdlField | IdlInstructionArg]) -> list[MappedField]:
    return [
        MappedField(
            name=f.name,
            type=mapper.map(f.type, f.name),
            serde=mapper.map_serde(f.type, f.name),
            padding=isinstance(f, IdlField) and has_padding_attr(f),
        )
        for f in fields
    ]


def _map_struct(
    mapper: TypeMapper,
    name: str,
    kind: DeclarationKind,
    path: Path,
    fields: Sequence[IdlField | IdlInstructionArg],
    force_packages: Sequence[str] = (),
) -> MappedDeclaration:
    mapped_fields = _map_fields(mapper, fields)
    return MappedDeclaration(
        name=name,
        kind=kind,
        path=path,
        serde_var=serde_var_name_from_type_name(name),
        fields=mapped_fields,
        fixable=mapper.used_fixable_serde,
        imports=mapper.imports_used(path.parent, force_packages),
    )


def analyze_idl(
    idl: Idl,
    sdk_dir: str | Path,
    type_aliases: Mapping[str, str] | None = None,
    primary_type_map: Mapping[str, SupportedTypeDefinition] | None = None,
) -> IdlAnalysis:
    """Map every account, custom type and instruction of ``idl``.

    Each declaration is mapped with its own clone of the mapper so that the
    imports and the fixable flag of one file never leak into another.
    """
    sdk_dir = Path(sdk_dir)
    account_paths, type_paths = declaration_paths(idl, sdk_dir)
    config = TypeMapperConfig(
        account_types_paths=account_paths,
        custom_types_paths=type_paths,
        type_aliases=dict(type_aliases or {}),
    )
    if primary_type_map is not None:
        config = replace(config, primary_type_map=primary_type_map)

    fixable_types = find_fixable_types(idl, config)
    if fixable_types:
        logger.info(f'Fixable types: {", ".join(sorted(fixable_types))}')
    base = TypeMapper(replace(config, force_fixable=force_fixable_for(fixable_types)))

    accounts = []
    for account in idl.accounts:
        logger.debug(f'Mapping account {account.name}')
        accounts.append(_map_struct(
            base.clone(),
            account.name,
            'account',
            Path(account_paths[account.name]),
            account.type.fields,
            _TEMPLATE_PACKAGES,
        ))

    types = []
    for definition in idl.types:
        logger.debug(f'Mapping type {definition.name}')
        path = Path(type_paths[definition.name])
        mapper = base.clone()
        ty = definition.type
        if isinstance(ty, IdlStruct):
            types.append(_map_struct(mapper, definition.name, 'type', path, ty.fields))
            continue

        declaration = MappedDeclaration(
            name=definition.name,
            kind='type',
            path=path,
            serde_var=serde_var_name_from_type_name(definition.name),
        )
        if isinstance(ty, ScalarEnum):
            declaration.serde = mapper.map_serde(ty, definition.name)
            declaration.scalar_variants = list(ty.variants)
        else:
            declaration.data_variants = mapper.map_serde_data_enum_variants(ty, definition.name)
        declaration.fixable = mapper.used_fixable_serde
        declaration.imports = mapper.imports_used(path.parent)
        types.append(declaration)

    instructions = []
    for instruction in idl.instructions:
        logger.debug(f'Mapping instruction {instruction.name}')
        mapper = base.clone()
        args: list[IdlField | IdlInstructionArg] = list(instruction.args)
        if instruction.discriminant is not None:
            args.insert(0, IdlInstructionArg(INSTRUCTION_DISCRIMINATOR_FIELD, instruction.discriminant.type))
        instructions.append(_map_struct(
            mapper,
            instruction.name,
            'instruction',
            sdk_dir / 'instructions' / f'{instruction.name}.ts',
            args,
            _TEMPLATE_PACKAGES,
        ))

    return IdlAnalysis(accounts, types, instructions, fixable_types)
