"""Map schema type expressions to native types and serde combinators.

The :class:`TypeMapper` walks a schema type expression and renders both the
native (TypeScript) type a value is declared as and the combinator
expression that encodes/decodes it. While doing so it accumulates the
packages and cross-file symbols the generated code needs to import and
whether the resulting encoding is variable-length ("fixable").
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Callable, Iterable, Mapping

from idlmap.errors import (
    ConflictingEnumDefinitionError,
    MissingNameError,
    UnknownTypeError,
    UnsupportedTypeError
)
from idlmap.schema import (
    DataEnum,
    Defined,
    FixedArray,
    IdlField,
    IdlInstructionArg,
    IdlType,
    Option,
    Primitive,
    ScalarEnum,
    Vector
)
from idlmap.serdes import (
    BEET_PACKAGE,
    DEFAULT_PRIMARY_TYPE_MAP,
    SupportedTypeDefinition,
    serde_package_export_name,
    serde_var_name_from_type_name
)

logger = logging.getLogger(__name__)

NO_NAME_PROVIDED = '<no name provided>'
UNIFORM_FIXED_SIZE_ARRAY = 'UniformFixedSizeArray'

ForceFixable = Callable[[IdlType], bool]


def force_fixable_never(ty: IdlType) -> bool:
    return False


def force_fixable_for(type_names: Iterable[str]) -> ForceFixable:
    """Force references to any of ``type_names`` to be treated as fixable."""
    names = frozenset(type_names)

    def force_fixable(ty: IdlType) -> bool:
        return isinstance(ty, Defined) and ty.name in names

    return force_fixable


@dataclass(slots=True)
class TypeMappedSerdeField:
    name: str
    type: str


@dataclass(slots=True)
class TypeMappedDataEnumVariant:
    name: str
    fields: list[TypeMappedSerdeField]


@dataclass(frozen=True)
class TypeMapperConfig:
    """Immutable inputs of a :class:`TypeMapper`.

    Attributes:
        account_types_paths: Account name to the path of the file declaring it.
        custom_types_paths: Custom type name to the path of the file declaring it.
        type_aliases: Alias name to the primitive key it stands for.
        force_fixable: Predicate forcing a type expression to be treated as fixable.
        primary_type_map: Primitive key to its table entry.
    """
    account_types_paths: Mapping[str, str] = field(default_factory=dict)
    custom_types_paths: Mapping[str, str] = field(default_factory=dict)
    type_aliases: Mapping[str, str] = field(default_factory=dict)
    force_fixable: ForceFixable = force_fixable_never
    primary_type_map: Mapping[str, SupportedTypeDefinition] = field(
        default_factory=lambda: DEFAULT_PRIMARY_TYPE_MAP
    )


@dataclass
class TypeMapperUsage:
    """Everything a :class:`TypeMapper` accumulated while mapping."""
    serde_packages_used: set[str] = field(default_factory=set)
    local_imports_by_path: dict[str, set[str]] = field(default_factory=dict)
    scalar_enums_used: dict[str, list[str]] = field(default_factory=dict)
    used_fixable_serde: bool = False

    def clear(self) -> None:
        self.serde_packages_used.clear()
        self.local_imports_by_path.clear()
        self.scalar_enums_used.clear()
        self.used_fixable_serde = False


def _without_ts_extension(path: str) -> str:
    return path[:-3] if path.endswith('.ts') else path


class TypeMapper:
    """Maps schema type expressions for a single generated file.

    A mapper is not meant to be shared between concurrent traversals. Use
    :meth:`clone` to get an independent mapper that shares the configuration
    but owns its own usages.
    """

    def __init__(self, config: TypeMapperConfig | None = None):
        self.config = config if config is not None else TypeMapperConfig()
        self.usage = TypeMapperUsage()

    @property
    def serde_packages_used(self) -> set[str]:
        return self.usage.serde_packages_used

    @property
    def local_imports_by_path(self) -> dict[str, set[str]]:
        return self.usage.local_imports_by_path

    @property
    def scalar_enums_used(self) -> dict[str, list[str]]:
        return self.usage.scalar_enums_used

    @property
    def used_fixable_serde(self) -> bool:
        return self.usage.used_fixable_serde

    def clear_usages(self) -> None:
        self.usage.clear()

    def clone(self) -> TypeMapper:
        return TypeMapper(self.config)

    def _update_used_fixable_serde(self, ty: SupportedTypeDefinition) -> None:
        self.usage.used_fixable_serde = self.usage.used_fixable_serde or ty.is_fixable

    def _update_scalar_enums_used(self, name: str, ty: ScalarEnum) -> None:
        variants = list(ty.variants)
        if (current := self.usage.scalar_enums_used.get(name)) is not None:
            if current != variants:
                raise ConflictingEnumDefinitionError(
                    f'Found two enum variant specs for {name}, {variants} and {current}'
                )
        else:
            self.usage.scalar_enums_used[name] = variants

    def _add_local_import(self, path: str, symbol: str) -> None:
        self.usage.local_imports_by_path.setdefault(path, set()).add(symbol)

    def _use_package(self, pack: str) -> str:
        """Record ``pack`` as used and return its export name."""
        export_name = serde_package_export_name(pack)
        self.usage.serde_packages_used.add(pack)
        return export_name

    def _lookup(self, key: str, context: str) -> SupportedTypeDefinition:
        self.assert_supported(key, context)
        return self.config.primary_type_map[key]

    def assert_supported(self, ty: IdlType | str, context: str = 'map') -> None:
        """Raise :class:`UnsupportedTypeError` unless ``ty`` has a table entry.

        Accepts either a primitive key or a :class:`Primitive`. Any other
        type expression is never directly supported by the table.
        """
        key = ty.key if isinstance(ty, Primitive) else ty
        if not isinstance(key, str) or key not in self.config.primary_type_map:
            raise UnsupportedTypeError(
                f'Types to {context} need to be supported by the type table, {key} is not'
            )

    def _defined_types_import(self, ty: Defined) -> str:
        path = self.config.account_types_paths.get(ty.name)
        if path is None:
            path = self.config.custom_types_paths.get(ty.name)
        if path is None:
            raise UnknownTypeError(
                f'Unknown type {ty.name} is neither found in types nor an Account'
            )
        return str(path)

    @staticmethod
    def _require_name(name: str, ty: IdlType) -> None:
        if not name or name == NO_NAME_PROVIDED:
            raise MissingNameError(f'Need to provide name for enum types, got {ty}')

    ################################
    # Map native type
    ################################

    def _map_primitive_type(self, key: str, name: str) -> str:
        mapped = self._lookup(key, 'map primitive type')
        native = mapped.native
        if native is None:
            logger.debug(f'No mapped type found for {name}: {key}, using any')
            native = 'any'
        if mapped.pack is not None:
            native = f'{self._use_package(mapped.pack)}.{native}'
        return native

    def _map_option_type(self, ty: Option, name: str) -> str:
        inner = self.map(ty.inner, name)
        return f'{self._use_package(BEET_PACKAGE)}.COption<{inner}>'

    def _map_vec_type(self, ty: Vector, name: str) -> str:
        return f'{self.map(ty.inner, name)}[]'

    def _map_array_type(self, ty: FixedArray, name: str) -> str:
        return f'{self.map(ty.inner, name)}[] /* size: {ty.size} */'

    def _map_defined_type(self, ty: Defined) -> str:
        self._add_local_import(self._defined_types_import(ty), ty.name)
        return ty.name

    def _map_enum_type(self, ty: ScalarEnum, name: str) -> str:
        self._require_name(name, ty)
        self._update_scalar_enums_used(name, ty)
        return name

    def map(self, ty: IdlType, name: str = NO_NAME_PROVIDED) -> str:
        """Map ``ty`` to the native type it is declared as."""
        if isinstance(ty, Primitive):
            return self._map_primitive_type(ty.key, name)
        if isinstance(ty, Option):
            return self._map_option_type(ty, name)
        if isinstance(ty, Vector):
            return self._map_vec_type(ty, name)
        if isinstance(ty, FixedArray):
            return self._map_array_type(ty, name)
        if isinstance(ty, Defined):
            alias = self.config.type_aliases.get(ty.name)
            if alias is None:
                return self._map_defined_type(ty)
            return self._map_primitive_type(alias, name)
        if isinstance(ty, ScalarEnum):
            return self._map_enum_type(ty, name)
        if isinstance(ty, DataEnum):
            raise UnsupportedTypeError(
                f'Data enum required for {name} has to be referenced as a defined type'
            )
        raise UnsupportedTypeError(f'Type {ty} required for {name} is not yet supported')

    ################################
    # Map serde
    ################################

    def _map_primitive_serde(self, key: str, name: str) -> str:
        mapped = self._lookup(key, f'account field {name}')
        export_name = self._use_package(mapped.source_pack)
        self._update_used_fixable_serde(mapped)

        # Strings come with their own combinator as they are variable-length
        if key == 'string':
            return f'{export_name}.{mapped.combinator}'
        return f'{export_name}.{key}'

    def _map_option_serde(self, ty: Option, name: str) -> str:
        inner = self.map_serde(ty.inner, name)
        export_name = self._use_package(BEET_PACKAGE)
        self.usage.used_fixable_serde = True
        return f'{export_name}.coption({inner})'

    def _map_vec_serde(self, ty: Vector, name: str) -> str:
        inner = self.map_serde(ty.inner, name)
        export_name = self._use_package(BEET_PACKAGE)
        self.usage.used_fixable_serde = True
        return f'{export_name}.array({inner})'

    def _map_array_serde(self, ty: FixedArray, name: str) -> str:
        inner = self.map_serde(ty.inner, name)
        mapped = self._lookup(UNIFORM_FIXED_SIZE_ARRAY, f'map fixed size array {name}')
        export_name = self._use_package(mapped.source_pack)
        self._update_used_fixable_serde(mapped)
        return f'{export_name}.{mapped.combinator}({inner}, {ty.size})'

    def _map_defined_serde(self, ty: Defined) -> str:
        var_name = serde_var_name_from_type_name(ty.name)
        self._add_local_import(self._defined_types_import(ty), var_name)
        return var_name

    def _map_enum_serde(self, ty: ScalarEnum, name: str) -> str:
        self._require_name(name, ty)
        export_name = self._use_package(BEET_PACKAGE)
        self._update_scalar_enums_used(name, ty)
        return f'{export_name}.fixedScalarEnum({name})'

    def map_serde(self, ty: IdlType, name: str = NO_NAME_PROVIDED) -> str:
        """Map ``ty`` to the combinator expression encoding/decoding it."""
        if self.config.force_fixable(ty):
            self.usage.used_fixable_serde = True

        if isinstance(ty, Primitive):
            return self._map_primitive_serde(ty.key, name)
        if isinstance(ty, Option):
            return self._map_option_serde(ty, name)
        if isinstance(ty, Vector):
            return self._map_vec_serde(ty, name)
        if isinstance(ty, FixedArray):
            return self._map_array_serde(ty, name)
        if isinstance(ty, ScalarEnum):
            return self._map_enum_serde(ty, name)
        if isinstance(ty, Defined):
            alias = self.config.type_aliases.get(ty.name)
            if alias is None:
                return self._map_defined_serde(ty)
            return self._map_primitive_serde(alias, name)
        if isinstance(ty, DataEnum):
            raise UnsupportedTypeError(
                f'Data enum required for {name} has to be referenced as a defined type'
            )
        raise UnsupportedTypeError(f'Type {ty} required for {name} is not yet supported')

    def map_serde_field(self, field: IdlField | IdlInstructionArg) -> TypeMappedSerdeField:
        return TypeMappedSerdeField(field.name, self.map_serde(field.type, field.name))

    def map_serde_fields(
        self,
        fields: Iterable[IdlField | IdlInstructionArg]
    ) -> list[TypeMappedSerdeField]:
        return [self.map_serde_field(f) for f in fields]

    def map_serde_data_enum_variants(
        self,
        ty: DataEnum,
        name: str = NO_NAME_PROVIDED
    ) -> list[TypeMappedDataEnumVariant]:
        """Map the fields of every variant of the data enum ``name``.

        Data enums are always variable-length, so this marks the usage as fixable.
        """
        self._require_name(name, ty)
        self._use_package(BEET_PACKAGE)
        self.usage.used_fixable_serde = True
        return [
            TypeMappedDataEnumVariant(variant.name, self.map_serde_fields(variant.fields))
            for variant in ty.variants
        ]

    ################################
    # Imports
    ################################

    def imports_used(
        self,
        file_dir: str | os.PathLike,
        force_packages: Iterable[str] | None = None
    ) -> list[str]:
        """Render the import statements for a file located in ``file_dir``."""
        return [
            *self._imports_for_serde_packages(force_packages),
            *self._imports_for_local_packages(Path(file_dir)),
        ]

    def _imports_for_serde_packages(self, force_packages: Iterable[str] | None) -> list[str]:
        packages = set(self.usage.serde_packages_used)
        if force_packages is not None:
            packages.update(force_packages)

        imports = []
        for pack in sorted(packages):
            export_name = serde_package_export_name(pack)
            imports.append(f"import * as {export_name} from '{pack}';")
        return imports

    def _imports_for_local_packages(self, file_dir: Path) -> list[str]:
        rendered_imports = []
        for origin_path, symbols in self.usage.local_imports_by_path.items():
            rel_path = PurePath(os.path.relpath(origin_path, file_dir)).as_posix()
            if not rel_path.startswith('.'):
                rel_path = f'./{rel_path}'
            import_path = _without_ts_extension(rel_path)
            rendered_imports.append(
                f"import {{ {', '.join(sorted(symbols))} }} from '{import_path}';"
            )
        return rendered_imports
