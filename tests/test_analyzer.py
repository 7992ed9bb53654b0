"""Tests for mapping whole IDLs."""
from pathlib import Path

import pytest

from idlmap.analyzer import (
    INSTRUCTION_DISCRIMINATOR_FIELD,
    IdlAnalysis,
    analyze_idl,
    declaration_paths,
    find_fixable_types
)
from idlmap.errors import ConflictingEnumDefinitionError, UnknownTypeError
from idlmap.schema import Idl, IdlField, ScalarEnum
from idlmap.schema.idl import IdlDecoder
from idlmap.type_mapper import TypeMapperConfig

SDK_DIR = Path('/sdk')


@pytest.fixture
def idl(token_vault_idl: dict) -> Idl:
    return IdlDecoder().parse_idl(token_vault_idl)


@pytest.fixture
def analysis(idl: Idl) -> IdlAnalysis:
    return analyze_idl(idl, SDK_DIR, {'UnixTimestamp': 'i64'})


def _by_name(declarations):
    return {d.name: d for d in declarations}


def test_declaration_paths(idl: Idl):
    accounts, types = declaration_paths(idl, SDK_DIR)
    assert accounts == {
        'Vault': '/sdk/accounts/Vault.ts',
        'SafetyDepositBox': '/sdk/accounts/SafetyDepositBox.ts',
    }
    assert types['Key'] == '/sdk/types/Key.ts'
    assert len(types) == 6


def test_find_fixable_types(idl: Idl):
    accounts, types = declaration_paths(idl, SDK_DIR)
    config = TypeMapperConfig(
        account_types_paths=accounts,
        custom_types_paths=types,
        type_aliases={'UnixTimestamp': 'i64'},
    )
    # Wrapper is only fixable through the Metadata it references
    assert find_fixable_types(idl, config) == {'Action', 'Metadata', 'Wrapper', 'SafetyDepositBox'}


def test_fixed_size_account(analysis: IdlAnalysis):
    vault = _by_name(analysis.accounts)['Vault']

    assert vault.kind == 'account'
    assert vault.path == Path('/sdk/accounts/Vault.ts')
    assert vault.serde_var == 'vaultBeet'
    assert not vault.fixable
    assert [(f.name, f.type, f.serde) for f in vault.fields] == [
        ('key', 'Key', 'keyBeet'),
        ('tokenProgram', 'web3.PublicKey', 'beetSolana.publicKey'),
        ('allowFurtherShareCreation', 'boolean', 'beet.bool'),
        ('state', 'VaultState', 'vaultStateBeet'),
        ('padding', 'number[] /* size: 3 */', 'beet.uniformFixedSizeArray(beet.u8, 3)'),
    ]
    assert [f.padding for f in vault.fields] == [False, False, False, False, True]
    assert vault.imports == [
        "import * as beet from '@metaplex-foundation/beet';",
        "import * as beetSolana from '@metaplex-foundation/beet-solana';",
        "import * as web3 from '@solana/web3.js';",
        "import { Key, keyBeet } from '../types/Key';",
        "import { VaultState, vaultStateBeet } from '../types/VaultState';",
    ]


def test_fixable_account(analysis: IdlAnalysis):
    box = _by_name(analysis.accounts)['SafetyDepositBox']
    assert box.fixable
    assert box.fields[2].serde == 'beet.utf8String'


def test_scalar_enum_type(analysis: IdlAnalysis):
    key = _by_name(analysis.types)['Key']

    assert key.scalar_variants == ['Uninitialized', 'VaultV1']
    assert key.serde == 'beet.fixedScalarEnum(Key)'
    assert key.fields == []
    assert not key.fixable
    assert key.imports == ["import * as beet from '@metaplex-foundation/beet';"]


def test_data_enum_type(analysis: IdlAnalysis):
    action = _by_name(analysis.types)['Action']

    assert action.fixable
    assert action.scalar_variants is None
    assert [v.name for v in action.data_variants] == ['Deposit', 'Close']
    assert [(f.name, f.type) for f in action.data_variants[0].fields] == [('amount', 'beet.u64')]


def test_type_referencing_fixable_type(analysis: IdlAnalysis):
    wrapper = _by_name(analysis.types)['Wrapper']

    assert wrapper.fixable
    assert [(f.name, f.type, f.serde) for f in wrapper.fields] == [
        ('inner', 'Metadata', 'metadataBeet'),
        ('createdAt', 'beet.bignum', 'beet.i64'),
    ]
    assert wrapper.imports == [
        "import * as beet from '@metaplex-foundation/beet';",
        "import { Metadata, metadataBeet } from './Metadata';",
    ]


def test_instruction_with_discriminant(analysis: IdlAnalysis):
    init_vault = _by_name(analysis.instructions)['InitVault']

    assert init_vault.path == Path('/sdk/instructions/InitVault.ts')
    assert [(f.name, f.type, f.serde) for f in init_vault.fields] == [
        (INSTRUCTION_DISCRIMINATOR_FIELD, 'number', 'beet.u8'),
        ('initVaultArgs', 'InitVaultArgs', 'initVaultArgsBeet'),
    ]
    assert not init_vault.fixable
    assert "import { InitVaultArgs, initVaultArgsBeet } from '../types/InitVaultArgs';" in init_vault.imports
    assert "import * as web3 from '@solana/web3.js';" in init_vault.imports


def test_declarations_do_not_share_usages(analysis: IdlAnalysis):
    add_shares = _by_name(analysis.instructions)['AddShares']
    assert not add_shares.fixable
    assert add_shares.imports == [
        "import * as beet from '@metaplex-foundation/beet';",
        "import * as web3 from '@solana/web3.js';",
    ]


def test_declarations_order(analysis: IdlAnalysis):
    assert [d.name for d in analysis.declarations()] == [
        'Vault', 'SafetyDepositBox',
        'InitVaultArgs', 'Key', 'VaultState', 'Metadata', 'Wrapper', 'Action',
        'InitVault', 'AddShares',
    ]


def test_missing_alias_is_unknown_type(idl: Idl):
    with pytest.raises(UnknownTypeError, match='UnixTimestamp'):
        analyze_idl(idl, SDK_DIR)


def test_conflicting_inline_enums(idl: Idl):
    fields = idl.accounts[0].type.fields
    fields.append(IdlField('Color', ScalarEnum(['Red', 'Green'])))
    fields.append(IdlField('Color', ScalarEnum(['Red', 'Blue'])))
    with pytest.raises(ConflictingEnumDefinitionError):
        analyze_idl(idl, SDK_DIR, {'UnixTimestamp': 'i64'})
