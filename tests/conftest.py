import json
from pathlib import Path

import pytest


def _token_vault_idl() -> dict:
    return {
        "version": "0.1.0",
        "name": "token_vault",
        "instructions": [
            {
                "name": "InitVault",
                "accounts": [
                    {"name": "vault", "isMut": True, "isSigner": False, "desc": "Uninitialized vault account"},
                    {"name": "authority", "isMut": False, "isSigner": True},
                ],
                "args": [{"name": "initVaultArgs", "type": {"defined": "InitVaultArgs"}}],
                "discriminant": {"type": "u8", "value": 0},
            },
            {
                "name": "AddShares",
                "accounts": [],
                "args": [{"name": "amount", "type": "u64"}],
                "discriminant": {"type": "u8", "value": 1},
            },
        ],
        "accounts": [
            {
                "name": "Vault",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "key", "type": {"defined": "Key"}},
                        {"name": "tokenProgram", "type": "publicKey"},
                        {"name": "allowFurtherShareCreation", "type": "bool"},
                        {"name": "state", "type": {"defined": "VaultState"}},
                        {"name": "padding", "type": {"array": ["u8", 3]}, "attrs": ["padding"]},
                    ],
                },
            },
            {
                "name": "SafetyDepositBox",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "vault", "type": "publicKey"},
                        {"name": "order", "type": "u8"},
                        {"name": "label", "type": "string"},
                    ],
                },
            },
        ],
        "types": [
            {
                "name": "InitVaultArgs",
                "type": {"kind": "struct", "fields": [{"name": "allowFurtherShareCreation", "type": "bool"}]},
            },
            {
                "name": "Key",
                "type": {"kind": "enum", "variants": [{"name": "Uninitialized"}, {"name": "VaultV1"}]},
            },
            {
                "name": "VaultState",
                "type": {"kind": "enum", "variants": [{"name": "Inactive"}, {"name": "Active"}]},
            },
            {
                "name": "Metadata",
                "type": {"kind": "struct", "fields": [{"name": "tags", "type": {"vec": "string"}}]},
            },
            {
                "name": "Wrapper",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "inner", "type": {"defined": "Metadata"}},
                        {"name": "createdAt", "type": {"defined": "UnixTimestamp"}},
                    ],
                },
            },
            {
                "name": "Action",
                "type": {
                    "kind": "enum",
                    "variants": [
                        {"name": "Deposit", "fields": [{"name": "amount", "type": "u64"}]},
                        {"name": "Close", "fields": []},
                    ],
                },
            },
        ],
        "errors": [{"code": 0, "name": "Uninitialized", "msg": "Vault is not initialized"}],
        "metadata": {"origin": "shank", "address": "vau1zxA2LbssAUEF7Gpw91zMM1LvXrvpzJtmZ58rPsn"},
    }


@pytest.fixture
def token_vault_idl() -> dict:
    return _token_vault_idl()


@pytest.fixture
def project(tmp_path: Path, token_vault_idl: dict) -> Path:
    """Write a config and the token vault IDL into ``tmp_path`` and return the config path."""
    idl_dir = tmp_path / "idl"
    idl_dir.mkdir()
    (idl_dir / "token_vault.json").write_text(json.dumps(token_vault_idl))

    config_path = tmp_path / "idlmap.json"
    config_path.write_text(json.dumps({
        "programName": "token_vault",
        "idlDir": "idl",
        "sdkDir": "sdk",
        "idlGenerator": "shank",
        "typeAliases": {"UnixTimestamp": "i64"},
    }))
    return config_path
