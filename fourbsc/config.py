from dataclasses import dataclass
from typing import List, Optional
import json, os

from .errors import ConfigError

ACCOUNTS_PATH = "accounts.json"
CONFIG_PATH = "config.json"
WALLET_DB_PATH = "wallet_db.json"

DEFAULT_CHECK_INTERVAL_MS = 60 * 60 * 1000

@dataclass(frozen=True)
class Endpoints:
    nonce: str
    auth: str
    verify_status: str
    create_request: str
    create_agent: str
    user_info: str

@dataclass(frozen=True)
class Config:
    base_url: str
    rpc_url: str
    agent_contract: str
    endpoints: Endpoints
    loop_interval_ms: int
    check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS

@dataclass(frozen=True)
class AccountEntry:
    private_key: str
    proxy: Optional[str] = None

def _read_json(path):
    if not os.path.exists(path):
        raise ConfigError(f"File '{path}' Not Found.")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"File '{path}' Unreadable: {e}") from e

def parse_config(raw: dict) -> Config:
    try:
        bsc = raw["bscConfig"]
        endpoints = raw["endpoints"]
        return Config(
            base_url=raw["baseUrl"].rstrip("/"),
            rpc_url=bsc["rpcUrl"],
            agent_contract=bsc["agentContract"],
            endpoints=Endpoints(
                nonce=endpoints["loginWallet"],
                auth=endpoints["authWallet"],
                verify_status=endpoints["verifyDailyTask"],
                create_request=endpoints["createRequest"],
                create_agent=endpoints["createRepositories"],
                user_info=endpoints["userInfo"],
            ),
            loop_interval_ms=int(raw["loopInterval"]),
            check_interval_ms=int(raw.get("checkInterval", DEFAULT_CHECK_INTERVAL_MS)),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"Invalid Config: missing or bad field {e}") from e

def parse_accounts(raw) -> List[AccountEntry]:
    if not isinstance(raw, list) or not raw:
        raise ConfigError("Accounts File Must Be A Non-Empty List.")

    accounts = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("privateKey"):
            raise ConfigError("Every Account Needs A privateKey.")
        accounts.append(AccountEntry(
            private_key=item["privateKey"].strip(),
            proxy=(item.get("proxy") or None),
        ))
    return accounts

def load_config(path=CONFIG_PATH) -> Config:
    return parse_config(_read_json(path))

def load_accounts(path=ACCOUNTS_PATH) -> List[AccountEntry]:
    return parse_accounts(_read_json(path))
