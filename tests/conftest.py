from unittest.mock import MagicMock

import pytest

from fourbsc.config import Config, Endpoints

PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OTHER_PRIVATE_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
CONTRACT = "0x" + "11" * 20

@pytest.fixture
def config():
    return Config(
        base_url="https://quest.test",
        rpc_url="https://rpc.test",
        agent_contract=CONTRACT,
        endpoints=Endpoints(
            nonce="/nonce",
            auth="/auth",
            verify_status="/verify",
            create_request="/create-request",
            create_agent="/create-agent",
            user_info="/user-info",
        ),
        loop_interval_ms=86_400_000,
        check_interval_ms=3_600_000,
    )

@pytest.fixture
def account_logger():
    return MagicMock()
