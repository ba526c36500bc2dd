from typing import Optional, Sequence
from eth_abi.abi import encode
from eth_account import Account
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3
import asyncio

from .errors import ConfirmedRevert, ErrorKind, SimulatedRevert, TimeoutExceeded, classify_error
from .proxy import build_request_kwargs

SUBMIT_REQUEST_SIGNATURE = "submitRequest(uint256,string)"
SUBMIT_AGENT_SIGNATURE = "submitAgent(uint256,string,string)"

SUBMIT_REQUEST_SELECTOR = function_signature_to_4byte_selector(SUBMIT_REQUEST_SIGNATURE)
SUBMIT_AGENT_SELECTOR = function_signature_to_4byte_selector(SUBMIT_AGENT_SIGNATURE)

ESTIMATE_TIMEOUT = 10
BROADCAST_TIMEOUT = 30
RECEIPT_TIMEOUT = 60

GAS_TIMEOUT_FALLBACK = 300_000
GAS_ERROR_FALLBACK = 200_000
GAS_HEADROOM_PERCENT = 20

RETRY_DELAY = 5

def _discard(task: asyncio.Future):
    if not task.cancelled():
        task.exception()

async def race(awaitable, timeout: float, stage: str):
    """Await `awaitable` for at most `timeout` seconds.

    On timeout the operation is left running and its outcome is dropped;
    blocking RPC calls in worker threads cannot be interrupted anyway.
    """
    task = asyncio.ensure_future(awaitable)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        return task.result()

    task.add_done_callback(_discard)
    raise TimeoutExceeded(stage, timeout)

def build_web3(rpc_url: str, proxy: Optional[str] = None, timeout=60):
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs=build_request_kwargs(proxy, timeout)))

def build_call_data(selector: bytes, types: Sequence[str], values: Sequence) -> bytes:
    return bytes(selector) + encode(list(types), list(values))

class ChainSubmitter:
    def __init__(self, web3: Web3, private_key: str, logger=None, retries=3,
                 estimate_timeout=ESTIMATE_TIMEOUT, broadcast_timeout=BROADCAST_TIMEOUT,
                 receipt_timeout=RECEIPT_TIMEOUT, retry_delay=RETRY_DELAY) -> None:
        self.web3 = web3
        self.account = Account.from_key(private_key)
        self.address = self.account.address
        self.logger = logger
        self.retries = retries
        self.estimate_timeout = estimate_timeout
        self.broadcast_timeout = broadcast_timeout
        self.receipt_timeout = receipt_timeout
        self.retry_delay = retry_delay
        self.last_tx_hash = None
        self.last_block_number = None

    def _log(self, level, field, value, detail=None):
        if self.logger:
            getattr(self.logger, level)(field, value, detail)

    async def estimate_gas(self, contract: str, data: bytes) -> int:
        tx = {
            "from": self.address,
            "to": Web3.to_checksum_address(contract),
            "data": data
        }
        try:
            estimated = await race(asyncio.to_thread(self.web3.eth.estimate_gas, tx), self.estimate_timeout, "Gas Estimation")
        except TimeoutExceeded as e:
            self._log("warning", "Gas", f"Using Default {GAS_TIMEOUT_FALLBACK}", str(e))
            return GAS_TIMEOUT_FALLBACK
        except Exception as e:
            if classify_error(e) == ErrorKind.REVERT:
                raise SimulatedRevert(str(e)) from e
            self._log("warning", "Gas", f"Using Default {GAS_ERROR_FALLBACK}", str(e))
            return GAS_ERROR_FALLBACK

        return int(estimated) * (100 + GAS_HEADROOM_PERCENT) // 100

    def _sign_and_send(self, contract: str, data: bytes, gas: int) -> str:
        tx = {
            "to": Web3.to_checksum_address(contract),
            "data": data,
            "value": 0,
            "gas": gas,
            "gasPrice": self.web3.eth.gas_price,
            "nonce": self.web3.eth.get_transaction_count(self.address, "pending"),
            "chainId": self.web3.eth.chain_id,
        }
        signed = self.account.sign_transaction(tx)
        raw_tx = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(raw_tx)

    async def broadcast(self, contract: str, data: bytes, gas: int) -> str:
        return await race(asyncio.to_thread(self._sign_and_send, contract, data, gas), self.broadcast_timeout, "Broadcast")

    async def confirm(self, tx_hash: str):
        # web3's own poll deadline sits past ours so the race decides
        receipt = await race(
            asyncio.to_thread(self.web3.eth.wait_for_transaction_receipt, tx_hash, timeout=self.receipt_timeout * 2),
            self.receipt_timeout, "Confirmation"
        )
        if receipt.get("status") == 0:
            raise ConfirmedRevert(f"Transaction {tx_hash} Reverted")
        return receipt

    async def submit(self, contract: str, selector: bytes, types: Sequence[str], values: Sequence, retries: Optional[int] = None) -> bool:
        if retries is None:
            retries = self.retries
        data = build_call_data(selector, types, values)

        for attempt in range(1, retries + 1):
            try:
                gas = await self.estimate_gas(contract, data)
                tx_hash = await self.broadcast(contract, data, gas)
                self.last_tx_hash = tx_hash
                receipt = await self.confirm(tx_hash)
                self.last_block_number = receipt.get("blockNumber")

                self._log("success", "On-Chain", "Success", f"Block {self.last_block_number} Tx {tx_hash}")
                return True

            except (SimulatedRevert, ConfirmedRevert) as e:
                self._log("error", "On-Chain", "Reverted", str(e))
                return False

            except Exception as e:
                if classify_error(e) == ErrorKind.REVERT:
                    self._log("error", "On-Chain", "Reverted", str(e))
                    return False

                self._log("warning", "On-Chain", f"Attempt {attempt}/{retries} Failed", str(e))
                if attempt < retries:
                    await asyncio.sleep(self.retry_delay)

        self._log("error", "On-Chain", "Failed", f"Gave Up After {retries} Attempts")
        return False
