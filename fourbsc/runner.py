from dataclasses import dataclass
from typing import Callable, List, Optional
from colorama import Fore, Style
from eth_account import Account
from rich.console import Console
from rich.table import Table
import asyncio, time

from .chain import ChainSubmitter, build_web3
from .config import AccountEntry, Config
from .cooldown import CooldownStore
from .logger import AccountLogger, format_epoch_ms, log
from .orchestrator import CycleOutcome, TaskOrchestrator
from .session import SessionClient

INTER_ACCOUNT_DELAY = 2

STATUS_SKIPPED = "Skipped (Cooldown)"
STATUS_INVALID_KEY = "Invalid Key"
STATUS_ERROR = "Error"
RETRY_NEXT_LOOP = "Retry Next Loop"
PLACEHOLDER = "-"

def now_ms() -> int:
    return int(time.time() * 1000)

def generate_address(private_key: str):
    try:
        return Account.from_key(private_key).address
    except Exception:
        return None

def format_seconds(seconds):
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{int(hours):02}:{int(minutes):02}:{int(seconds):02}"

@dataclass
class SummaryRow:
    label: str
    score: str
    status: str
    next_run_ms: Optional[int] = None
    next_run_note: str = PLACEHOLDER

    @property
    def next_run(self):
        if self.next_run_ms is not None:
            return format_epoch_ms(self.next_run_ms)
        return self.next_run_note

def default_orchestrator(config: Config, entry: AccountEntry, logger: AccountLogger) -> TaskOrchestrator:
    client = SessionClient(config, entry.private_key, entry.proxy)
    submitter = ChainSubmitter(build_web3(config.rpc_url, entry.proxy), entry.private_key, logger)
    return TaskOrchestrator(config, client, submitter, logger)

def render_summary(rows: List[SummaryRow], console: Optional[Console] = None):
    console = console or Console()
    table = Table(title="4BSC BOT SUMMARY", header_style="bold cyan", border_style="grey50")
    table.add_column("Account")
    table.add_column("Points", justify="right")
    table.add_column("Status")
    table.add_column("Next Run")
    for row in rows:
        table.add_row(row.label, row.score, row.status, row.next_run)
    console.print(table)
    return table

class RunLoop:
    """Processes every account in order once per cycle, gated by the cooldown store."""

    def __init__(self, config: Config, accounts: List[AccountEntry], store: CooldownStore,
                 orchestrator_factory: Callable = default_orchestrator,
                 clock: Callable[[], int] = now_ms, inter_account_delay=INTER_ACCOUNT_DELAY) -> None:
        self.config = config
        self.accounts = accounts
        self.store = store
        self.orchestrator_factory = orchestrator_factory
        self.clock = clock
        self.inter_account_delay = inter_account_delay

    async def process_account(self, entry: AccountEntry, logger: AccountLogger) -> CycleOutcome:
        try:
            orchestrator = self.orchestrator_factory(self.config, entry, logger)
            return await orchestrator.run()
        except Exception as e:
            logger.error("Status", "Unexpected Error", str(e))
            return CycleOutcome.failed(STATUS_ERROR)

    async def run_cycle(self) -> List[SummaryRow]:
        rows = []
        separator = "=" * 25

        for index, entry in enumerate(self.accounts, start=1):
            label = f"Acc {index}"
            address = generate_address(entry.private_key)
            logger = AccountLogger(index, address)

            log(
                f"{Fore.CYAN + Style.BRIGHT}{separator}[{Style.RESET_ALL}"
                f"{Fore.WHITE + Style.BRIGHT} {label} {Style.RESET_ALL}"
                f"{Fore.CYAN + Style.BRIGHT}]{separator}{Style.RESET_ALL}"
            )

            if not address:
                logger.error("Status", "Invalid Private Key or Library Version Not Supported")
                rows.append(SummaryRow(label, PLACEHOLDER, STATUS_INVALID_KEY))
                continue

            next_run = self.store.get(address)
            if self.clock() < next_run:
                logger.warning("Status", "Cooldown", f"Next Run at {format_epoch_ms(next_run)}")
                rows.append(SummaryRow(label, PLACEHOLDER, STATUS_SKIPPED, next_run_ms=next_run))
                continue

            outcome = await self.process_account(entry, logger)

            if outcome.success:
                next_time = self.clock() + self.config.loop_interval_ms
                self.store.set(address, next_time)
                logger.success("Status", outcome.status, f"Points {outcome.score or PLACEHOLDER}")
                rows.append(SummaryRow(label, outcome.score or PLACEHOLDER, outcome.status, next_run_ms=next_time))
            else:
                logger.error("Status", outcome.status)
                rows.append(SummaryRow(label, PLACEHOLDER, outcome.status, next_run_note=RETRY_NEXT_LOOP))

            await asyncio.sleep(self.inter_account_delay)

        return rows

    async def countdown(self, seconds):
        while seconds > 0:
            formatted_time = format_seconds(seconds)
            print(
                f"{Fore.CYAN+Style.BRIGHT}[ Wait for{Style.RESET_ALL}"
                f"{Fore.WHITE+Style.BRIGHT} {formatted_time} {Style.RESET_ALL}"
                f"{Fore.CYAN+Style.BRIGHT}... ]{Style.RESET_ALL}"
                f"{Fore.WHITE+Style.BRIGHT} | {Style.RESET_ALL}"
                f"{Fore.BLUE+Style.BRIGHT}All Accounts Have Been Processed.{Style.RESET_ALL}",
                end="\r"
            )
            await asyncio.sleep(1)
            seconds -= 1

    async def run_forever(self):
        while True:
            log(
                f"{Fore.GREEN + Style.BRIGHT}Starting Loop For {Style.RESET_ALL}"
                f"{Fore.WHITE + Style.BRIGHT}{len(self.accounts)}{Style.RESET_ALL}"
                f"{Fore.GREEN + Style.BRIGHT} Accounts{Style.RESET_ALL}"
            )

            rows = await self.run_cycle()
            render_summary(rows)

            await self.countdown(self.config.check_interval_ms // 1000)
