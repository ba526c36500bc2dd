from datetime import datetime
from colorama import Fore, Style
import pytz

wib = pytz.timezone('Asia/Jakarta')

def now_display():
    return datetime.now().astimezone(wib).strftime('%x %X %Z')

def format_epoch_ms(epoch_ms: int):
    return datetime.fromtimestamp(epoch_ms / 1000).astimezone(wib).strftime('%x %X %Z')

def log(message):
    print(
        f"{Fore.CYAN + Style.BRIGHT}[ {now_display()} ]{Style.RESET_ALL}"
        f"{Fore.WHITE + Style.BRIGHT} | {Style.RESET_ALL}{message}",
        flush=True
    )

def mask_account(account):
    try:
        return account[:6] + '*' * 6 + account[-6:]
    except Exception:
        return None

class AccountLogger:
    """Console lines scoped to one account, laid out as `Field : value - detail`."""

    def __init__(self, index: int, address: str = None):
        self.index = index
        self.address = address

    @property
    def label(self):
        return f"Acc {self.index}"

    def _prefix(self):
        masked = mask_account(self.address) if self.address else None
        if masked:
            return f"{Fore.MAGENTA + Style.BRIGHT}[{self.label} {masked}]{Style.RESET_ALL} "
        return f"{Fore.MAGENTA + Style.BRIGHT}[{self.label}]{Style.RESET_ALL} "

    def _emit(self, field, color, value, detail=None):
        line = (
            f"{self._prefix()}"
            f"{Fore.CYAN + Style.BRIGHT}{field:<8}:{Style.RESET_ALL}"
            f"{color + Style.BRIGHT} {value} {Style.RESET_ALL}"
        )
        if detail:
            line += (
                f"{Fore.MAGENTA + Style.BRIGHT}-{Style.RESET_ALL}"
                f"{Fore.YELLOW + Style.BRIGHT} {detail} {Style.RESET_ALL}"
            )
        log(line)

    def info(self, field, value, detail=None):
        self._emit(field, Fore.WHITE, value, detail)

    def success(self, field, value, detail=None):
        self._emit(field, Fore.GREEN, value, detail)

    def warning(self, field, value, detail=None):
        self._emit(field, Fore.YELLOW, value, detail)

    def error(self, field, value, detail=None):
        self._emit(field, Fore.RED, value, detail)
