from colorama import Fore, Style
import json, os, tempfile

from .config import WALLET_DB_PATH
from .logger import log

class CooldownStore:
    """Account address -> next eligible run time (epoch millis), written through to disk."""

    def __init__(self, path=WALLET_DB_PATH):
        self.path = path
        self.data = {}
        self.load()

    def load(self):
        try:
            if os.path.exists(self.path):
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self.data = {
                    str(key).lower(): int(value)
                    for key, value in data.items()
                } if isinstance(data, dict) else {}
        except (OSError, ValueError, TypeError, AttributeError):
            self.data = {}

    def save(self):
        # the old file stays in place until os.replace
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            with tempfile.NamedTemporaryFile('w', encoding='utf-8', dir=directory, suffix='.tmp', delete=False) as f:
                tmp_path = f.name
                try:
                    json.dump(self.data, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                except BaseException:
                    f.close()
                    os.unlink(tmp_path)
                    raise
            os.replace(tmp_path, self.path)
        except OSError as e:
            log(f"{Fore.RED + Style.BRIGHT}Failed To Save {self.path}: {e}{Style.RESET_ALL}")

    def get(self, address: str) -> int:
        return self.data.get(address.lower(), 0)

    def set(self, address: str, next_time: int):
        self.data[address.lower()] = int(next_time)
        self.save()
