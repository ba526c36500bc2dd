from colorama import Fore, Style
import argparse, asyncio, os, sys

from fourbsc import __version__
from fourbsc.config import ACCOUNTS_PATH, CONFIG_PATH, load_accounts, load_config
from fourbsc.cooldown import CooldownStore
from fourbsc.errors import ConfigError
from fourbsc.logger import log, now_display
from fourbsc.runner import RunLoop

class FourBSC:
    def clear_terminal(self):
        os.system('cls' if os.name == 'nt' else 'clear')

    def welcome(self):
        print(
            f"""
        {Fore.GREEN + Style.BRIGHT}4BSC{Fore.BLUE + Style.BRIGHT} Auto BOT v{__version__}
            """
        )

    async def main(self, config_path=CONFIG_PATH, accounts_path=ACCOUNTS_PATH):
        try:
            config = load_config(config_path)
            accounts = load_accounts(accounts_path)
        except ConfigError as e:
            log(f"{Fore.RED + Style.BRIGHT}{e}{Style.RESET_ALL}")
            return 1

        self.clear_terminal()
        self.welcome()
        log(
            f"{Fore.GREEN + Style.BRIGHT}Account's Total: {Style.RESET_ALL}"
            f"{Fore.WHITE + Style.BRIGHT}{len(accounts)}{Style.RESET_ALL}"
        )

        await RunLoop(config, accounts, CooldownStore()).run_forever()
        return 0

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="bot.py",
        description="4BSC daily quest bot. Reads config.json and accounts.json from the working directory."
    )
    return parser.parse_args(argv)

if __name__ == "__main__":
    parse_args()
    try:
        bot = FourBSC()
        sys.exit(asyncio.run(bot.main()))
    except KeyboardInterrupt:
        print(
            f"{Fore.CYAN + Style.BRIGHT}[ {now_display()} ]{Style.RESET_ALL}"
            f"{Fore.WHITE + Style.BRIGHT} | {Style.RESET_ALL}"
            f"{Fore.RED + Style.BRIGHT}[ EXIT ] 4BSC - BOT{Style.RESET_ALL}                                       "
        )
