from __future__ import annotations
import argparse
import random
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.prompt import Prompt

from pokebattle.battle.core import BattleCore
from pokebattle.battle.service import BattleService
from pokebattle.core.errors import PokeBattleError, ReplacementError
from pokebattle.core.logging import logger
from pokebattle.data.catalog import LocalCatalog
from pokebattle.system.save import COSTS, Storage
from pokebattle.system.settings import Settings
from pokebattle.ui.render import BattleView

HELP = (
    "[bold]attack[/]  fight until someone faints\n"
    "[bold]switch N[/]  send out team member N\n"
    "[bold]team[/]  show your team\n"
    f"[bold]revive N[/]  revive a fainted member ({COSTS['REVIVE']} coins)\n"
    f"[bold]heal[/]  heal the whole team ({COSTS['HEAL_ALL']} coins)\n"
    f"[bold]replace N[/]  swap member N for a new creature ({COSTS['NEW_POKEMON']} coins)\n"
    "[bold]retry[/]  look for a new challenger again\n"
    "[bold]reset[/]  start over with a new team\n"
    "[bold]quit[/]"
)


def _slot(args: List[str]) -> int:
    if not args or not args[0].isdigit():
        raise PokeBattleError("Which slot? (1-3)")
    return int(args[0]) - 1


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="pokebattle", description="Turn-based creature battles in the terminal.")
    p.add_argument("--seed", type=int, default=None, help="seed the battle rng for reproducible fights")
    p.add_argument("--save", type=Path, default=None, help="save file location")
    p.add_argument("--fast", action="store_true", help="no pauses between battle messages")
    return p.parse_args(argv)


class Game:
    def __init__(self, service: BattleService, view: BattleView):
        self.service = service
        self.view = view

    def attack(self):
        self.view.begin_sequence()
        try:
            report = self.service.attack(on_outcome=self.view.show_outcome)
        except ReplacementError as e:
            if e.report is not None:
                self.view.end_sequence()
                self.view.messages(e.report.messages, "bold")
            self.view.error(f"{e} (type 'retry')")
            return
        self.view.end_sequence()
        self.view.messages(report.messages, "bold")
        for err in report.errors:
            self.view.error(err)

    def dispatch(self, line: str) -> bool:
        """Run one command line. False means quit."""
        parts = line.strip().lower().split()
        if not parts:
            return True
        cmd, args = parts[0], parts[1:]
        svc = self.service
        if cmd in {"quit", "exit", "q"}:
            return False
        if cmd in {"attack", "a"}:
            self.attack()
        elif cmd in {"switch", "s"}:
            self.view.message(svc.switch(_slot(args)))
        elif cmd in {"team", "t"}:
            self.view.show_team(svc.require_session())
        elif cmd == "revive":
            self.view.message(svc.revive(_slot(args)))
        elif cmd == "heal":
            self.view.message(svc.heal_all())
        elif cmd == "replace":
            self.view.message(svc.replace_member(_slot(args)))
        elif cmd == "retry":
            new = svc.retry_replacement()
            self.view.message(f"A wild {new.name} appeared! Ready to battle?")
        elif cmd == "reset":
            confirm = Prompt.ask("Start again? This resets your team and progress", choices=["y", "n"], default="n",
                                 console=self.view.console)
            if confirm == "y":
                self.view.messages(svc.reset())
        elif cmd in {"help", "h", "?"}:
            self.view.console.print(HELP)
        else:
            self.view.error(f"Unknown command '{cmd}'. Type 'help'.")
        return True

    def loop(self):
        while True:
            session = self.service.session
            if session is not None:
                self.view.show_arena(session, coins=self.service.storage.coins())
            try:
                line = Prompt.ask("[bold]>[/]", console=self.view.console)
            except (EOFError, KeyboardInterrupt):
                break
            try:
                if not self.dispatch(line):
                    break
            except PokeBattleError as e:
                logger.debug("CommandRejected", command=line, error=str(e))
                self.view.error(str(e))


def run(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    settings = Settings.load()
    settings.apply()
    seed = args.seed if args.seed is not None else settings.data.seed
    rng = random.Random(seed)
    console = Console()
    view = BattleView(console, pace=0.0 if args.fast else settings.data.pace)
    service = BattleService(LocalCatalog(rng=rng), Storage(args.save), BattleCore(rng),
                            autosave=settings.data.autosave)
    view.message("Assembling your team...", "dim")
    try:
        view.messages(service.load(), "bold")
    except PokeBattleError as e:
        view.error(f"Failed to load creatures: {e}")
        return 1
    view.console.print("Type [bold]help[/] for commands.")
    Game(service, view).loop()
    return 0
