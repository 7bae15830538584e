#!/usr/bin/env python3
"""
PokeBattle - terminal edition

Thin wrapper around :mod:`pokebattle.cli`. The game logic lives in the
pokebattle package:
- battle: type chart, damage, turn order, session state machine, service
- data: creature catalog
- system: settings & save file
- ui: rich rendering

To run: python main.py [--seed N] [--save PATH] [--fast]
"""
import sys

from pokebattle.cli import run

if __name__ == "__main__":
    sys.exit(run())
