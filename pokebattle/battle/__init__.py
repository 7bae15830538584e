"""
Battle system package.
- chart.py (type chart, effectiveness, matchup)
- core.py (Combatant, damage, attack execution, turn order)
- session.py (party, battle sequence state machine)
- service.py (commands: attack/switch/reset, rewards, opponent replacement)
- factory.py (creature records -> Combatant)
"""
from .core import BattleCore, Combatant, AttackOutcome, Tuning
from .session import BattleSession, BattleResult, Party, SessionState
__all__ = ["BattleCore", "Combatant", "AttackOutcome", "Tuning",
           "BattleSession", "BattleResult", "Party", "SessionState"]
