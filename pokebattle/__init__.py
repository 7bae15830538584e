"""Turn-based creature battle simulator.

Subpackages:
- battle (type chart, damage, turn order, session state machine, command service)
- data (creature catalog)
- system (settings & storage)
- ui (rich presentation)
"""
__version__ = "0.1.0"
