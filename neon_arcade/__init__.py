"""
Neon Arcade - Mini-game Session Engine

The engine behind a small arcade of three timed mini-games and the
player-progress model they feed:
- Reaction tap (Neon Tap Rush)
- Sequence repeat (Pulse Pattern Trail)
- Press-your-luck path (Risk Line Path)
- Currency accrual, best scores and streak levels

Rendering and input capture live in the presentation layer; this package
only owns game state, timing and progression.
"""

__version__ = "0.1.0"
