"""
Session Module - Coordinates mini-game sessions.

A session represents one run of a mini-game:
- Created when the player starts a game
- Relays input to the game's state machine
- Records its single result into progress
- Ends on the game's terminal state, or is aborted
"""

from .dispatcher import SessionDispatcher, SessionHandle, SessionSummary, HandleStatus

__all__ = [
    "SessionDispatcher",
    "SessionHandle",
    "SessionSummary",
    "HandleStatus",
]
