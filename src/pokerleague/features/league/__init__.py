"""League feature: player roster and season history."""

from .roster import Roster
from .season import SeasonLedger, SeasonStanding

__all__ = ["Roster", "SeasonLedger", "SeasonStanding"]
