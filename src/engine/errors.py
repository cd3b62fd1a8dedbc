"""
Exception hierarchy for the blackjack engine and the simulation runner.

Everything raised on purpose derives from BlackjackGameError so callers can
catch engine failures without swallowing programming errors.

    BlackjackGameError
    ├── InvalidBet
    │   └── BetBelowMinimum
    ├── OutOfFunds          (normal end of a bankroll, caught by Game.run)
    ├── NoValidOption
    ├── ShoeExhausted
    ├── ChannelSendFailure
    ├── ReportWriteFailure
    └── SimulationRunError
"""

from __future__ import annotations


class BlackjackGameError(Exception):
    """Base class for every error raised by the simulator."""


class InvalidBet(BlackjackGameError):
    """A bet is negative or exceeds the player's balance."""


class BetBelowMinimum(InvalidBet):
    """A non-zero bet is below the table minimum."""


class OutOfFunds(BlackjackGameError):
    """The betting policy returned 0: the bankroll cannot cover the minimum."""


class NoValidOption(BlackjackGameError):
    """A decision policy could not produce a legal action, or an illegal one was played."""


class ShoeExhausted(BlackjackGameError):
    """A card was drawn past the end of the shoe."""


class ChannelSendFailure(BlackjackGameError):
    """A worker tried to send on a channel whose receiver has gone away."""


class ReportWriteFailure(BlackjackGameError):
    """The final report could not be written to its destination."""


class SimulationRunError(BlackjackGameError):
    """A strategy worker failed; carries the strategy label and the cause."""

    def __init__(self, label: str, cause: BaseException) -> None:
        super().__init__(f"strategy {label!r} failed: {cause}")
        self.label = label
        self.cause = cause
