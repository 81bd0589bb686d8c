"""Pruning strategies that decide which committed heights are removed from disk."""

from __future__ import annotations

import enum
from dataclasses import dataclass

PRUNING_OPTION_DEFAULT = "default"
PRUNING_OPTION_EVERYTHING = "everything"
PRUNING_OPTION_NOTHING = "nothing"
PRUNING_OPTION_CUSTOM = "custom"

_PRUNE_EVERYTHING_KEEP_RECENT = 2
_PRUNE_EVERYTHING_INTERVAL = 10
_DEFAULT_KEEP_RECENT = 362880
_DEFAULT_INTERVAL = 10


class PruningStrategy(enum.IntEnum):
    """The kind of pruning applied when committing state."""

    # Keep the last 362880 heights, prune every 10th height.
    DEFAULT = 0
    # Keep only the last 2 heights, prune every 10th height.
    EVERYTHING = 1
    # Keep every height.
    NOTHING = 2
    # Keep-recent and interval are chosen by the user.
    CUSTOM = 3
    # Returned by stores that do not support pruning.
    UNDEFINED = 4


class PruningOptionsError(ValueError):
    """Raised when pruning options are not acceptable."""


class PruningIntervalZeroError(PruningOptionsError):
    """The pruning interval is zero."""

    def __init__(self) -> None:
        super().__init__(
            "'pruning-interval' must not be 0. If you want to disable pruning, "
            'select pruning = "nothing"'
        )


class PruningIntervalTooSmallError(PruningOptionsError):
    """The pruning interval is below the most aggressive allowed value."""

    def __init__(self) -> None:
        super().__init__(
            f"'pruning-interval' must not be less than {_PRUNE_EVERYTHING_INTERVAL}. "
            'For the most aggressive pruning, select pruning = "everything"'
        )


class PruningKeepRecentTooSmallError(PruningOptionsError):
    """The number of recent heights kept is below the allowed minimum."""

    def __init__(self) -> None:
        super().__init__(
            f"'pruning-keep-recent' must not be less than {_PRUNE_EVERYTHING_KEEP_RECENT}. "
            'For the most aggressive pruning, select pruning = "everything"'
        )


@dataclass(frozen=True)
class PruningOptions:
    """How many recent heights to keep and how often pruning runs."""

    keep_recent: int = 0
    interval: int = 0
    strategy: PruningStrategy = PruningStrategy.CUSTOM

    def validate(self) -> None:
        """Raise a PruningOptionsError if these options are not usable."""
        if self.strategy == PruningStrategy.NOTHING:
            return
        if self.interval == 0:
            raise PruningIntervalZeroError()
        if self.interval < _PRUNE_EVERYTHING_INTERVAL:
            raise PruningIntervalTooSmallError()
        if self.keep_recent < _PRUNE_EVERYTHING_KEEP_RECENT:
            raise PruningKeepRecentTooSmallError()


def new_pruning_options(strategy: PruningStrategy) -> PruningOptions:
    """Return the options belonging to a predefined strategy.

    Any strategy without predefined values yields empty custom options.
    """
    if strategy == PruningStrategy.DEFAULT:
        return PruningOptions(_DEFAULT_KEEP_RECENT, _DEFAULT_INTERVAL, PruningStrategy.DEFAULT)
    if strategy == PruningStrategy.EVERYTHING:
        return PruningOptions(
            _PRUNE_EVERYTHING_KEEP_RECENT,
            _PRUNE_EVERYTHING_INTERVAL,
            PruningStrategy.EVERYTHING,
        )
    if strategy == PruningStrategy.NOTHING:
        return PruningOptions(0, 0, PruningStrategy.NOTHING)
    return PruningOptions(strategy=PruningStrategy.CUSTOM)


def new_custom_pruning_options(keep_recent: int, interval: int) -> PruningOptions:
    """Return custom options with the given keep-recent count and interval."""
    return PruningOptions(keep_recent, interval, PruningStrategy.CUSTOM)


def pruning_options_from_string(strategy: str) -> PruningOptions:
    """Return the options named by a strategy string; unknown names mean default."""
    named = {
        PRUNING_OPTION_EVERYTHING: PruningStrategy.EVERYTHING,
        PRUNING_OPTION_NOTHING: PruningStrategy.NOTHING,
        PRUNING_OPTION_DEFAULT: PruningStrategy.DEFAULT,
    }
    return new_pruning_options(named.get(strategy, PruningStrategy.DEFAULT))