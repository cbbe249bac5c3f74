"""
Build and watch-session models

BuildResult is the outcome of one batch build. WatchPhase and the
transition table describe the lifecycle of a watch session; any move not
listed in WATCH_TRANSITIONS is illegal.
"""

from enum import Enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from .errors import WatchTransitionError


@dataclass(frozen=True)
class BuildResult:
    """
    Aggregate result of rendering a batch of documents

    Attributes:
        succeeded: Documents rendered and written
        failed: Documents that raised while reading, rendering or writing
        documents: Every discovered document, each counted exactly once
    """
    succeeded: int = 0
    failed: int = 0
    documents: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no document failed"""
        return self.failed == 0


class WatchPhase(Enum):
    """Lifecycle phases of a watch session"""
    IDLE = "idle"
    DEBOUNCE_PENDING = "debounce-pending"
    REBUILDING = "rebuilding"
    STOPPED = "stopped"


class WatchTrigger(Enum):
    """Inputs that move a watch session between phases"""
    CHANGE = "change"                        # qualifying file notification
    TIMER = "timer"                          # debounce timer elapsed
    RUN_ONCE = "run-once"                    # immediate build in once mode
    REBUILD_FINISHED = "rebuild-finished"    # no timer armed meanwhile
    REBUILD_FINISHED_ARMED = "rebuild-finished-armed"  # timer armed during build
    STOP = "stop"


WATCH_TRANSITIONS: Dict[Tuple[WatchPhase, WatchTrigger], WatchPhase] = {
    (WatchPhase.IDLE, WatchTrigger.CHANGE): WatchPhase.DEBOUNCE_PENDING,
    (WatchPhase.IDLE, WatchTrigger.RUN_ONCE): WatchPhase.REBUILDING,
    (WatchPhase.DEBOUNCE_PENDING, WatchTrigger.CHANGE): WatchPhase.DEBOUNCE_PENDING,
    (WatchPhase.DEBOUNCE_PENDING, WatchTrigger.TIMER): WatchPhase.REBUILDING,
    # Changes during a build are recorded; a timer firing mid-build is dropped
    (WatchPhase.REBUILDING, WatchTrigger.CHANGE): WatchPhase.REBUILDING,
    (WatchPhase.REBUILDING, WatchTrigger.TIMER): WatchPhase.REBUILDING,
    (WatchPhase.REBUILDING, WatchTrigger.REBUILD_FINISHED): WatchPhase.IDLE,
    (WatchPhase.REBUILDING, WatchTrigger.REBUILD_FINISHED_ARMED): WatchPhase.DEBOUNCE_PENDING,
    (WatchPhase.IDLE, WatchTrigger.STOP): WatchPhase.STOPPED,
    (WatchPhase.DEBOUNCE_PENDING, WatchTrigger.STOP): WatchPhase.STOPPED,
    (WatchPhase.REBUILDING, WatchTrigger.STOP): WatchPhase.STOPPED,
    (WatchPhase.STOPPED, WatchTrigger.STOP): WatchPhase.STOPPED,
}


def phase_next(phase: WatchPhase, trigger: WatchTrigger) -> WatchPhase:
    """
    Look up the phase a trigger leads to

    Raises:
        WatchTransitionError: If the move is not in WATCH_TRANSITIONS
    """
    try:
        return WATCH_TRANSITIONS[(phase, trigger)]
    except KeyError:
        raise WatchTransitionError(
            f"illegal watch transition: {phase.value} --{trigger.value}-->"
        ) from None
