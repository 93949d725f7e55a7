"""
Finite state machine for the reservation workflow.

A reservation walks a fixed path:

    START -> RULE_RESOLVED -> AVAILABILITY_CONFIRMED -> QUOTE_PERSISTED
          -> JOB_CREATED -> MIRRORED

and may end in ABORTED at any point before the scheduled job exists. Once
JOB_CREATED is reached the capacity is consumed, so nothing afterwards can
abort the reservation.

Usage:
    sm = ReservationStateMachine()
    sm.transition(ReservationTrigger.RULE_RESOLVED)
    assert sm.current_state == ReservationState.RULE_RESOLVED
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ReservationState(str, Enum):
    START = "start"
    RULE_RESOLVED = "rule_resolved"
    AVAILABILITY_CONFIRMED = "availability_confirmed"
    QUOTE_PERSISTED = "quote_persisted"
    JOB_CREATED = "job_created"
    MIRRORED = "mirrored"
    ABORTED = "aborted"


class ReservationTrigger(str, Enum):
    RULE_RESOLVED = "rule_resolved"
    CAPACITY_CONFIRMED = "capacity_confirmed"
    QUOTE_SAVED = "quote_saved"
    QUOTE_DEGRADED = "quote_degraded"
    JOB_INSERTED = "job_inserted"
    FOLLOW_UPS_DONE = "follow_ups_done"
    ABORT = "abort"


@dataclass
class Transition:
    from_state: ReservationState
    to_state: ReservationState
    trigger: ReservationTrigger


@dataclass
class StateEntry:
    state: ReservationState
    entered_at: datetime
    trigger: Optional[ReservationTrigger] = None
    reason: Optional[str] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


ABORTABLE_STATES = (
    ReservationState.START,
    ReservationState.RULE_RESOLVED,
    ReservationState.AVAILABILITY_CONFIRMED,
    # Job insert can still lose the race after the quote is saved
    ReservationState.QUOTE_PERSISTED,
)


class ReservationStateMachine:
    """Tracks one reservation attempt through its states"""

    TRANSITIONS: list[Transition] = [
        Transition(ReservationState.START, ReservationState.RULE_RESOLVED,
                   ReservationTrigger.RULE_RESOLVED),
        Transition(ReservationState.RULE_RESOLVED, ReservationState.AVAILABILITY_CONFIRMED,
                   ReservationTrigger.CAPACITY_CONFIRMED),
        Transition(ReservationState.AVAILABILITY_CONFIRMED, ReservationState.QUOTE_PERSISTED,
                   ReservationTrigger.QUOTE_SAVED),
        Transition(ReservationState.AVAILABILITY_CONFIRMED, ReservationState.QUOTE_PERSISTED,
                   ReservationTrigger.QUOTE_DEGRADED),
        Transition(ReservationState.QUOTE_PERSISTED, ReservationState.JOB_CREATED,
                   ReservationTrigger.JOB_INSERTED),
        Transition(ReservationState.JOB_CREATED, ReservationState.MIRRORED,
                   ReservationTrigger.FOLLOW_UPS_DONE),
    ] + [
        Transition(state, ReservationState.ABORTED, ReservationTrigger.ABORT)
        for state in ABORTABLE_STATES
    ]

    def __init__(self, reservation_ref: str = "") -> None:
        self._ref = reservation_ref
        self._current_state = ReservationState.START
        self._history: list[StateEntry] = [
            StateEntry(state=ReservationState.START, entered_at=datetime.now(timezone.utc))
        ]
        self.abort_reason: Optional[str] = None

    @property
    def current_state(self) -> ReservationState:
        return self._current_state

    def transition(
        self, trigger: ReservationTrigger, reason: Optional[str] = None
    ) -> ReservationState:
        """
        Move to the next state.

        Raises:
            InvalidTransitionError: If ``trigger`` is not valid from the current state.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(
                    StateEntry(
                        state=t.to_state,
                        entered_at=datetime.now(timezone.utc),
                        trigger=trigger,
                        reason=reason,
                    )
                )
                if t.to_state == ReservationState.ABORTED:
                    self.abort_reason = reason
                    logger.info(
                        f"🛑 Reservation {self._ref} aborted in {old_state.value}: {reason}"
                    )
                else:
                    logger.info(
                        f"➡️ Reservation {self._ref}: {old_state.value} -> {t.to_state.value} "
                        f"({trigger.value})"
                    )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def abort(self, reason: str) -> ReservationState:
        return self.transition(ReservationTrigger.ABORT, reason=reason)

    def get_valid_triggers(self) -> list[ReservationTrigger]:
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Ordered list of state names visited"""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state in (ReservationState.MIRRORED, ReservationState.ABORTED)
