"""
Local start/stop time tracking.

The tracker is a two-state machine. It is either idle, or tracking one
active session. Stopping a session moves it to a bounded, most-recent-first
history and converts the elapsed time into billable hours and minutes
under the 15 minute minimum rule. State lives in a ``KeyValueStore`` under
one key as ``{"activeSession": ..., "sessionHistory": [...]}``.
"""

import datetime as dt
import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional

from pydantic import Field, ValidationError

from timebill.calculators.time_utils import (
    calculate_hours,
    calculate_minutes,
    format_elapsed,
)
from timebill.models.base import BaseDataModel
from timebill.models.project import Project
from timebill.services.errors import StateError
from timebill.tracking.storage import TIME_TRACKING_KEY, KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class SessionAlreadyActiveError(StateError):
    """A session is already being tracked."""

    default_message = "A time tracking session is already active. Stop it first."


class TrackingSession(BaseDataModel):
    """
    A tracked work session.

    ``start_time`` is a Unix timestamp in milliseconds, which is how the
    session is stored.
    """

    id: str
    project_id: str
    project_name: str
    client_name: str = ""
    workspace_id: str
    start_time: int = Field(..., ge=0)
    description: Optional[str] = None

    @property
    def started_at(self) -> dt.datetime:
        return dt.datetime.fromtimestamp(self.start_time / 1000)


@dataclass
class TrackingState:
    """Persisted tracker state."""

    active_session: Optional[TrackingSession] = None
    session_history: List[TrackingSession] = field(default_factory=list)

    @property
    def is_tracking(self) -> bool:
        return self.active_session is not None


@dataclass
class StoppedSession:
    """Result of stopping a session.

    Attributes:
        session: The session that was stopped
        elapsed: Wall-clock time since the session started
        hours: Billable hours (at least 0.25)
        minutes: Billable minutes (at least 15)
    """

    session: TrackingSession
    elapsed: dt.timedelta
    hours: Decimal
    minutes: int


class TimeTracker:
    """
    Start/stop timer with persisted state and history.

    Example:
        >>> tracker = TimeTracker(MemoryStore())
        >>> tracker.start(project, workspace_id="ws-1")
        >>> stopped = tracker.stop()
        >>> stopped.hours
        Decimal('0.25')
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], float] = time.time,
        history_limit: int = HISTORY_LIMIT,
    ):
        """
        Args:
            store: Where the tracker state is kept
            clock: Returns the current Unix time in seconds
            history_limit: Maximum number of stopped sessions kept
        """
        self.store = store
        self._clock = clock
        self.history_limit = history_limit

    def _now_millis(self) -> int:
        return int(self._clock() * 1000)

    def load_state(self) -> TrackingState:
        """
        Read the tracker state.

        A missing, malformed or invalid stored value loads as idle with an
        empty history.
        """
        raw = self.store.get(TIME_TRACKING_KEY)
        if raw is None:
            return TrackingState()
        if not isinstance(raw, dict):
            logger.error(f"Ignoring malformed time tracking state: {type(raw).__name__}")
            return TrackingState()

        try:
            active = raw.get("activeSession")
            history = raw.get("sessionHistory") or []
            return TrackingState(
                active_session=TrackingSession.model_validate(active) if active else None,
                session_history=[TrackingSession.model_validate(s) for s in history],
            )
        except (ValidationError, TypeError, AttributeError) as e:
            logger.error(f"Error loading time tracking state: {e}")
            return TrackingState()

    def _save_state(self, state: TrackingState) -> None:
        self.store.set(
            TIME_TRACKING_KEY,
            {
                "activeSession": (
                    state.active_session.model_dump(by_alias=True)
                    if state.active_session
                    else None
                ),
                "sessionHistory": [
                    s.model_dump(by_alias=True) for s in state.session_history
                ],
            },
        )

    @property
    def active_session(self) -> Optional[TrackingSession]:
        return self.load_state().active_session

    def history(self) -> List[TrackingSession]:
        return self.load_state().session_history

    def start(
        self, project: Project, workspace_id: str, description: Optional[str] = None
    ) -> TrackingSession:
        """
        Start tracking time on a project.

        Raises:
            SessionAlreadyActiveError: A session is already active; it is
                left untouched
        """
        state = self.load_state()
        if state.active_session is not None:
            raise SessionAlreadyActiveError()

        now = self._now_millis()
        session = TrackingSession(
            id=f"session-{now}",
            project_id=project.id or "",
            project_name=project.name,
            client_name=project.client or "",
            workspace_id=workspace_id,
            start_time=now,
            description=description,
        )
        state.active_session = session
        self._save_state(state)
        logger.info(f"Started tracking {project.name} ({session.id})")
        return session

    def stop(self) -> Optional[StoppedSession]:
        """
        Stop the active session.

        Returns:
            The stopped session with billable hours and minutes, or None
            when idle
        """
        state = self.load_state()
        session = state.active_session
        if session is None:
            return None

        elapsed = self._elapsed_since(session)

        state.session_history.insert(0, session)
        del state.session_history[self.history_limit:]
        state.active_session = None
        self._save_state(state)

        stopped = StoppedSession(
            session=session,
            elapsed=elapsed,
            hours=calculate_hours(elapsed),
            minutes=calculate_minutes(elapsed),
        )
        logger.info(
            f"Stopped tracking {session.project_name} after {format_elapsed(elapsed)} "
            f"(billing {stopped.hours}h)"
        )
        return stopped

    def resume(self, session_id: str) -> bool:
        """
        Make a session from the history active again.

        The session keeps its original start time.

        Returns:
            False when no history session has the id

        Raises:
            SessionAlreadyActiveError: A session is already active
        """
        state = self.load_state()
        if state.active_session is not None:
            raise SessionAlreadyActiveError()

        for session in state.session_history:
            if session.id == session_id:
                state.session_history = [
                    s for s in state.session_history if s.id != session_id
                ]
                state.active_session = session
                self._save_state(state)
                logger.info(f"Resumed session {session_id}")
                return True

        return False

    def clear_history(self) -> None:
        state = self.load_state()
        state.session_history = []
        self._save_state(state)

    def _elapsed_since(self, session: TrackingSession) -> dt.timedelta:
        millis = max(self._now_millis() - session.start_time, 0)
        return dt.timedelta(milliseconds=millis)

    def elapsed(self) -> Optional[dt.timedelta]:
        """Elapsed time of the active session, or None when idle."""
        session = self.active_session
        if session is None:
            return None
        return self._elapsed_since(session)

    def format_elapsed(self) -> Optional[str]:
        elapsed = self.elapsed()
        return format_elapsed(elapsed) if elapsed is not None else None
