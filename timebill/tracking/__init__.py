"""Local time tracking and guided timesheet entry."""

from timebill.tracking.session_manager import (
    SessionAlreadyActiveError,
    StoppedSession,
    TimeTracker,
    TrackingSession,
    TrackingState,
)
from timebill.tracking.storage import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    get_current_workspace_id,
    set_current_workspace_id,
)
from timebill.tracking.timesheet_chat import (
    ChatReply,
    ChatState,
    ChatStep,
    TimesheetDraft,
    advance,
    start_chat,
)

__all__ = [
    "ChatReply",
    "ChatState",
    "ChatStep",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SessionAlreadyActiveError",
    "StoppedSession",
    "TimeTracker",
    "TimesheetDraft",
    "TrackingSession",
    "TrackingState",
    "advance",
    "get_current_workspace_id",
    "set_current_workspace_id",
    "start_chat",
]
