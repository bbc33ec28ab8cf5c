"""
Guided, conversational timesheet entry.

The conversation is a sequence of steps (date, project, hours,
description, confirmation). ``advance`` is a pure transition function: it
takes the current state and the user's reply and returns the next state
together with the bot's reply. Nothing is saved here; a finished
conversation yields a ``TimesheetDraft`` for the caller to submit.
"""

import datetime as dt
import re
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import List, Optional, Tuple

from timebill.models.project import Project

DATE_SUGGESTIONS = ("Yes, today", "Yesterday", "Different date")
HOURS_SUGGESTIONS = ("1h", "2h", "4h", "6h", "8h")
DESCRIPTION_SUGGESTIONS = (
    "Bug fixes",
    "Feature development",
    "Code review",
    "Testing",
    "Documentation",
)
CONFIRM_SUGGESTIONS = ("Yes, save it", "No, start over")

_ISO_DATE = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")
_US_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_DASH_DATE = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")

MAX_HOURS = Decimal("24")


class ChatStep(Enum):
    GREETING = "greeting"
    DATE = "date"
    PROJECT = "project"
    HOURS = "hours"
    DESCRIPTION = "description"
    CONFIRM = "confirm"
    DONE = "done"


@dataclass(frozen=True)
class TimesheetDraft:
    """Entry collected by the conversation, ready to be submitted."""

    date: Optional[dt.date] = None
    project_id: Optional[str] = None
    hours: Optional[Decimal] = None
    description: Optional[str] = None
    billable: bool = True


@dataclass(frozen=True)
class ChatState:
    step: ChatStep
    draft: TimesheetDraft = field(default_factory=TimesheetDraft)
    projects: Tuple[Project, ...] = ()

    def project(self) -> Optional[Project]:
        for project in self.projects:
            if project.id == self.draft.project_id:
                return project
        return None


@dataclass(frozen=True)
class ChatReply:
    """What the bot says back.

    Attributes:
        messages: Lines of the reply, in order
        suggestions: Quick answers offered to the user
        entry: The completed draft, set only when the entry was confirmed
    """

    messages: Tuple[str, ...]
    suggestions: Tuple[str, ...] = ()
    entry: Optional[TimesheetDraft] = None

    @property
    def message(self) -> str:
        return "\n".join(self.messages)


def _ask_date(today: dt.date) -> str:
    return (
        f"Let's start with today's date ({today.isoformat()}). Is this correct, "
        f"or did you work on a different date?"
    )


def start_chat(projects: List[Project], today: dt.date) -> Tuple[ChatState, ChatReply]:
    """Initial state and greeting."""
    state = ChatState(step=ChatStep.GREETING, projects=tuple(projects))
    reply = ChatReply(
        messages=(
            f"Hi! I'm here to help you create a timesheet entry. {_ask_date(today)}",
        ),
        suggestions=DATE_SUGGESTIONS,
    )
    return state, reply


def parse_date(text: str, today: dt.date) -> Optional[dt.date]:
    """
    Interpret a date answer.

    Accepts "yesterday", "yes"/"today", ``YYYY-MM-DD``, ``M/D/YYYY`` and
    ``D-M-YYYY``. Returns None when the text is not a date, and raises
    ValueError when it looks like a date but is not a valid one.

    Example:
        >>> parse_date("Yesterday", dt.date(2024, 3, 1))
        datetime.date(2024, 2, 29)
        >>> parse_date("3/15/2024", dt.date(2024, 3, 1))
        datetime.date(2024, 3, 15)
    """
    lowered = text.lower()
    # "yesterday" contains "yes", so it is checked first
    if "yesterday" in lowered:
        return today - dt.timedelta(days=1)
    if "yes" in lowered or "today" in lowered:
        return today

    match = _ISO_DATE.search(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return dt.date(year, month, day)

    match = _US_DATE.search(text)
    if match:
        month, day, year = (int(g) for g in match.groups())
        return dt.date(year, month, day)

    match = _DASH_DATE.search(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        return dt.date(year, month, day)

    return None


def find_project(text: str, projects: Tuple[Project, ...]) -> Optional[Project]:
    """First project whose name or client name contains ``text`` (case-insensitive)."""
    needle = text.strip().lower()
    if not needle:
        return None
    for project in projects:
        if needle in project.name.lower() or needle in (project.client or "").lower():
            return project
    return None


def parse_hours(text: str) -> Optional[Decimal]:
    """First number in the text when it lies in (0, 24], else None."""
    match = _NUMBER.search(text)
    if not match:
        return None
    try:
        hours = Decimal(match.group())
    except InvalidOperation:
        return None
    if hours <= 0 or hours > MAX_HOURS:
        return None
    return hours


def _project_names(state: ChatState) -> Tuple[str, ...]:
    return tuple(p.name for p in state.projects)


def advance(
    state: ChatState, user_input: str, today: dt.date
) -> Tuple[ChatState, ChatReply]:
    """
    Apply one user reply to the conversation.

    Invalid answers leave the step unchanged and re-prompt.

    Args:
        state: Current conversation state
        user_input: The user's reply
        today: Date used for "today" and "yesterday"

    Returns:
        The next state and the bot's reply
    """
    text = user_input.strip()
    step = state.step

    if step in (ChatStep.GREETING, ChatStep.DATE):
        return _on_date(state, text, today)
    if step == ChatStep.PROJECT:
        return _on_project(state, text)
    if step == ChatStep.HOURS:
        return _on_hours(state, text)
    if step == ChatStep.DESCRIPTION:
        return _on_description(state, text)
    if step == ChatStep.CONFIRM:
        return _on_confirm(state, text, today)

    return state, ChatReply(messages=("This entry is already saved.",))


def _on_date(state: ChatState, text: str, today: dt.date) -> Tuple[ChatState, ChatReply]:
    try:
        day = parse_date(text, today)
    except ValueError:
        return state, ChatReply(
            messages=(
                "I couldn't understand that date format. Please try again with a "
                "format like '2025-01-15' or use the suggestions.",
            ),
            suggestions=DATE_SUGGESTIONS,
        )

    if day is None:
        return state, ChatReply(
            messages=(
                "Please provide a valid date. You can use formats like "
                "'2025-01-15' or pick one of the suggestions.",
            ),
            suggestions=DATE_SUGGESTIONS,
        )

    next_state = replace(
        state, step=ChatStep.PROJECT, draft=replace(state.draft, date=day)
    )
    return next_state, ChatReply(
        messages=(
            f"Date set to {day.isoformat()}. Now, which project did you work on?",
        ),
        suggestions=_project_names(state),
    )


def _on_project(state: ChatState, text: str) -> Tuple[ChatState, ChatReply]:
    project = find_project(text, state.projects)
    if project is None:
        return state, ChatReply(
            messages=(
                "I couldn't find that project. Please type the project name or "
                "pick one of the suggestions.",
            ),
            suggestions=_project_names(state),
        )

    next_state = replace(
        state,
        step=ChatStep.HOURS,
        draft=replace(state.draft, project_id=project.id),
    )
    return next_state, ChatReply(
        messages=(f"Selected {project.name}. How many hours did you work?",),
        suggestions=HOURS_SUGGESTIONS,
    )


def _on_hours(state: ChatState, text: str) -> Tuple[ChatState, ChatReply]:
    if not _NUMBER.search(text):
        return state, ChatReply(
            messages=("Please enter a valid number of hours (e.g., 4, 2.5, 1.5).",),
            suggestions=HOURS_SUGGESTIONS,
        )

    hours = parse_hours(text)
    if hours is None:
        return state, ChatReply(
            messages=("Please enter a number of hours greater than 0 and at most 24.",),
            suggestions=HOURS_SUGGESTIONS,
        )

    next_state = replace(
        state, step=ChatStep.DESCRIPTION, draft=replace(state.draft, hours=hours)
    )
    return next_state, ChatReply(
        messages=(
            f"Got it! {hours} hours logged. Now, what did you work on?",
        ),
        suggestions=DESCRIPTION_SUGGESTIONS,
    )


def _on_description(state: ChatState, text: str) -> Tuple[ChatState, ChatReply]:
    if not text:
        return state, ChatReply(
            messages=("Please provide a description of what you worked on.",),
            suggestions=DESCRIPTION_SUGGESTIONS,
        )

    project = state.project()
    is_fixed = project is not None and project.is_fixed
    draft = replace(state.draft, description=text, billable=not is_fixed)
    project_label = (
        f"{project.name} ({project.client})" if project and project.client
        else (project.name if project else draft.project_id)
    )

    next_state = replace(state, step=ChatStep.CONFIRM, draft=draft)
    return next_state, ChatReply(
        messages=(
            "Let me confirm your timesheet entry:",
            f"Date: {draft.date.isoformat() if draft.date else ''}",
            f"Project: {project_label}",
            f"Hours: {draft.hours}",
            f"Description: {text}",
            f"Billable: {'No (Fixed Monthly Project)' if is_fixed else 'Yes'}",
            "Does this look correct?",
        ),
        suggestions=CONFIRM_SUGGESTIONS,
    )


def _on_confirm(
    state: ChatState, text: str, today: dt.date
) -> Tuple[ChatState, ChatReply]:
    lowered = text.lower()
    if "yes" in lowered or "save" in lowered:
        project = state.project()
        entry = replace(state.draft, billable=not (project is not None and project.is_fixed))
        return replace(state, step=ChatStep.DONE, draft=entry), ChatReply(
            messages=("Great! Creating your timesheet entry...",),
            entry=entry,
        )

    if "no" in lowered or "start over" in lowered:
        next_state = replace(state, step=ChatStep.DATE, draft=TimesheetDraft())
        return next_state, ChatReply(
            messages=("No problem! Let's start over.", _ask_date(today)),
            suggestions=DATE_SUGGESTIONS,
        )

    return state, ChatReply(
        messages=("Please type 'yes' to save or 'no' to start over.",),
        suggestions=CONFIRM_SUGGESTIONS,
    )
