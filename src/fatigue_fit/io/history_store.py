"""
JSONL-based history storage for training sessions.

Handles reading, writing, and managing the session log and the small
state file that sits next to it.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.models import SectionState, SorenessMap, UserProfile, UserSettings, WorkoutSession
from ..core.taxonomy import MuscleSection
from .serializers import (
    ValidationError,
    dict_to_section_states,
    dict_to_session,
    dict_to_soreness,
    dict_to_user_profile,
    dict_to_user_settings,
    section_states_to_dict,
    session_to_dict,
    session_to_json_line,
    soreness_to_dict,
    user_profile_to_dict,
    user_settings_to_dict,
    validate_optional_timestamp,
)


class HistoryStore:
    """
    Manages training data stored in a directory.

    - sessions.jsonl: one finished session per line (the session log)
    - state.json: profile, settings, cached section states, the
      in-progress session, today's soreness and the last weekly reset

    Section states in state.json are a cache; they can always be rebuilt
    from the session log.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding sessions.jsonl and state.json
        """
        self.data_dir = Path(data_dir)
        self.sessions_path = self.data_dir / "sessions.jsonl"
        self.state_path = self.data_dir / "state.json"

    def exists(self) -> bool:
        """Check if the session log exists."""
        return self.sessions_path.exists()

    def init(self) -> None:
        """
        Create the data directory and an empty session log if missing.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if not self.sessions_path.exists():
            self.sessions_path.touch()
        if not self.state_path.exists():
            self._write_state({})

    # -- state.json helpers ------------------------------------------------

    def _read_state(self) -> dict[str, Any]:
        if not self.state_path.exists():
            return {}
        try:
            with open(self.state_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.state_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Error parsing {self.state_path}: expected a JSON object")
        return data

    def _write_state(self, data: dict[str, Any]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.state_path, "w") as f:
            json.dump(data, f, indent=2)

    def _update_state(self, key: str, value: Any) -> None:
        data = self._read_state()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._write_state(data)

    # -- sessions ----------------------------------------------------------

    def load_sessions(self) -> list[WorkoutSession]:
        """
        Load all sessions from the session log.

        Returns:
            List of WorkoutSession, sorted by start time

        Raises:
            FileNotFoundError: If the session log doesn't exist
            ValidationError: If a line cannot be parsed
        """
        if not self.sessions_path.exists():
            raise FileNotFoundError(
                f"Session log not found: {self.sessions_path}. Run 'init' first."
            )

        sessions: list[WorkoutSession] = []

        with open(self.sessions_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    sessions.append(dict_to_session(json.loads(line)))
                except (json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.sessions_path}: {e}"
                    ) from e

        sessions.sort(key=lambda s: (s.started_at, s.session_id))

        return sessions

    def save_sessions(self, sessions: list[WorkoutSession]) -> None:
        """
        Rewrite the session log.

        Args:
            sessions: Sessions to write (written oldest first)
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        ordered = sorted(sessions, key=lambda s: (s.started_at, s.session_id))
        with open(self.sessions_path, "w") as f:
            for session in ordered:
                f.write(session_to_json_line(session) + "\n")

    def append_session(self, session: WorkoutSession) -> None:
        """
        Add a session to the log.

        A session with the same id replaces the stored one.

        Raises:
            FileNotFoundError: If the session log doesn't exist
        """
        sessions = [s for s in self.load_sessions() if s.session_id != session.session_id]
        sessions.append(session)
        self.save_sessions(sessions)

    def get_latest_session(self) -> WorkoutSession | None:
        """
        Get the most recently started session.

        Returns:
            Latest WorkoutSession or None if there is no history
        """
        try:
            sessions = self.load_sessions()
        except FileNotFoundError:
            return None
        return sessions[-1] if sessions else None

    def delete_session(self, session_id: str) -> None:
        """
        Delete a session from the log.

        Raises:
            KeyError: If no session has the given id
        """
        sessions = self.load_sessions()
        remaining = [s for s in sessions if s.session_id != session_id]
        if len(remaining) == len(sessions):
            raise KeyError(f"Session not found: {session_id}")
        self.save_sessions(remaining)

    def clear_history(self) -> None:
        """
        Clear the session log (dangerous - use with caution).
        """
        if self.sessions_path.exists():
            self.sessions_path.write_text("")

    # -- current session ---------------------------------------------------

    def load_current_session(self) -> WorkoutSession | None:
        """Load the in-progress session, or None."""
        data = self._read_state().get("current_session")
        if data is None:
            return None
        return dict_to_session(data)

    def save_current_session(self, session: WorkoutSession) -> None:
        """Store the in-progress session."""
        self._update_state("current_session", session_to_dict(session))

    def clear_current_session(self) -> None:
        """Forget the in-progress session."""
        self._update_state("current_session", None)

    # -- section states ----------------------------------------------------

    def load_section_states(self) -> dict[MuscleSection, SectionState] | None:
        """
        Load cached section states.

        Returns:
            {section: SectionState}, or None if nothing has been cached
        """
        data = self._read_state().get("section_states")
        if data is None:
            return None
        return dict_to_section_states(data)

    def save_section_states(self, states: dict[MuscleSection, SectionState]) -> None:
        """Cache section states."""
        self._update_state("section_states", section_states_to_dict(states))

    def load_last_weekly_reset(self) -> datetime | None:
        """Instant weekly stimulus was last reset, or None."""
        return validate_optional_timestamp(self._read_state().get("last_weekly_reset"), "last_weekly_reset")

    def save_last_weekly_reset(self, when: datetime | None) -> None:
        """Record the instant weekly stimulus was last reset."""
        self._update_state("last_weekly_reset", when.isoformat() if when is not None else None)

    # -- profile / settings / soreness -------------------------------------

    def load_profile(self) -> UserProfile | None:
        """
        Load the user profile.

        Returns:
            UserProfile if one has been saved, None otherwise
        """
        data = self._read_state().get("profile")
        if data is None:
            return None
        return dict_to_user_profile(data)

    def save_profile(self, profile: UserProfile) -> None:
        """Save the user profile."""
        self._update_state("profile", user_profile_to_dict(profile))

    def load_settings(self) -> UserSettings:
        """Load display settings (defaults when none are saved)."""
        return dict_to_user_settings(self._read_state().get("settings") or {})

    def save_settings(self, settings: UserSettings) -> None:
        """Save display settings."""
        self._update_state("settings", user_settings_to_dict(settings))

    def load_soreness(self) -> SorenessMap:
        """Load today's reported soreness levels."""
        return dict_to_soreness(self._read_state().get("soreness") or {})

    def save_soreness(self, soreness: SorenessMap) -> None:
        """Save today's reported soreness levels."""
        self._update_state("soreness", soreness_to_dict(soreness))


def get_default_data_dir() -> Path:
    """
    Get the default data directory (~/.fatigue-fit).

    Returns:
        Default data directory path
    """
    return Path.home() / ".fatigue-fit"


def get_default_store() -> HistoryStore:
    """
    Get a HistoryStore in the default directory.

    Returns:
        HistoryStore instance
    """
    return HistoryStore(get_default_data_dir())
