"""
recorder.py
Display sink that stores engine events in memory.
Used by tests as a stand-in for the console, and by the CLI to keep the events of the last game.
Related modules:
- core/engine.py: Calls the sink with every event dict it emits.
"""

from typing import Dict, List, Optional


class InMemoryRecorder:
    """
    Records event dicts in memory for later retrieval.
    Instances are callable so they can be passed as the engine's sink.
    Methods:
        record(event): Add a new event.
        events(event_type=None): Get recorded events, optionally of one type.
    """
    def __init__(self):
        self._events: List[Dict] = []

    def __call__(self, event: Dict) -> None:
        self.record(event)

    def record(self, event: Dict) -> None:
        """Add a new event to the recorder."""
        self._events.append(event)

    def events(self, event_type: Optional[str] = None):
        """Return recorded events as a list, optionally filtered by type."""
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if e.get("type") == event_type]

    def types(self) -> List[str]:
        return [e.get("type") for e in self._events]
