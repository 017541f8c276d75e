# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Process-wide settings cache.

A read-through view of the ``settings`` table layered over built-in
defaults. The cache is seeded from a bulk fetch at startup and then kept
current by discrete change events (upsert or delete) delivered over a
message channel. Consumers can subscribe to those events; across processes
the view is eventually, not immediately, consistent.

Example:
    >>> cache = SettingsCache()
    >>> cache.seed({"academy_name": "Acme ICT"})
    >>> unsubscribe = cache.subscribe(lambda change: print(change.key))
    >>> cache.apply(SettingsChange(ChangeType.UPSERT, "hero_title", "Hello"))
    hero_title
    >>> cache.get("hero_title")
    'Hello'
"""

import logging
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any, Callable, Iterable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "academy_name": "Meranos ICT Training Academy",
    "hero_title": "Launch Your Tech Career",
    "hero_subtitle": (
        "Industry-leading ICT training programs designed to transform "
        "beginners into skilled professionals"
    ),
    "hero_badge_text": "Enrollment Open for 2025",
    "contact_email": "info@meranos.com",
    "contact_phone": "+234 800 000 0000",
    "contact_address": "Lagos, Nigeria",
    "enrollment_open": True,
    "geofence_radius_meters": 200,
    "theme_primary_color": "#6366f1",
    "partial_payment_percentage": 50,
    "registration_expiry_days": 7,
}


class ChangeType(str, Enum):
    """Kind of settings change event."""

    UPSERT = "UPSERT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class SettingsChange:
    """A single change to one setting."""

    type: ChangeType
    key: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "key": self.key, "value": self.value}

    @classmethod
    def from_dict(cls, payload: Any) -> "SettingsChange":
        """Parse a channel message.

        Raises:
            ValueError: If the payload is not a valid change event.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Settings change must be an object, got {type(payload).__name__}")
        key = payload.get("key")
        if not isinstance(key, str) or not key:
            raise ValueError("Settings change is missing a key")
        change_type = ChangeType(str(payload.get("type", "")).upper())
        return cls(type=change_type, key=key, value=payload.get("value"))


Subscriber = Callable[[SettingsChange], None]


class SettingsCache:
    """Key/value settings over defaults, with change subscriptions."""

    def __init__(self, defaults: Mapping[str, Any] | None = None) -> None:
        self._defaults: dict[str, Any] = dict(DEFAULT_SETTINGS if defaults is None else defaults)
        self._values: dict[str, Any] = {}
        self._subscribers: list[Subscriber] = []
        self._lock = Lock()
        self._seeded = False

    @property
    def is_seeded(self) -> bool:
        """Whether a bulk fetch has been loaded."""
        return self._seeded

    def seed(self, rows: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        """Replace stored values with a bulk fetch."""
        items = rows.items() if isinstance(rows, Mapping) else rows
        with self._lock:
            self._values = {key: value for key, value in items}
            self._seeded = True
        logger.info("Settings cache seeded with %d stored values", len(self._values))

    def apply(self, change: SettingsChange) -> None:
        """Apply one change event and notify subscribers.

        A delete reverts the key to its default.
        """
        with self._lock:
            if change.type == ChangeType.DELETE:
                self._values.pop(change.key, None)
            else:
                self._values[change.key] = change.value
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(change)
            except Exception as e:
                logger.error("Settings subscriber failed for %s: %s", change.key, e, exc_info=True)

    def get(self, key: str, default: Any = None) -> Any:
        """Stored value, else built-in default, else ``default``."""
        with self._lock:
            if key in self._values:
                return self._values[key]
        return self._defaults.get(key, default)

    def has(self, key: str) -> bool:
        """Whether a key has a stored value or a built-in default."""
        with self._lock:
            return key in self._values or key in self._defaults

    def snapshot(self) -> dict[str, Any]:
        """Defaults merged with stored values."""
        with self._lock:
            return {**self._defaults, **self._values}

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback.

        Returns:
            A function that removes the callback.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe


_cache: SettingsCache | None = None


def get_settings_cache() -> SettingsCache:
    """Get the process-wide settings cache."""
    global _cache
    if _cache is None:
        _cache = SettingsCache()
    return _cache


def reset_settings_cache() -> None:
    """Drop the process-wide cache (used between tests)."""
    global _cache
    _cache = None
