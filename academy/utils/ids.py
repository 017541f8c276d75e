# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identifier helpers."""

from uuid import UUID


def is_uuid(value: object) -> bool:
    """Check whether a value is a canonical hyphenated UUID string."""
    if not isinstance(value, str) or len(value) != 36:
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True
