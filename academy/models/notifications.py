# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification API models."""

from pydantic import BaseModel, ConfigDict, Field


class ScholarshipEmailRequest(BaseModel):
    """Scholarship decision email.

    Accepts the camelCase keys the admin dashboard sends.
    """

    model_config = ConfigDict(populate_by_name=True)

    to: str | None = None
    student_name: str | None = Field(default=None, alias="studentName")
    status: str | None = None
    granted_percentage: float | None = Field(default=None, alias="grantedPercentage")
    program_name: str | None = Field(default=None, alias="programName")
    admin_notes: str | None = Field(default=None, alias="adminNotes")


class EmailSentResponse(BaseModel):
    """Provider acknowledgement."""

    success: bool = True
    id: str | None = None
