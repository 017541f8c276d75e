# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTML bodies for scholarship decision emails."""

from dataclasses import dataclass
from html import escape

APPROVED_STATUS = "approved"


@dataclass(frozen=True)
class RenderedEmail:
    """Subject and HTML body ready to send."""

    subject: str
    html: str


def _format_percentage(value: float | None) -> str:
    if value is None:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _signature(academy_name: str) -> str:
    return (
        '<p style="color: #374151; margin-top: 24px;">'
        f"Best regards,<br/><strong>{escape(academy_name)}</strong></p>"
    )


def render_approved(
    student_name: str,
    program_name: str,
    granted_percentage: float | None,
    admin_notes: str | None,
    academy_name: str,
) -> RenderedEmail:
    """Render the approval email with the granted tuition discount."""
    notes = ""
    if admin_notes:
        notes = (
            '<p style="color: #6b7280; font-style: italic; border-left: 3px solid #d1d5db; '
            f'padding-left: 12px; margin-top: 20px;">Note: {escape(admin_notes)}</p>'
        )

    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: linear-gradient(135deg, #6366f1, #8b5cf6); padding: 30px;
                border-radius: 12px 12px 0 0; text-align: center;">
        <h1 style="color: white; margin: 0; font-size: 24px;">Congratulations!</h1>
    </div>
    <div style="background: #f9fafb; padding: 30px; border: 1px solid #e5e7eb;
                border-top: none; border-radius: 0 0 12px 12px;">
        <p style="font-size: 16px; color: #374151;">Dear <strong>{escape(student_name)}</strong>,</p>
        <p style="font-size: 16px; color: #374151;">
            We are pleased to inform you that your scholarship application for
            <strong>{escape(program_name)}</strong> has been
            <strong style="color: #059669;">approved</strong>!
        </p>
        <div style="background: #ecfdf5; border: 1px solid #a7f3d0; border-radius: 8px;
                    padding: 20px; margin: 20px 0; text-align: center;">
            <p style="margin: 0; color: #065f46; font-size: 14px;">Your Tuition Discount</p>
            <p style="margin: 5px 0 0; color: #059669; font-size: 36px; font-weight: bold;">
                {_format_percentage(granted_percentage)}%
            </p>
        </div>
        <h3 style="color: #374151;">Next Steps:</h3>
        <ul style="color: #6b7280; line-height: 1.8;">
            <li>Log in to your student dashboard to view updated payment details</li>
            <li>Your tuition balance has been adjusted to reflect the scholarship discount</li>
            <li>Contact the office if you have any questions</li>
        </ul>
        {notes}
        {_signature(academy_name)}
    </div>
</div>
"""
    return RenderedEmail(
        subject=f"Scholarship Approved: {program_name}",
        html=html.strip(),
    )


def render_rejected(
    student_name: str,
    program_name: str,
    admin_notes: str | None,
    academy_name: str,
) -> RenderedEmail:
    """Render the decline email. The reviewer note is shown when present."""
    notes = ""
    if admin_notes:
        notes = (
            '<div style="background: #f3f4f6; border-radius: 8px; padding: 16px; margin: 20px 0;">'
            '<p style="margin: 0; color: #374151; font-size: 14px;">'
            f"<strong>Reviewer's Note:</strong> {escape(admin_notes)}</p></div>"
        )

    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #374151; padding: 30px; border-radius: 12px 12px 0 0; text-align: center;">
        <h1 style="color: white; margin: 0; font-size: 24px;">Scholarship Application Update</h1>
    </div>
    <div style="background: #f9fafb; padding: 30px; border: 1px solid #e5e7eb;
                border-top: none; border-radius: 0 0 12px 12px;">
        <p style="font-size: 16px; color: #374151;">Dear <strong>{escape(student_name)}</strong>,</p>
        <p style="font-size: 16px; color: #374151;">
            Thank you for applying for a scholarship for <strong>{escape(program_name)}</strong>.
            After careful review, we regret to inform you that your application was not
            approved at this time.
        </p>
        {notes}
        <p style="color: #6b7280;">
            This does not affect your enrollment. You may reach out to the office for further
            guidance on payment plans or future scholarship opportunities.
        </p>
        {_signature(academy_name)}
    </div>
</div>
"""
    return RenderedEmail(
        subject=f"Scholarship Application Update: {program_name}",
        html=html.strip(),
    )


def render_scholarship_email(
    status: str,
    student_name: str,
    program_name: str,
    granted_percentage: float | None,
    admin_notes: str | None,
    academy_name: str,
) -> RenderedEmail:
    """Pick the template for a decision. Anything but "approved" is a decline."""
    if status == APPROVED_STATUS:
        return render_approved(
            student_name, program_name, granted_percentage, admin_notes, academy_name
        )
    return render_rejected(student_name, program_name, admin_notes, academy_name)
