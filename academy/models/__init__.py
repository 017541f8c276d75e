# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models for the HTTP API.

Request fields that the endpoints require are declared optional here and
checked by the services, so a missing field produces the same 400 error body
as any other validation failure.
"""
