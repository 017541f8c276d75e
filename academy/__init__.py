"""Academy Backend.

Payment, provisioning and housekeeping services for the training-academy
web application. Authentication, storage and realtime delivery are
delegated to the hosting platform; this package holds the privileged
server-side flows.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
