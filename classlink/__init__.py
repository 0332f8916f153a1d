"""ClassLink Backend.

Teacher-student relationship service for a multi-tenant school platform.
Binds students to teachers and keeps a single default teacher per student.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
