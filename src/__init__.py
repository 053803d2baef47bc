"""Emotional Intelligence Assessment Engine.

Reproducible assessment of emotional intelligence competencies from
journal entries, reflections and mood tags.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
