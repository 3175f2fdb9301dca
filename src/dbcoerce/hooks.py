# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/hooks.py
# DESCRIPTION:    Session hooks
# CREATED:        16.10.2026
#
# The contents of this file are subject to the MIT License
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Copyright (c) 2026 The dbcoerce Project
# All Rights Reserved.
#
# Contributor(s): ______________________________________

"""dbcoerce - Session hooks

This module defines hook points (events) within the session lifecycle where custom
functions can be registered and executed.

Hooks are registered using `firebird.base.hooks.add_hook()` or the
`firebird.base.hooks.hook_manager`. The signature required for each hook function is
documented within the `.Session` methods that trigger these hooks.
"""

from __future__ import annotations
from enum import Enum, auto
from firebird.base.hooks import register_class, get_callbacks, add_hook, hook_manager

class SessionHook(Enum):
    """Hooks related to the session calls and session locale.
    """
    #: Called after binds were resolved and before the native call is issued.
    EXECUTE_REQUEST = auto()
    #: Called after a session command changed the session locale.
    LOCALE_CHANGED = auto()
