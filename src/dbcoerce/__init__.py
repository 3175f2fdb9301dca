# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/__init__.py
# DESCRIPTION:    Typed bind/fetch coercion and locale-aware formatting
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

"""dbcoerce - Typed bind/fetch coercion and locale-aware formatting for database clients


"""
from .config import CoercionConfig, SessionDefaults, coercion_config
from .types import (
    BINDS,
    FETCH_INFO,
    BindArrayElementError,
    BindDirection,
    BindDirectionError,
    BindNameError,
    BindSizeError,
    BindSpec,
    BindTypeMismatchError,
    ColumnMetadata,
    ConcurrentCallError,
    DatabaseError,
    DbObjectAttr,
    DbObjectType,
    ExecuteResult,
    FetchSpec,
    FetchTypeError,
    InterfaceError,
    LogicalType,
    NativeConnection,
    NativeObject,
    NativeRepresentation,
    NativeResult,
    NativeType,
    NlsError,
    OutFormat,
    RefCursor,
    ResolvedBind,
    StructuredValueSizeError,
    UnsupportedValueError,
)
from .registry import (
    allowed_fetch_types,
    is_native_numeric,
    is_variable_size,
    logical_type_of_column,
    native_of,
    resolve_default_type,
)
from .nls import (
    SessionLocale,
    apply_session_command,
    canonical_number,
    format_date,
    format_number,
    format_timestamp,
    get_timezone,
    is_session_command,
    iso_format,
    number_to_text,
    parse_date,
)
from .objects import DbCollection, DbObject, ObjectMarshaller
from .fetch import FetchCoercer
from .binds import BindResolver, normalize_bind_name
from .hooks import SessionHook
from .session import Session

#: Current version, SEMVER string.
__VERSION__ = '1.0.0'
