# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/registry.py
# DESCRIPTION:    Type registry
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

"""dbcoerce - Type registry

Maps application values to logical types, logical types to native representations
and native column types to the logical types they could be fetched as.
"""

from __future__ import annotations
from typing import Any, FrozenSet
import math
import datetime
import decimal
from firebird.base.types import UNDEFINED
from .types import LogicalType, NativeRepresentation, NativeType, RefCursor, \
     UnsupportedValueError
from .objects import DbObject, DbCollection

INT64_MIN = -9223372036854775808
INT64_MAX = 9223372036854775807

_NATIVE_OF = {LogicalType.STRING: NativeRepresentation.BYTES,
              LogicalType.ISO_STRING: NativeRepresentation.BYTES,
              LogicalType.BUFFER: NativeRepresentation.BYTES,
              LogicalType.NUMBER: NativeRepresentation.DOUBLE,
              LogicalType.DATE: NativeRepresentation.TIMESTAMP,
              LogicalType.TIMESTAMP: NativeRepresentation.TIMESTAMP,
              LogicalType.TIMESTAMP_TZ: NativeRepresentation.TIMESTAMP,
              LogicalType.TIMESTAMP_LTZ: NativeRepresentation.TIMESTAMP,
              LogicalType.CURSOR: NativeRepresentation.STMT,
              LogicalType.OBJECT: NativeRepresentation.OBJECT,
              LogicalType.COLLECTION: NativeRepresentation.OBJECT,
              }

_VARIABLE_SIZE = frozenset([NativeRepresentation.BYTES])

#: Default application type for each native column type.
_COLUMN_TYPE = {NativeType.VARCHAR: LogicalType.STRING,
                NativeType.NVARCHAR: LogicalType.STRING,
                NativeType.CHAR: LogicalType.STRING,
                NativeType.NCHAR: LogicalType.STRING,
                NativeType.ROWID: LogicalType.STRING,
                NativeType.CLOB: LogicalType.STRING,
                NativeType.NCLOB: LogicalType.STRING,
                NativeType.LONG: LogicalType.STRING,
                NativeType.RAW: LogicalType.BUFFER,
                NativeType.BLOB: LogicalType.BUFFER,
                NativeType.LONG_RAW: LogicalType.BUFFER,
                NativeType.BINARY_FLOAT: LogicalType.NUMBER,
                NativeType.BINARY_DOUBLE: LogicalType.NUMBER,
                NativeType.BINARY_INTEGER: LogicalType.NUMBER,
                NativeType.NUMBER: LogicalType.NUMBER,
                NativeType.DATE: LogicalType.DATE,
                NativeType.TIMESTAMP: LogicalType.TIMESTAMP,
                NativeType.TIMESTAMP_TZ: LogicalType.TIMESTAMP_TZ,
                NativeType.TIMESTAMP_LTZ: LogicalType.TIMESTAMP_LTZ,
                NativeType.CURSOR: LogicalType.CURSOR,
                NativeType.OBJECT: LogicalType.OBJECT,
                }

_CHAR_TYPES = frozenset([NativeType.VARCHAR, NativeType.NVARCHAR, NativeType.CHAR,
                         NativeType.NCHAR, NativeType.ROWID, NativeType.CLOB,
                         NativeType.NCLOB, NativeType.LONG])
_BINARY_TYPES = frozenset([NativeType.RAW, NativeType.BLOB, NativeType.LONG_RAW])
_NUMERIC_TYPES = frozenset([NativeType.NUMBER, NativeType.BINARY_FLOAT,
                            NativeType.BINARY_DOUBLE, NativeType.BINARY_INTEGER])
_TEMPORAL_TYPES = frozenset([NativeType.DATE, NativeType.TIMESTAMP,
                             NativeType.TIMESTAMP_TZ, NativeType.TIMESTAMP_LTZ])
_TZ_TYPES = frozenset([NativeType.TIMESTAMP_TZ, NativeType.TIMESTAMP_LTZ])

def resolve_default_type(value: Any) -> LogicalType:
    """Returns default logical type for application value.

    Arguments:
        value: Application value.

    Raises:
        UnsupportedValueError: When value shape does not match any logical type.
    """
    if value is None or value is UNDEFINED:
        return LogicalType.STRING
    if isinstance(value, str):
        return LogicalType.STRING
    if isinstance(value, bool):
        raise UnsupportedValueError(f"NJS-012: encountered invalid bind data type"
                                    f" {type(value).__name__}")
    if isinstance(value, (int, float, decimal.Decimal)):
        return LogicalType.NUMBER
    if isinstance(value, (bytes, bytearray, memoryview)):
        return LogicalType.BUFFER
    if isinstance(value, datetime.datetime):
        return LogicalType.TIMESTAMP if value.tzinfo is None else LogicalType.TIMESTAMP_TZ
    if isinstance(value, datetime.date):
        return LogicalType.DATE
    if isinstance(value, RefCursor):
        return LogicalType.CURSOR
    if isinstance(value, DbCollection):
        return LogicalType.COLLECTION
    if isinstance(value, DbObject):
        return LogicalType.OBJECT
    raise UnsupportedValueError(f"NJS-012: encountered invalid bind data type"
                                f" {type(value).__name__}")

def native_of(logical_type: LogicalType) -> NativeRepresentation:
    """Returns default native representation for logical type.
    """
    return _NATIVE_OF[logical_type]

def is_variable_size(native_type: NativeRepresentation) -> bool:
    """Returns True when values of native representation have variable size.
    """
    return native_type in _VARIABLE_SIZE

def is_native_numeric(value: Any) -> bool:
    """Returns True for numbers that could be passed to NUMBER bind without
    `NativeRepresentation.BYTES` hint, i.e. finite `float` and `int` in 64-bit range.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return INT64_MIN <= value <= INT64_MAX
    if isinstance(value, float):
        return math.isfinite(value)
    return False

def logical_type_of_column(db_type: NativeType) -> LogicalType:
    """Returns default application (fetch) type for native column type.
    """
    return _COLUMN_TYPE[db_type]

def allowed_fetch_types(db_type: NativeType) -> FrozenSet[LogicalType]:
    """Returns set of fetch overrides that are allowed for native column type.
    """
    if db_type in _NUMERIC_TYPES:
        return frozenset([LogicalType.NUMBER, LogicalType.STRING, LogicalType.ISO_STRING])
    if db_type in _TEMPORAL_TYPES:
        return frozenset([_COLUMN_TYPE[db_type], LogicalType.DATE, LogicalType.STRING,
                          LogicalType.ISO_STRING])
    if db_type in _CHAR_TYPES:
        return frozenset([LogicalType.STRING])
    if db_type in _BINARY_TYPES:
        return frozenset([LogicalType.BUFFER, LogicalType.STRING])
    return frozenset([_COLUMN_TYPE[db_type]])

def is_char_type(db_type: NativeType) -> bool:
    "Returns True for character column types."
    return db_type in _CHAR_TYPES

def is_binary_type(db_type: NativeType) -> bool:
    "Returns True for binary column types."
    return db_type in _BINARY_TYPES

def is_numeric_type(db_type: NativeType) -> bool:
    "Returns True for numeric column types."
    return db_type in _NUMERIC_TYPES

def is_temporal_type(db_type: NativeType) -> bool:
    "Returns True for date and timestamp column types."
    return db_type in _TEMPORAL_TYPES

def is_tz_type(db_type: NativeType) -> bool:
    "Returns True for timezone-aware timestamp column types."
    return db_type in _TZ_TYPES
