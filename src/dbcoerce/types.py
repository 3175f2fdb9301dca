# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/types.py
# DESCRIPTION:    Types, errors and data structures
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

"""dbcoerce - Types, enums, data structures and exceptions


"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union
from dataclasses import dataclass, field
from enum import IntEnum
from firebird.base.types import Error, UNDEFINED

# Exceptions

class InterfaceError(Error):
    """Exception raised for errors that are detected by the coercion layer
    rather than reported by the database.

    Every subclass carries a stable `code` (``NJS-nnn``) that could be used by calling
    layers to branch on the error kind. The code is also the prefix of the message text.
    """
    #: Stable machine-checkable error code
    code: str = None

class DatabaseError(Error):
    """Exception raised for errors that mirror the errors reported by the database
    server (``ORA-nnnnn`` codes), like invalid session commands or bind names.
    """
    #: Stable machine-checkable error code
    code: str = None

class BindTypeMismatchError(InterfaceError):
    """Bind value shape is incompatible with declared or inferred bind type.
    """
    code = 'NJS-011'

class UnsupportedValueError(InterfaceError):
    """Value shape is not recognized by the type registry.
    """
    code = 'NJS-012'

class BindDirectionError(InterfaceError):
    """OUT or IN OUT bind is missing the required type.
    """
    code = 'NJS-013'

class BindSizeError(InterfaceError):
    """OUT or IN OUT bind is missing `max_size`, or the value exceeds it.

    Attributes:
        max_size (int): Declared maximum size (None when missing)
        actual_size (int): Size of the offending value (None when `max_size` is missing)
    """
    code = 'NJS-035'

class BindArrayElementError(InterfaceError):
    """Element of an array bind (or row of a many-row bind) has invalid type.

    Attributes:
        index (int): Zero-based index of the first failing element
        bind_name (str): Bind name for named binds, or None
        position (int): One-based bind position for positional binds, or None
    """
    code = 'NJS-037'

class FetchTypeError(InterfaceError):
    """Requested fetch override is incompatible with the native column type.
    """
    code = 'NJS-021'

class ConcurrentCallError(InterfaceError):
    """Second call was issued on a session while another call is still in flight.
    """
    code = 'NJS-081'

class StructuredValueSizeError(InterfaceError):
    """Object attribute or collection element violates the precision or length of
    its declared type.

    Attributes:
        attr_name (str): Attribute name (object attributes only)
        index (int): Element index (collection elements only)
        max_size (int): Declared maximum size or precision
        actual_size (int): Size of the offending value
    """
    code = 'NJS-142'

class BindNameError(DatabaseError):
    """Bind variable name is not a valid identifier and is not quoted.
    """
    code = 'ORA-01036'

class NlsError(DatabaseError):
    """Session locale command, format model or formatted text is invalid.
    """
    code = 'ORA-00922'

# Enums

class LogicalType(IntEnum):
    """Logical bind and fetch types.
    """
    ISO_STRING = 1999
    STRING = 2001
    BUFFER = 2006
    NUMBER = 2010
    DATE = 2011
    TIMESTAMP = 2012
    TIMESTAMP_TZ = 2013
    TIMESTAMP_LTZ = 2014
    CURSOR = 2021
    OBJECT = 2023
    COLLECTION = 2031

class NativeRepresentation(IntEnum):
    """In-memory encoding a value takes to cross into the client protocol layer.
    """
    INT64 = 3000
    DOUBLE = 3003
    BYTES = 3004
    TIMESTAMP = 3005
    OBJECT = 3009
    STMT = 3010

class NativeType(IntEnum):
    """Database column and attribute types (``DB_TYPE_*``) as reported by the wire
    protocol.
    """
    VARCHAR = 2001
    NVARCHAR = 2002
    CHAR = 2003
    NCHAR = 2004
    ROWID = 2005
    RAW = 2006
    BINARY_FLOAT = 2007
    BINARY_DOUBLE = 2008
    BINARY_INTEGER = 2009
    NUMBER = 2010
    DATE = 2011
    TIMESTAMP = 2012
    TIMESTAMP_TZ = 2013
    TIMESTAMP_LTZ = 2014
    CLOB = 2017
    NCLOB = 2018
    BLOB = 2019
    CURSOR = 2021
    OBJECT = 2023
    LONG = 2024
    LONG_RAW = 2025

class BindDirection(IntEnum):
    """Bind direction.
    """
    IN = 3001
    INOUT = 3002
    OUT = 3003

class OutFormat(IntEnum):
    """Shape of fetched rows.
    """
    #: Rows are returned as tuples
    ARRAY = 4001
    #: Rows are returned as dictionaries keyed by column name
    OBJECT = 4002

# Dataclasses

@dataclass(frozen=True)
class RefCursor:
    """Opaque handle of a REF CURSOR returned by (or bound to) the database.

    Attributes:
        handle (Any): Native statement handle supplied by the wire collaborator
    """
    handle: Any

@dataclass(frozen=True)
class DbObjectAttr:
    """Attribute of structured database type, or element type of a collection.

    Attributes:
        name (str): Attribute name (None for collection element type)
        db_type (NativeType): Native attribute type
        max_size (int): Maximum length (bytes for VARCHAR/CHAR/RAW, characters for
                        NVARCHAR/NCHAR), or None
        precision (int): NUMBER precision, or None
        scale (int): NUMBER scale, or None
        object_type (DbObjectType): Type of nested object or collection attribute
    """
    name: Optional[str]
    db_type: NativeType
    max_size: int = None
    precision: int = None
    scale: int = None
    object_type: Optional[DbObjectType] = None

@dataclass(frozen=True)
class DbObjectType:
    """Structured (object or collection) database type.

    Attributes:
        schema (str): Type owner
        name (str): Type name
        attributes (tuple): `DbObjectAttr` for each object attribute (empty for collections)
        element_type (DbObjectAttr): Element type for collections, None for object types
    """
    schema: str
    name: str
    attributes: Tuple[DbObjectAttr, ...] = ()
    element_type: Optional[DbObjectAttr] = None
    @property
    def is_collection(self) -> bool:
        """True for collection types.
        """
        return self.element_type is not None
    @property
    def fqn(self) -> str:
        """Fully qualified type name.
        """
        return f'{self.schema}.{self.name}' if self.schema else self.name
    def get_attribute(self, name: str) -> Optional[DbObjectAttr]:
        """Returns attribute descriptor for name, or None when type has no such attribute.
        """
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

@dataclass
class NativeObject:
    """Wire form of a structured value.

    NULL structured value is represented by `None`, not by an instance of this class.

    Attributes:
        type_name (str): Fully qualified type name
        attributes (dict): Native attribute values (object types)
        elements (dict): Native element values by index (collection types)
    """
    type_name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    elements: Dict[int, Any] = field(default_factory=dict)

@dataclass
class BindSpec:
    """Bind variable specification.

    Attributes:
        value (Any): Bind value. `None` is SQL NULL, `UNDEFINED` and empty string are
                     normalized to SQL NULL.
        type (Union[LogicalType, DbObjectType]): Declared bind type or None to infer it
        dir (BindDirection): Bind direction
        max_size (int): Maximum size of variable-length OUT and IN OUT binds
        native_type (NativeRepresentation): Native representation hint
        max_array_size (int): Maximum number of elements for array binds
    """
    value: Any = UNDEFINED
    type: Union[LogicalType, DbObjectType, None] = None
    dir: BindDirection = BindDirection.IN
    max_size: int = None
    native_type: NativeRepresentation = None
    max_array_size: int = None

@dataclass(frozen=True)
class ResolvedBind:
    """Result of bind resolution.

    Attributes:
        name (str): Normalized bind name, or None for positional binds
        type (LogicalType): Effective bind type
        dir (BindDirection): Bind direction
        native_type (NativeRepresentation): Native transport representation
        max_size (int): Maximum size (None for fixed-size representations)
        native_value (Any): Value in native representation (None for NULL and OUT binds)
        is_array (bool): True for array binds
        object_type (DbObjectType): Structured type for OBJECT and COLLECTION binds
    """
    name: Optional[str]
    type: LogicalType
    dir: BindDirection
    native_type: NativeRepresentation
    max_size: int = None
    native_value: Any = None
    is_array: bool = False
    object_type: Optional[DbObjectType] = None

@dataclass(frozen=True)
class FetchSpec:
    """Fetch override for single column.

    Attributes:
        column (str): Column name
        type (LogicalType): Requested application representation
    """
    column: str
    type: LogicalType

@dataclass(frozen=True)
class ColumnMetadata:
    """Column description supplied by the wire protocol.

    Attributes:
        name (str): Column name
        db_type (NativeType): Native column type
        precision (int): NUMBER precision, or None
        scale (int): NUMBER scale, or None
        max_size (int): Maximum size for character and binary columns
        nullable (bool): Whether NULLs are allowed
        object_type (DbObjectType): Type of OBJECT columns
    """
    name: str
    db_type: NativeType
    precision: int = None
    scale: int = None
    max_size: int = None
    nullable: bool = True
    object_type: Optional[DbObjectType] = None

@dataclass
class NativeResult:
    """Result of a native call as returned by the wire collaborator.

    Attributes:
        columns (list): `ColumnMetadata` for each column of the result set
        rows (list): Rows of native column values
        out_binds (dict): Native values of OUT and IN OUT binds, keyed by bind name or
                          zero-based position
        rows_affected (int): Number of rows affected by DML
    """
    columns: List[ColumnMetadata] = field(default_factory=list)
    rows: List[Tuple] = field(default_factory=list)
    out_binds: Dict[Union[str, int], Any] = field(default_factory=dict)
    rows_affected: int = None

@dataclass
class ExecuteResult:
    """Result of `.Session.execute()` with values coerced to application representation.

    Attributes:
        metadata (list): `ColumnMetadata` for each column
        rows (list): Rows as tuples or dictionaries (see `OutFormat`)
        out_binds (dict): Application values of OUT and IN OUT binds
        rows_affected (int): Number of rows affected by DML
    """
    metadata: List[ColumnMetadata] = field(default_factory=list)
    rows: List[Union[Tuple, Dict[str, Any]]] = field(default_factory=list)
    out_binds: Dict[Union[str, int], Any] = field(default_factory=dict)
    rows_affected: int = None

class NativeConnection(Protocol):  # pragma: no cover
    """Protocol type for the session collaborator that executes native calls.
    """
    async def execute(self, sql: str, binds: List[ResolvedBind], *,
                      many: bool = False) -> NativeResult:
        """Executes SQL statement with resolved binds.
        """
    def describe_type(self, name: str) -> DbObjectType:
        """Returns metadata for structured database type.
        """

#: Bind value specification accepted by `.BindResolver.resolve_all()`
BINDS = Union[Dict[str, Any], List[Any], Tuple[Any, ...]]
#: Per-column fetch overrides
FETCH_INFO = Dict[str, Union[LogicalType, FetchSpec]]
