# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/binds.py
# DESCRIPTION:    Bind resolution
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

"""dbcoerce - Bind resolution

Turns bind specifications into resolved binds (effective type, direction, native
representation and native value). All validation is eager, so invalid binds never
reach the native call.
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import re
import datetime
from decimal import Decimal
from dateutil import parser as dtparser
from firebird.base.types import UNDEFINED
from firebird.base.logging import LoggingIdMixin, get_logger
from .types import InterfaceError, BindTypeMismatchError, UnsupportedValueError, \
     BindDirectionError, BindSizeError, BindArrayElementError, BindNameError, NlsError, \
     LogicalType, NativeRepresentation, BindDirection, BindSpec, ResolvedBind, \
     DbObjectType, DbObjectAttr, RefCursor, BINDS
from .config import CoercionConfig, coercion_config
from .registry import resolve_default_type, native_of, is_variable_size, is_native_numeric, \
     logical_type_of_column
from .nls import to_decimal, canonical_number
from .objects import DbObject, DbCollection, ObjectMarshaller
from .fetch import FetchCoercer

_IDENTIFIER = re.compile(r'[A-Za-z][A-Za-z0-9_$#]*')
_TEMPORAL = (LogicalType.DATE, LogicalType.TIMESTAMP, LogicalType.TIMESTAMP_TZ,
             LogicalType.TIMESTAMP_LTZ)

def normalize_bind_name(name: str) -> str:
    """Returns normalized bind variable name.

    Unquoted names are converted to uppercase and must be valid identifiers, quoted
    names keep their case.

    Raises:
        BindNameError: When name is not valid (``ORA-01036``).
    """
    if len(name) > 2 and name.startswith('"') and name.endswith('"') \
       and '"' not in name[1:-1]:
        return name[1:-1]
    if _IDENTIFIER.fullmatch(name):
        return name.upper()
    raise BindNameError(f"ORA-01036: illegal variable name/number: {name!r}",
                        bind_name=name)

def _mismatch(value: Any, bind_type: Any) -> BindTypeMismatchError:
    return BindTypeMismatchError(f"NJS-011: encountered bind value and type mismatch:"
                                 f" {type(value).__name__} for"
                                 f" {getattr(bind_type, 'name', bind_type)}")

class BindResolver(LoggingIdMixin):
    """Resolves bind specifications.

    Arguments:
        config: Configuration. Global `.coercion_config` is used when not specified.
        coercer: Fetch coercer that shares the object marshaller owned by resolver.
                 New one is created when not specified.
    """
    def __init__(self, config: CoercionConfig=None, *, coercer: FetchCoercer=None):
        self._config: CoercionConfig = config
        #: `.FetchCoercer` used for structured values on fetch
        self.coercer: FetchCoercer = FetchCoercer(config) if coercer is None else coercer
        #: `.ObjectMarshaller` for OBJECT and COLLECTION binds
        self.marshaller: ObjectMarshaller = ObjectMarshaller(self, self.coercer)
        if self.coercer.marshaller is None:
            self.coercer.marshaller = self.marshaller
    def _declared(self, bind_type: Any) -> Tuple[LogicalType, Optional[DbObjectType]]:
        if isinstance(bind_type, type) and issubclass(bind_type, DbObject) \
           and bind_type._type_ is not None:
            bind_type = bind_type._type_
        if isinstance(bind_type, DbObjectType):
            return (LogicalType.COLLECTION if bind_type.is_collection
                    else LogicalType.OBJECT), bind_type
        try:
            return LogicalType(bind_type), None
        except ValueError:
            raise InterfaceError(f"NJS-007: invalid value for \"type\": {bind_type!r}",
                                 code='NJS-007') from None
    def _native_type(self, logical: LogicalType, hint: Optional[NativeRepresentation],
                     value: Any) -> NativeRepresentation:
        if hint is not None:
            return NativeRepresentation(hint)
        if logical == LogicalType.NUMBER and isinstance(value, int) \
           and not isinstance(value, bool):
            return NativeRepresentation.INT64
        return native_of(logical)
    def _normalize(self, value: Any, logical: LogicalType,
                   hint: Optional[NativeRepresentation],
                   obj_type: Optional[DbObjectType]) -> Any:
        if value is None or value is UNDEFINED:
            return None
        if isinstance(value, str) and value == '':
            return None
        if logical in (LogicalType.STRING, LogicalType.ISO_STRING):
            if not isinstance(value, str):
                raise _mismatch(value, logical)
            return value
        if logical == LogicalType.NUMBER:
            if isinstance(value, bool):
                raise _mismatch(value, logical)
            if is_native_numeric(value):
                return value
            if isinstance(value, (str, Decimal, int)) and hint == NativeRepresentation.BYTES:
                try:
                    number = to_decimal(value)
                except NlsError:
                    raise _mismatch(value, logical) from None
                if number.is_finite():
                    return value
            raise _mismatch(value, logical)
        if logical == LogicalType.BUFFER:
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise _mismatch(value, logical)
            return bytes(value)
        if logical in _TEMPORAL:
            if isinstance(value, str) and hint == NativeRepresentation.TIMESTAMP:
                try:
                    value = dtparser.isoparse(value)
                except ValueError:
                    raise _mismatch(value, logical) from None
            if isinstance(value, datetime.datetime):
                return value
            if isinstance(value, datetime.date):
                return datetime.datetime.combine(value, datetime.time())
            raise _mismatch(value, logical)
        if logical == LogicalType.CURSOR:
            if not isinstance(value, RefCursor):
                raise _mismatch(value, logical)
            return value
        # OBJECT and COLLECTION
        if obj_type is None:
            if not isinstance(value, DbObject) \
               or isinstance(value, DbCollection) != (logical == LogicalType.COLLECTION):
                raise _mismatch(value, logical)
            return value
        return self.marshaller.build(obj_type, value)
    def _convert(self, value: Any, logical: LogicalType,
                 native: NativeRepresentation) -> Any:
        if value is None:
            return None
        if logical in (LogicalType.STRING, LogicalType.ISO_STRING):
            return value.encode(self.encoding)
        if logical == LogicalType.NUMBER:
            if native == NativeRepresentation.BYTES:
                return canonical_number(value).encode('ascii')
            if native == NativeRepresentation.INT64:
                if isinstance(value, float) and not value.is_integer():
                    raise _mismatch(value, NativeRepresentation.INT64)
                return int(value)
            return value
        if logical in (LogicalType.OBJECT, LogicalType.COLLECTION):
            return self.marshaller.to_native(value)
        return value
    def check_attribute(self, attr: DbObjectAttr, value: Any) -> Any:
        """Returns normalized value of scalar structured type attribute.

        NUMBER attributes accept `~decimal.Decimal` values as they travel as text.

        Raises:
            BindTypeMismatchError: When value shape does not match attribute type.
        """
        logical = logical_type_of_column(attr.db_type)
        hint = NativeRepresentation.BYTES if isinstance(value, Decimal) else None
        return self._normalize(value, logical, hint, None)
    def attribute_native_value(self, attr: DbObjectAttr, value: Any) -> Any:
        """Returns native value of validated scalar structured type attribute.
        """
        logical = logical_type_of_column(attr.db_type)
        hint = NativeRepresentation.BYTES if isinstance(value, Decimal) else None
        return self._convert(value, logical, self._native_type(logical, hint, value))
    def resolve(self, spec: Union[BindSpec, Any], name: str=None,
                position: int=None) -> ResolvedBind:
        """Returns resolved bind.

        Arguments:
            spec: Bind specification, or plain value for IN bind.
            name: Normalized bind name (named binds).
            position: One-based bind position (positional binds).

        Raises:
            UnsupportedValueError: When type could not be inferred from value.
            BindDirectionError: When OUT or IN OUT bind has no type.
            BindSizeError: When variable-size OUT or IN OUT bind has no `max_size`, or
                           IN OUT value exceeds it.
            BindTypeMismatchError: When value does not match the bind type.
            BindArrayElementError: When array element does not match the bind type.
        """
        if not isinstance(spec, BindSpec):
            spec = BindSpec(value=spec)
        direction = BindDirection(spec.dir)
        value = spec.value
        logical, obj_type = (None, None) if spec.type is None else self._declared(spec.type)
        is_array = isinstance(value, (list, tuple)) and logical != LogicalType.COLLECTION \
            and not (obj_type is not None and obj_type.is_collection)
        if direction == BindDirection.OUT:
            is_array = spec.max_array_size is not None
        if logical is None:
            if direction != BindDirection.IN:
                raise BindDirectionError(f"NJS-013: invalid bind direction: type is"
                                         f" required for {direction.name}"
                                         f" {self._where(name, position)}")
            if is_array:
                logical = self._infer_array_type(value, name, position)
            else:
                logical = resolve_default_type(value)
                if isinstance(value, DbObject):
                    obj_type = value._type_
        hint = spec.native_type
        max_size = spec.max_size
        if direction != BindDirection.IN and max_size is None \
           and is_variable_size(self._native_type(logical, hint, None)):
            max_size = self.config.bind_default_max_size.value
        if direction == BindDirection.OUT:
            self._check_declared_sizes(logical, hint, max_size, is_array,
                                       spec.max_array_size, direction, name, position)
        native_value = None
        if direction == BindDirection.OUT:
            native = self._native_type(logical, hint, None)
        elif is_array:
            if direction == BindDirection.INOUT and spec.max_array_size is not None \
               and len(value) > spec.max_array_size:
                raise BindSizeError(f"NJS-036: given array is of size greater than"
                                    f" maxArraySize for {self._where(name, position)}",
                                    code='NJS-036', max_size=spec.max_array_size,
                                    actual_size=len(value))
            native = self._native_type(logical, hint, None)
            native_value = []
            for index, item in enumerate(value):
                try:
                    item = self._normalize(item, logical, hint, obj_type)
                    native_value.append(self._convert(item, logical, native))
                except (BindTypeMismatchError, UnsupportedValueError):
                    raise self._element_error(index, name, position) from None
                self._check_size(item, max_size, direction, name, position)
        else:
            item = self._normalize(value, logical, hint, obj_type)
            native = self._native_type(logical, hint, item)
            native_value = self._convert(item, logical, native)
            self._check_size(item, max_size, direction, name, position)
            if obj_type is None and isinstance(item, DbObject):
                obj_type = item._type_
        if direction == BindDirection.INOUT:
            self._check_declared_sizes(logical, hint, max_size, is_array,
                                       spec.max_array_size, direction, name, position)
        result = ResolvedBind(name, logical, direction, native,
                              max_size if is_variable_size(native) else None,
                              native_value, is_array, obj_type)
        get_logger(self).debug("Resolved %s: %s %s %s", self._where(name, position),
                               logical.name, direction.name, native.name)
        return result
    def _infer_array_type(self, value: Sequence, name: Optional[str],
                          position: Optional[int]) -> LogicalType:
        for index, item in enumerate(value):
            if item is None or item is UNDEFINED:
                continue
            try:
                return resolve_default_type(item)
            except UnsupportedValueError:
                raise self._element_error(index, name, position) from None
        return LogicalType.STRING
    def _check_declared_sizes(self, logical: LogicalType,
                              hint: Optional[NativeRepresentation], max_size: Optional[int],
                              is_array: bool, max_array_size: Optional[int],
                              direction: BindDirection, name: Optional[str],
                              position: Optional[int]) -> None:
        if is_variable_size(self._native_type(logical, hint, None)) and max_size is None:
            raise BindSizeError(f"NJS-035: maxSize is required for {direction.name}"
                                f" {self._where(name, position)}")
        if is_array and max_array_size is None:
            raise BindSizeError(f"NJS-035: maxArraySize is required for {direction.name}"
                                f" array {self._where(name, position)}")
    def _check_size(self, value: Any, max_size: Optional[int], direction: BindDirection,
                    name: Optional[str], position: Optional[int]) -> None:
        if direction != BindDirection.INOUT or max_size is None \
           or not isinstance(value, (str, bytes)):
            return
        if len(value) > max_size:
            raise BindSizeError(f"NJS-058: maxSize of {max_size} is too small for value"
                                f" of length {len(value)} in"
                                f" {self._where(name, position)}", code='NJS-058',
                                max_size=max_size, actual_size=len(value))
    def _where(self, name: Optional[str], position: Optional[int]) -> str:
        if name is not None:
            return f'bind ":{name}"'
        if position is None:
            return 'bind'
        return f'bind position {position}'
    def _element_error(self, index: int, name: Optional[str],
                       position: Optional[int]) -> BindArrayElementError:
        if name is None:
            return BindArrayElementError(f"NJS-052: invalid data type at array index"
                                         f" {index} for {self._where(None, position)}",
                                         code='NJS-052', index=index, position=position)
        return BindArrayElementError(f"NJS-037: invalid data type at array index {index}"
                                     f" for bind \":{name}\"", index=index, bind_name=name)
    def resolve_all(self, binds: BINDS=None) -> List[ResolvedBind]:
        """Returns resolved binds for statement.

        Arguments:
            binds: Mapping of bind names to values or `.BindSpec` (named binds), or
                   sequence of values or `.BindSpec` (positional binds).

        When several names normalize to the same bind name, the last one wins.

        Raises:
            InterfaceError: When binds are neither mapping nor sequence.
            BindNameError: When bind name is not valid.
            Error: Any error raised by `resolve()`.
        """
        if binds is None:
            return []
        if isinstance(binds, Mapping):
            named: Dict[str, Any] = {}
            for key, spec in binds.items():
                named[normalize_bind_name(key)] = spec
            return [self.resolve(spec, name=name) for name, spec in named.items()]
        if isinstance(binds, (list, tuple)):
            return [self.resolve(spec, position=i) for i, spec in enumerate(binds, 1)]
        raise InterfaceError(f"NJS-044: bind parameters must be a mapping or sequence:"
                             f" {type(binds).__name__}", code='NJS-044')
    def resolve_many(self, rows: Sequence[BINDS],
                     bind_defs: BINDS=None) -> List[List[ResolvedBind]]:
        """Returns resolved binds for each row of many-row execution.

        Arguments:
            rows: Rows of bind values, all either mappings or sequences.
            bind_defs: `.BindSpec` definitions (without values) keyed like row values.
                       Types are inferred from the first non-NULL value in each column
                       when not specified.

        Raises:
            BindArrayElementError: When value in row does not match the bind type. Error
                                   `index` is the row index.
        """
        if bind_defs is None:
            bind_defs = self._infer_bind_defs(rows)
        named = isinstance(bind_defs, Mapping)
        if named:
            defs = {normalize_bind_name(key): spec for key, spec in bind_defs.items()}
        else:
            defs = dict(enumerate(bind_defs, 1))
        result = []
        for index, row in enumerate(rows):
            if named:
                values = {normalize_bind_name(key): value for key, value in row.items()}
            else:
                values = dict(enumerate(row, 1))
            resolved = []
            for key, bind_def in defs.items():
                if not isinstance(bind_def, BindSpec):
                    bind_def = BindSpec(type=bind_def)
                spec = BindSpec(values.get(key), bind_def.type, bind_def.dir,
                                bind_def.max_size, bind_def.native_type)
                try:
                    resolved.append(self.resolve(spec, name=key if named else None,
                                                 position=None if named else key))
                except (BindTypeMismatchError, UnsupportedValueError):
                    raise self._element_error(index, key if named else None,
                                              None if named else key) from None
            result.append(resolved)
        return result
    def _infer_bind_defs(self, rows: Sequence[BINDS]) -> BINDS:
        if not rows:
            return []
        if isinstance(rows[0], Mapping):
            columns: Dict[str, List[Any]] = {}
            for row in rows:
                for key, value in row.items():
                    columns.setdefault(key, []).append(value)
            return {key: BindSpec(type=self._infer_column_type(key, None, values))
                    for key, values in columns.items()}
        width = max(len(row) for row in rows)
        return [BindSpec(type=self._infer_column_type(None, i + 1,
                                                      [row[i] if i < len(row) else None
                                                       for row in rows]))
                for i in range(width)]
    def _infer_column_type(self, name: Optional[str], position: Optional[int],
                           values: List[Any]) -> Any:
        for index, value in enumerate(values):
            if value is None or value is UNDEFINED or value == '':
                continue
            try:
                logical = resolve_default_type(value)
            except UnsupportedValueError:
                raise self._element_error(index, name, position) from None
            if isinstance(value, DbObject):
                return value._type_
            return logical
        return LogicalType.STRING
    @property
    def config(self) -> CoercionConfig:
        """Configuration used by resolver.
        """
        return coercion_config if self._config is None else self._config
    @property
    def encoding(self) -> str:
        """Encoding used for character values.
        """
        return self.config.encoding.value
