# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/fetch.py
# DESCRIPTION:    Fetch coercion
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

"""dbcoerce - Fetch coercion

Converts native column values into application values, honoring per-column and global
fetch overrides, and shapes fetched rows.
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import datetime
from dateutil import tz
from firebird.base.logging import LoggingIdMixin, get_logger
from .types import InterfaceError, FetchTypeError, LogicalType, NativeType, OutFormat, \
     ColumnMetadata, FetchSpec, NativeObject, RefCursor, FETCH_INFO
from .config import CoercionConfig, coercion_config
from .registry import logical_type_of_column, allowed_fetch_types, is_binary_type, \
     is_numeric_type, is_temporal_type
from .nls import SessionLocale, to_decimal, canonical_number, number_to_text, \
     format_timestamp, iso_format

#: Row shaped according to `.OutFormat`
ROW = Union[Tuple, Dict[str, Any]]

class FetchCoercer(LoggingIdMixin):
    """Converts fetched native values into application values.

    Arguments:
        config: Configuration. Global `.coercion_config` is used when not specified.
        marshaller: Object marshaller used for OBJECT columns.

    Coercion is pure, it never changes the coercer, configuration or native values.
    """
    def __init__(self, config: CoercionConfig=None, *, marshaller=None):
        self._config: CoercionConfig = config
        #: `.ObjectMarshaller` used for OBJECT columns
        self.marshaller = marshaller
    def _check_override(self, db_type: NativeType, override: LogicalType,
                        column: str=None) -> None:
        if override not in allowed_fetch_types(db_type):
            where = f" for column {column!r}" if column else ''
            raise FetchTypeError(f"NJS-021: invalid type for conversion specified{where}:"
                                 f" {getattr(override, 'name', override)} from"
                                 f" {db_type.name}", column=column)
    def _coerce_number(self, value: Any, db_type: NativeType,
                       column: Optional[ColumnMetadata]) -> Any:
        if db_type in (NativeType.BINARY_FLOAT, NativeType.BINARY_DOUBLE):
            return float(value)
        if db_type == NativeType.BINARY_INTEGER:
            return int(value)
        d = to_decimal(value)
        if column is not None and column.scale == 0 and column.precision:
            return int(d)
        if self.config.fetch_decimals.value:
            return d
        if (column is None or (column.precision is None and column.scale is None)) \
           and isinstance(value, int):
            return value
        return float(d)
    def _coerce_temporal(self, value: Any, db_type: NativeType,
                         locale: SessionLocale) -> datetime.datetime:
        if not isinstance(value, datetime.datetime):
            value = datetime.datetime.combine(value, datetime.time())
        if db_type in (NativeType.DATE, NativeType.TIMESTAMP):
            return value.replace(tzinfo=None)
        if value.tzinfo is None:
            value = value.replace(tzinfo=tz.UTC if db_type == NativeType.TIMESTAMP_LTZ
                                  else locale.get_timezone())
        if db_type == NativeType.TIMESTAMP_LTZ:
            return value.astimezone(locale.get_timezone())
        return value
    def _default(self, value: Any, db_type: NativeType, locale: SessionLocale,
                 column: Optional[ColumnMetadata]) -> Any:
        logical = logical_type_of_column(db_type)
        if logical == LogicalType.NUMBER:
            return self._coerce_number(value, db_type, column)
        if logical == LogicalType.STRING:
            if isinstance(value, (bytes, bytearray, memoryview)):
                return bytes(value).decode(locale.encoding)
            return str(value)
        if logical == LogicalType.BUFFER:
            return bytes(value)
        if logical == LogicalType.CURSOR:
            return value if isinstance(value, RefCursor) else RefCursor(value)
        if logical == LogicalType.OBJECT:
            if isinstance(value, NativeObject):
                if self.marshaller is None or column is None or column.object_type is None:
                    raise InterfaceError("NJS-077: object type metadata not available"
                                         f" for column {getattr(column, 'name', None)!r}",
                                         code='NJS-077')
                return self.marshaller.from_native(value, column.object_type)
            return value
        return self._coerce_temporal(value, db_type, locale)
    def coerce(self, value: Any, db_type: NativeType, override: LogicalType=None, *,
               locale: SessionLocale=None, column: ColumnMetadata=None) -> Any:
        """Returns application value for native column value.

        Arguments:
            value: Native column value. `None` is SQL NULL.
            db_type: Native column type.
            override: Requested application representation.
            locale: Session locale, used by STRING override and time zone types.
            column: Column metadata (precision, scale and object type).

        Without override, NUMBER columns return `int` for integer columns (scale 0),
        `~decimal.Decimal` when `fetch_decimals` is set, otherwise `float`; character
        columns return `str`, binary columns `bytes` and date/time columns
        `~datetime.datetime` (timezone-aware for TZ types).

        STRING override renders values with session locale, ISO_STRING override is
        locale-invariant, BUFFER override returns `bytes`.

        Raises:
            FetchTypeError: When override is not allowed for column type.
        """
        if override is not None:
            self._check_override(db_type, override, getattr(column, 'name', None))
        if value is None:
            return None
        if locale is None:
            locale = SessionLocale(encoding=self.config.encoding.value)
        if is_numeric_type(db_type) and isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode('ascii')
        if override is None or override == logical_type_of_column(db_type) \
           or override in (LogicalType.NUMBER, LogicalType.DATE):
            return self._default(value, db_type, locale, column)
        if is_binary_type(db_type):
            return bytes(value).hex().upper() if override == LogicalType.STRING \
                else bytes(value)
        if is_temporal_type(db_type):
            value = self._coerce_temporal(value, db_type, locale)
            if override == LogicalType.ISO_STRING:
                return iso_format(value, db_type, locale)
            return format_timestamp(value, db_type, locale)
        # numeric column as text
        if db_type == NativeType.BINARY_INTEGER:
            value = int(value)
        if override == LogicalType.ISO_STRING:
            return canonical_number(value)
        return number_to_text(value, locale)
    def _global_override(self, db_type: NativeType) -> Optional[LogicalType]:
        logical = logical_type_of_column(db_type)
        if logical in self.config.fetch_as_string.value:
            return LogicalType.STRING
        if logical in self.config.fetch_as_buffer.value:
            return LogicalType.BUFFER
        return None
    def resolve_overrides(self, columns: Sequence[ColumnMetadata],
                          fetch_info: FETCH_INFO=None) -> List[Optional[LogicalType]]:
        """Returns effective fetch override for each column.

        Per-column `fetch_info` takes precedence over global `fetch_as_string` and
        `fetch_as_buffer` configuration. Global overrides apply only to columns that
        allow them.

        Arguments:
            columns: Column metadata.
            fetch_info: Overrides keyed by column name. Values are `.LogicalType`,
                        `.FetchSpec` or mapping with ``type`` key.

        Raises:
            FetchTypeError: When per-column override is not allowed for column type.
        """
        by_name: Dict[str, LogicalType] = {}
        for key, item in (fetch_info or {}).items():
            if isinstance(item, FetchSpec):
                by_name[item.column] = item.type
            elif isinstance(item, Mapping):
                by_name[key] = item['type']
            else:
                by_name[key] = item
        result = []
        for column in columns:
            override = by_name.get(column.name)
            if override is not None:
                self._check_override(column.db_type, override, column.name)
            else:
                override = self._global_override(column.db_type)
                if override is not None \
                   and override not in allowed_fetch_types(column.db_type):
                    override = None
            result.append(override)
        if any(o is not None for o in result):
            get_logger(self).debug("Fetch overrides: %s",
                                   {c.name: o.name for c, o in zip(columns, result)
                                    if o is not None})
        return result
    def coerce_row(self, columns: Sequence[ColumnMetadata], row: Sequence[Any],
                   overrides: Sequence[Optional[LogicalType]], *,
                   out_format: OutFormat=OutFormat.ARRAY,
                   locale: SessionLocale=None) -> ROW:
        """Returns row of application values shaped according to output format.

        Arguments:
            columns: Column metadata.
            row: Native column values.
            overrides: Effective override for each column (see `resolve_overrides`).
            out_format: Row shape.
            locale: Session locale.
        """
        values = tuple(self.coerce(value, column.db_type, override, locale=locale,
                                   column=column)
                       for column, value, override in zip(columns, row, overrides))
        if out_format == OutFormat.OBJECT:
            return dict(zip((column.name for column in columns), values))
        return values
    def coerce_rows(self, columns: Sequence[ColumnMetadata], rows: Sequence[Sequence[Any]],
                    *, fetch_info: FETCH_INFO=None, out_format: OutFormat=None,
                    locale: SessionLocale=None) -> List[ROW]:
        """Returns fetched rows converted to application values.

        All overrides are validated before any value is converted.

        Arguments:
            columns: Column metadata.
            rows: Rows of native column values.
            fetch_info: Per-column overrides.
            out_format: Row shape. Configured `out_format` is used when not specified.
            locale: Session locale.

        Raises:
            InterfaceError: When `out_format` is not valid (``NJS-004``).
            FetchTypeError: When override is not allowed for column type.
        """
        out_format = self.check_out_format(out_format)
        overrides = self.resolve_overrides(columns, fetch_info)
        return [self.coerce_row(columns, row, overrides, out_format=out_format,
                                locale=locale) for row in rows]
    def check_out_format(self, out_format: Any) -> OutFormat:
        """Returns validated output format (configured default for None).

        Raises:
            InterfaceError: When `out_format` is not valid (``NJS-004``).
        """
        if out_format is None:
            return self.config.out_format.value
        try:
            return OutFormat(out_format)
        except ValueError:
            raise InterfaceError(f"NJS-004: invalid value for property outFormat:"
                                 f" {out_format!r}", code='NJS-004') from None
    @property
    def config(self) -> CoercionConfig:
        """Configuration used by coercer.
        """
        return coercion_config if self._config is None else self._config
