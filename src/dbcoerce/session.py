# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/session.py
# DESCRIPTION:    Session
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

"""dbcoerce - Session

Thin consumer of the coercion core. Session owns the session locale, resolves binds
before any native call, forwards calls to the `.NativeConnection` collaborator and
coerces returned values.
"""

from __future__ import annotations
from typing import Any, Dict, List, Sequence, Type
import itertools
from warnings import warn
from firebird.base.logging import LoggingIdMixin, get_logger
from .types import ConcurrentCallError, LogicalType, NativeType, BindDirection, \
     ResolvedBind, ColumnMetadata, ExecuteResult, NativeConnection, DbObjectType, \
     BINDS, FETCH_INFO
from .config import CoercionConfig, coercion_config
from .hooks import SessionHook, register_class, get_callbacks
from .nls import SessionLocale, is_session_command, apply_session_command
from .fetch import FetchCoercer
from .binds import BindResolver
from .objects import DbObject

_session_ids = itertools.count(1)

#: Native type used to coerce OUT bind values of each logical type
_OUT_BIND_TYPES = {LogicalType.STRING: NativeType.VARCHAR,
                   LogicalType.ISO_STRING: NativeType.VARCHAR,
                   LogicalType.BUFFER: NativeType.RAW,
                   LogicalType.NUMBER: NativeType.NUMBER,
                   LogicalType.DATE: NativeType.DATE,
                   LogicalType.TIMESTAMP: NativeType.TIMESTAMP,
                   LogicalType.TIMESTAMP_TZ: NativeType.TIMESTAMP_TZ,
                   LogicalType.TIMESTAMP_LTZ: NativeType.TIMESTAMP_LTZ,
                   LogicalType.CURSOR: NativeType.CURSOR,
                   LogicalType.OBJECT: NativeType.OBJECT,
                   LogicalType.COLLECTION: NativeType.OBJECT,
                   }

class Session(LoggingIdMixin):
    """Database session with typed bind and fetch coercion.

    Arguments:
        native: Collaborator that executes native calls.
        locale: Initial session locale. When not specified, it's built from
                `session_defaults` configuration.
        config: Configuration. Global `.coercion_config` is used when not specified.

    Only one call could be in flight at any time. Session locale is changed only by
    ``ALTER SESSION SET`` commands executed through `execute()`.
    """
    def __init__(self, native: NativeConnection, *, locale: SessionLocale=None,
                 config: CoercionConfig=None):
        self._native: NativeConnection = native
        self._config: CoercionConfig = config
        self._locale: SessionLocale = SessionLocale.from_config(self.config) \
            if locale is None else locale
        self._in_flight: bool = False
        self._types: Dict[str, DbObjectType] = {}
        self._logging_id_ = f'Session[{next(_session_ids)}]'
        #: `.FetchCoercer` for fetched values and OUT binds
        self.coercer: FetchCoercer = FetchCoercer(config)
        #: `.BindResolver` for statement binds
        self.resolver: BindResolver = BindResolver(config, coercer=self.coercer)
    def __del__(self):
        if getattr(self, '_in_flight', False):
            warn(f"Session '{self.logging_id}' disposed while call is in flight",
                 ResourceWarning)
    def __repr__(self):
        return f"{self.logging_id}"
    def _begin(self) -> None:
        if self._in_flight:
            raise ConcurrentCallError("NJS-081: concurrent operations on a session are"
                                      f" not supported: '{self.logging_id}' has a call"
                                      " in flight")
        self._in_flight = True
    def _set_locale(self, locale: SessionLocale) -> None:
        old, self._locale = self._locale, locale
        get_logger(self).debug("Session locale changed: %s", locale)
        for hook in get_callbacks(SessionHook.LOCALE_CHANGED, self):
            hook(self, old, locale)
    def _coerce_out_binds(self, binds: List[ResolvedBind], values: Dict[Any, Any],
                          locale: SessionLocale) -> Dict[Any, Any]:
        result = {}
        for index, bind in enumerate(binds):
            if bind.dir == BindDirection.IN:
                continue
            key = index if bind.name is None else bind.name
            if key not in values:
                continue
            db_type = _OUT_BIND_TYPES[bind.type]
            column = ColumnMetadata(bind.name or str(index), db_type,
                                    max_size=bind.max_size, object_type=bind.object_type)
            if bind.is_array:
                result[key] = None if values[key] is None else \
                    [self.coercer.coerce(v, db_type, locale=locale, column=column)
                     for v in values[key]]
            else:
                result[key] = self.coercer.coerce(values[key], db_type, locale=locale,
                                                  column=column)
        return result
    def current_locale(self) -> SessionLocale:
        """Returns session locale in effect.
        """
        return self._locale
    async def execute(self, sql: str, binds: BINDS=None, *, fetch_info: FETCH_INFO=None,
                      out_format: Any=None) -> ExecuteResult:
        """Executes SQL statement.

        Arguments:
            sql: SQL statement.
            binds: Bind values or `.BindSpec` definitions, keyed by name or by position.
            fetch_info: Per-column fetch overrides.
            out_format: Shape of returned rows. Configured default is used when not
                        specified.

        ``ALTER SESSION SET`` commands that set locale parameters are validated before
        the native call, and the new locale takes effect only after the native call
        succeeds.

        Raises:
            ConcurrentCallError: When another call is in flight.
            Error: Any bind, locale or fetch error. Binds are resolved before the native
                   call, so invalid binds never reach the database.

        Hooks:
            Event `.SessionHook.EXECUTE_REQUEST`: Executed after binds are resolved and
            before the native call. Hook must have signature::

                hook_func(session: Session, sql: str, binds: List[ResolvedBind]) -> None

            Event `.SessionHook.LOCALE_CHANGED`: Executed after session command changed
            the session locale. Hook must have signature::

                hook_func(session: Session, old: SessionLocale, new: SessionLocale) -> None
        """
        self._begin()
        try:
            new_locale = apply_session_command(self._locale, sql) \
                if is_session_command(sql) else None
            out_format = self.coercer.check_out_format(out_format)
            resolved = self.resolver.resolve_all(binds)
            for hook in get_callbacks(SessionHook.EXECUTE_REQUEST, self):
                hook(self, sql, resolved)
            native = await self._native.execute(sql, resolved, many=False)
            if new_locale is not None and new_locale != self._locale:
                self._set_locale(new_locale)
            locale = self._locale
            rows = self.coercer.coerce_rows(native.columns, native.rows,
                                            fetch_info=fetch_info, out_format=out_format,
                                            locale=locale)
            return ExecuteResult(list(native.columns), rows,
                                 self._coerce_out_binds(resolved, native.out_binds, locale),
                                 native.rows_affected)
        finally:
            self._in_flight = False
    async def execute_many(self, sql: str, rows: Sequence[BINDS], *,
                           bind_defs: BINDS=None) -> ExecuteResult:
        """Executes SQL statement for each row of bind values.

        Arguments:
            sql: SQL statement.
            rows: Rows of bind values, all keyed by name or all by position.
            bind_defs: `.BindSpec` definitions (type, direction, max_size) for binds.
                       Types are inferred from values when not specified.

        Raises:
            ConcurrentCallError: When another call is in flight.
            BindArrayElementError: When row value does not match the bind type. The
                                   error `index` is the row index.

        Hooks:
            Event `.SessionHook.EXECUTE_REQUEST`: Executed after binds of all rows are
            resolved and before the native call. Binds are passed as list of lists.
        """
        self._begin()
        try:
            resolved = self.resolver.resolve_many(rows, bind_defs)
            for hook in get_callbacks(SessionHook.EXECUTE_REQUEST, self):
                hook(self, sql, resolved)
            native = await self._native.execute(sql, resolved, many=True)
            return ExecuteResult(rows_affected=native.rows_affected)
        finally:
            self._in_flight = False
    def get_object_class(self, name: str) -> Type[DbObject]:
        """Returns application class for named structured database type.

        Type metadata is requested from native collaborator only once per name.

        Arguments:
            name: Type name, optionally qualified with schema. Unquoted names are
                  converted to uppercase.
        """
        key = name[1:-1] if name.startswith('"') and name.endswith('"') else name.upper()
        obj_type = self._types.get(key)
        if obj_type is None:
            obj_type = self._native.describe_type(key)
            self._types[key] = obj_type
        return self.resolver.marshaller.object_class(obj_type)
    @property
    def config(self) -> CoercionConfig:
        """Configuration used by session.
        """
        return coercion_config if self._config is None else self._config
    @property
    def in_flight(self) -> bool:
        """True while a call is in flight.
        """
        return self._in_flight

register_class(Session, SessionHook)
del register_class
