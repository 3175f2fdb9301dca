# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
#   PROGRAM/MODULE: dbcoerce
#   FILE:           tests/test_session.py
#   DESCRIPTION:    Tests for session
#   CREATED:        16.10.2026
#
#  Software distributed under the License is distributed AS IS,
#  WITHOUT WARRANTY OF ANY KIND, either express or implied.
#  See the License for the specific language governing rights
#  and limitations under the License.
#
#  All Rights Reserved.
#  Contributor(s): ______________________________________.
#
# See LICENSE for details.

from __future__ import annotations

import asyncio
import datetime

import pytest
from dbcoerce import Session, SessionLocale, SessionHook, BindSpec, BindDirection, \
     LogicalType, NativeType, NativeResult, NativeObject, ColumnMetadata, OutFormat, \
     ConcurrentCallError, DatabaseError, InterfaceError, NlsError, UnsupportedValueError, \
     BindArrayElementError, DbObject, StructuredValueSizeError
from dbcoerce.hooks import add_hook

AMOUNT = ColumnMetadata('AMOUNT', NativeType.NUMBER, precision=10, scale=2)

def test_default_locale(stub, coercion_cfg):
    coercion_cfg.session_defaults.territory.value = 'SPAIN'
    coercion_cfg.session_defaults.time_zone.value = '+01:00'
    session = Session(stub, config=coercion_cfg)
    locale = session.current_locale()
    assert locale.territory == 'SPAIN'
    assert locale.decimal_separator == ','
    assert locale.time_zone == '+01:00'
    assert session.config is coercion_cfg
    assert not session.in_flight

def test_execute(session, stub):
    stub.result = NativeResult([AMOUNT], [(38.73, ), (None, )], rows_affected=None)
    result = asyncio.run(session.execute('SELECT AMOUNT FROM T WHERE ID = :id', {'id': 1}))
    assert result.rows == [(38.73, ), (None, )]
    assert result.metadata == [AMOUNT]
    assert result.out_binds == {}
    sql, binds, many = stub.calls[0]
    assert sql == 'SELECT AMOUNT FROM T WHERE ID = :id'
    assert binds[0].name == 'ID'
    assert binds[0].native_value == 1
    assert not many
    assert not session.in_flight

def test_execute_out_format(session, stub):
    stub.result = NativeResult([AMOUNT], [(38.73, )])
    result = asyncio.run(session.execute('SELECT AMOUNT FROM T',
                                         out_format=OutFormat.OBJECT))
    assert result.rows == [{'AMOUNT': 38.73}]
    with pytest.raises(InterfaceError, match='NJS-004'):
        asyncio.run(session.execute('SELECT AMOUNT FROM T', out_format=0))
    assert len(stub.calls) == 1

def test_locale_change(session, stub):
    # decimal comma
    result = asyncio.run(session.execute("ALTER SESSION SET NLS_NUMERIC_CHARACTERS = ', '"))
    assert result.rows == []
    assert session.current_locale().decimal_separator == ','
    stub.result = NativeResult([AMOUNT], [(b'1038.73', )])
    result = asyncio.run(session.execute('SELECT AMOUNT FROM T',
                                         fetch_info={'AMOUNT': LogicalType.STRING}))
    assert result.rows == [('1038,73', )]
    result = asyncio.run(session.execute('SELECT AMOUNT FROM T',
                                         fetch_info={'AMOUNT': LogicalType.ISO_STRING}))
    assert result.rows == [('1038.73', )]

def test_time_zone_change(session, stub):
    asyncio.run(session.execute("alter session set time_zone = '+02:00'"))
    column = ColumnMetadata('TS', NativeType.TIMESTAMP_LTZ)
    stub.result = NativeResult([column], [(datetime.datetime(2021, 12, 31, 22, 30), )])
    result = asyncio.run(session.execute('SELECT TS FROM T'))
    assert result.rows[0][0].isoformat() == '2022-01-01T00:30:00+02:00'
    result = asyncio.run(session.execute('SELECT TS FROM T',
                                         fetch_info={'TS': LogicalType.STRING}))
    assert result.rows == [('01-JAN-22 12.30.00.000000 AM +02:00', )]

def test_locale_unchanged_on_failure(session, stub, america):
    stub.error = DatabaseError('ORA-03113: end-of-file on communication channel',
                               code='ORA-03113')
    with pytest.raises(DatabaseError, match='ORA-03113'):
        asyncio.run(session.execute("ALTER SESSION SET NLS_TERRITORY = 'SPAIN'"))
    assert session.current_locale() == america
    assert len(stub.calls) == 1
    assert not session.in_flight

def test_invalid_command_never_reaches_database(session, stub, america):
    with pytest.raises(NlsError, match='ORA-01821'):
        asyncio.run(session.execute("ALTER SESSION SET NLS_DATE_FORMAT = 'QQQ'"))
    with pytest.raises(NlsError, match='ORA-00922'):
        asyncio.run(session.execute("ALTER SESSION SET NLS_DATE_FORMAT"))
    assert stub.calls == []
    assert session.current_locale() == america

def test_invalid_bind_never_reaches_database(session, stub):
    with pytest.raises(UnsupportedValueError, match='NJS-012'):
        asyncio.run(session.execute('SELECT 1 FROM DUAL WHERE :a = 1', {'a': True}))
    assert stub.calls == []
    assert not session.in_flight

def test_oversize_structured_bind_never_reaches_database(session, stub, names_type,
                                                         person_type):
    with pytest.raises(StructuredValueSizeError, match='NJS-143') as cm:
        asyncio.run(session.execute('BEGIN p(:t); END;',
                                    {'t': BindSpec(['x' * 11], names_type)}))
    assert cm.value.index == 0
    with pytest.raises(StructuredValueSizeError, match='NJS-142') as cm:
        asyncio.run(session.execute('BEGIN p(:p); END;',
                                    {'p': BindSpec({'NAME': 'Abcdefghijk'}, person_type)}))
    assert cm.value.attr_name == 'NAME'
    assert stub.calls == []
    assert not session.in_flight

def test_concurrent_calls(
session, stub):
    async def run():
        return await asyncio.gather(session.execute('SELECT 1 FROM DUAL'),
                                    session.execute('SELECT 2 FROM DUAL'),
                                    return_exceptions=True)
    first, second = asyncio.run(run())
    assert first.rows == []
    assert isinstance(second, ConcurrentCallError)
    assert second.code == 'NJS-081'
    assert len(stub.calls) == 1
    assert not session.in_flight
    # session is usable again after the call completes
    asyncio.run(session.execute('SELECT 3 FROM DUAL'))
    assert len(stub.calls) == 2

def test_out_binds(session, stub):
    stub.result = NativeResult(out_binds={'OUT': 5, 'TXT': b'abc', 'ARR': [b'a', None],
                                          'CUR': 'handle'})
    result = asyncio.run(session.execute(
        'BEGIN p(:inp, :out, :txt, :arr, :cur); END;',
        {'inp': 1,
         'out': BindSpec(type=LogicalType.NUMBER, dir=BindDirection.OUT),
         'txt': BindSpec('a', LogicalType.STRING, BindDirection.INOUT, 10),
         'arr': BindSpec(type=LogicalType.STRING, dir=BindDirection.OUT, max_size=5,
                         max_array_size=3),
         'cur': BindSpec(type=LogicalType.CURSOR, dir=BindDirection.OUT)}))
    assert result.out_binds['OUT'] == 5
    assert result.out_binds['TXT'] == 'abc'
    assert result.out_binds['ARR'] == ['a', None]
    assert result.out_binds['CUR'].handle == 'handle'
    assert 'INP' not in result.out_binds

def test_out_binds_positional(session, stub):
    stub.result = NativeResult(out_binds={1: b'x'})
    result = asyncio.run(session.execute(
        'BEGIN p(:1, :2); END;',
        [1, BindSpec(type=LogicalType.STRING, dir=BindDirection.OUT, max_size=10)]))
    assert result.out_binds == {1: 'x'}

def test_execute_many(session, stub):
    stub.result = NativeResult(rows_affected=2)
    result = asyncio.run(session.execute_many('INSERT INTO T VALUES (:1, :2)',
                                              [[1, 'a'], [2, None]]))
    assert result.rows_affected == 2
    assert result.rows == []
    sql, binds, many = stub.calls[0]
    assert many
    assert len(binds) == 2
    assert [b.type for b in binds[1]] == [LogicalType.NUMBER, LogicalType.STRING]
    with pytest.raises(BindArrayElementError, match='NJS-052') as cm:
        asyncio.run(session.execute_many('INSERT INTO T VALUES (:1, :2)',
                                         [[1, 'a'], ['x', 'b']]))
    assert cm.value.index == 1
    assert len(stub.calls) == 1
    result = asyncio.run(session.execute_many(
        'INSERT INTO T VALUES (:a)', [{'a': '1.5'}],
        bind_defs={'a': BindSpec(type=LogicalType.STRING, max_size=10)}))
    assert stub.calls[-1][1][0][0].native_value == b'1.5'

def test_hooks(session, stub, hooks, america):
    requests = []
    changes = []
    def on_request(sess, sql, binds):
        requests.append((sess, sql, [b.name for b in binds], sess.in_flight))
    def on_change(sess, old, new):
        changes.append((sess, old, new))
    add_hook(SessionHook.EXECUTE_REQUEST, Session, on_request)
    add_hook(SessionHook.LOCALE_CHANGED, Session, on_change)
    asyncio.run(session.execute('SELECT 1 FROM DUAL WHERE :x = 1', {'x': 1}))
    assert requests == [(session, 'SELECT 1 FROM DUAL WHERE :x = 1', ['X'], True)]
    assert changes == []
    asyncio.run(session.execute("ALTER SESSION SET NLS_TERRITORY = 'SPAIN'"))
    assert len(changes) == 1
    sess, old, new = changes[0]
    assert sess is session
    assert old == america
    assert new == SessionLocale.for_territory('SPAIN')
    # unchanged locale does not fire the hook
    asyncio.run(session.execute("ALTER SESSION SET NLS_TERRITORY = 'SPAIN'"))
    assert len(changes) == 1
    assert len(requests) == 3

def test_get_object_class(session, stub, person_type):
    Person = session.get_object_class('hr.person')
    assert issubclass(Person, DbObject)
    assert Person().type_info is person_type
    assert session.get_object_class('HR.PERSON') is Person
    assert session.get_object_class('"HR.PERSON"') is Person
    assert stub.described == ['HR.PERSON']
    asyncio.run(session.execute('BEGIN p(:person); END;', {'person': Person(ID=1)}))
    bind = stub.calls[0][1][0]
    assert bind.type == LogicalType.OBJECT
    assert bind.native_value == NativeObject('HR.PERSON', {'ID': 1})
    column = ColumnMetadata('P', NativeType.OBJECT, object_type=person_type)
    stub.result = NativeResult([column], [(NativeObject('HR.PERSON', {'ID': 2}), )])
    result = asyncio.run(session.execute('SELECT P FROM T'))
    assert result.rows[0][0] == Person(ID=2)
