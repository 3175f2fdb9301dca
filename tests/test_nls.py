# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
#   PROGRAM/MODULE: dbcoerce
#   FILE:           tests/test_nls.py
#   DESCRIPTION:    Tests for session locale and formatting
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

import datetime
from decimal import Decimal

import pytest
from dateutil import tz
from dbcoerce import SessionLocale, NativeType, NlsError, DatabaseError, \
     apply_session_command, is_session_command, format_number, number_to_text, \
     canonical_number, format_date, parse_date, format_timestamp, iso_format, get_timezone

# Session locale

def test_for_territory(america, spain):
    assert america == SessionLocale()
    assert (spain.decimal_separator, spain.group_separator) == (',', '.')
    assert spain.date_format == 'DD/MM/RR'
    locale = SessionLocale.for_territory('united  kingdom')
    assert locale.territory == 'UNITED KINGDOM'
    assert locale.decimal_separator == '.'
    with pytest.raises(NlsError, match='ORA-12705') as cm:
        SessionLocale.for_territory('ATLANTIS')
    assert cm.value.code == 'ORA-12705'
    assert isinstance(cm.value, DatabaseError)

def test_numeric_characters(america):
    locale = america.with_numeric_characters(', ')
    assert (locale.decimal_separator, locale.group_separator) == (',', ' ')
    assert america.decimal_separator == '.'
    for chars in (',', ',,', '1.', '.-', ', .'):
        with pytest.raises(NlsError):
            america.with_numeric_characters(chars)

def test_is_session_command():
    assert is_session_command("ALTER SESSION SET NLS_TERRITORY = SPAIN")
    assert is_session_command("  alter  session\n set time_zone='UTC';")
    assert not is_session_command("SELECT 1 FROM DUAL")
    assert not is_session_command("ALTER TABLE T ADD X NUMBER")

def test_apply_session_command(america):
    locale = apply_session_command(america, "ALTER SESSION SET NLS_NUMERIC_CHARACTERS = ', '")
    assert locale.decimal_separator == ','
    assert locale.group_separator == ' '
    assert america.decimal_separator == '.'
    locale = apply_session_command(america, "alter session set nls_territory = 'Spain'")
    assert locale == SessionLocale.for_territory('SPAIN')
    locale = apply_session_command(america,
                                   "ALTER SESSION SET NLS_DATE_FORMAT = 'YYYY-MM-DD'"
                                   " NLS_TIMESTAMP_FORMAT = 'YYYY-MM-DD HH24:MI:SS.FF3'"
                                   " TIME_ZONE = '+05:30'")
    assert locale.date_format == 'YYYY-MM-DD'
    assert locale.timestamp_format == 'YYYY-MM-DD HH24:MI:SS.FF3'
    assert locale.time_zone == '+05:30'
    # territory resets numeric characters and formats
    locale = apply_session_command(locale, "ALTER SESSION SET NLS_TERRITORY = GERMANY")
    assert locale.date_format == 'DD.MM.RR'
    assert locale.time_zone == '+05:30'
    # non-locale parameter
    assert apply_session_command(america, "ALTER SESSION SET CURRENT_SCHEMA = HR") == america

@pytest.mark.parametrize('command, code', [
    ("SELECT 1 FROM DUAL", 'ORA-00922'),
    ("ALTER SESSION SET", 'ORA-00922'),
    ("ALTER SESSION SET NLS_DATE_FORMAT", 'ORA-00922'),
    ("ALTER SESSION SET NLS_DATE_FORMAT = 'DD-MON-RR' garbage", 'ORA-00922'),
    ("ALTER SESSION SET NLS_DATE_FORMAT = 'QQQ'", 'ORA-01821'),
    ("ALTER SESSION SET NLS_TERRITORY = 'ATLANTIS'", 'ORA-12705'),
    ("ALTER SESSION SET NLS_NUMERIC_CHARACTERS = ','", 'ORA-12705'),
    ("ALTER SESSION SET TIME_ZONE = 'Nowhere/Atlantis'", 'ORA-01882'),
])
def test_apply_session_command_invalid(america, command, code):
    with pytest.raises(NlsError, match=code) as cm:
        apply_session_command(america, command)
    assert cm.value.code == code

def test_get_timezone():
    assert get_timezone('UTC') is tz.UTC
    offset = get_timezone('-03:30')
    assert offset.utcoffset(None) == datetime.timedelta(hours=-3, minutes=-30)
    assert get_timezone('Europe/Prague') is not None
    with pytest.raises(NlsError, match='ORA-01882'):
        get_timezone('Nowhere/Atlantis')

def test_time_zone_keywords(america):
    assert isinstance(get_timezone('LOCAL'), tz.tzlocal)
    assert get_timezone('dbtimezone') is tz.UTC
    locale = apply_session_command(america, "ALTER SESSION SET TIME_ZONE = LOCAL")
    assert locale.time_zone == 'LOCAL'
    locale = apply_session_command(america, "ALTER SESSION SET TIME_ZONE = DBTIMEZONE")
    assert locale.time_zone == 'DBTIMEZONE'

# Numbers

def test_canonical_number():
    assert canonical_number(38.73) == '38.73'
    assert canonical_number(1038) == '1038'
    assert canonical_number(Decimal('1.50')) == '1.5'
    assert canonical_number(1e20) == '100000000000000000000'
    assert canonical_number(-0.0) == '0'
    assert canonical_number(0.5) == '0.5'
    assert canonical_number(float('nan')) == 'Nan'
    assert canonical_number(float('-inf')) == '-Inf'

def test_format_number_without_template(spain):
    # default rendering ignores locale separators
    assert format_number(38.73, spain) == '38.73'
    assert format_number(1999.99, spain) == '1999.99'

def test_number_to_text(america, spain):
    assert number_to_text(38.73, spain) == '38,73'
    assert number_to_text(38.73, america) == '38.73'
    assert number_to_text(Decimal('1038.73'), america.with_numeric_characters(', ')) \
           == '1038,73'
    assert number_to_text(100, spain) == '100'
    assert number_to_text(1999.99, spain) == '1999,99'

@pytest.mark.parametrize('value, template, expected', [
    (1038.73, 'FM999G999G999D999', '1 038,73'),
    (1038, 'FM999G999D99', '1 038,'),
    (1999.99, '9G999D99', ' 1 999,99'),
    (-5, '999', '  -5'),
    (5, '999', '   5'),
    (0, '999', '   0'),
    (0.5, '0D99', ' 0,50'),
    (0.5, 'FM9D99', ',5'),
    (5, 'S999', '  +5'),
    (-5, 'FM999MI', '5-'),
    (-1234.567, 'FM9,999.99', '-1,234.57'),
    (2.345, 'FM0.00', '2.35'),
    (12345, '999', '####'),
    (float('nan'), '999', '####'),
])
def test_format_number_template(value, template, expected):
    locale = SessionLocale.for_territory('FRANCE')
    assert format_number(value, locale, template) == expected

def test_format_number_invalid(america):
    for template in ('99X', '9D9D9', 'FM', '9.99G9'):
        with pytest.raises(NlsError, match='ORA-01481'):
            format_number(1, america, template)
    with pytest.raises(NlsError, match='ORA-01722'):
        format_number('abc', america, '999')

# Dates

def test_format_date(america, spain):
    value = datetime.datetime(2021, 12, 31, 13, 5, 9, 120000)
    assert format_date(value, america) == '31-DEC-21'
    assert format_date(value, spain) == '31/12/21'
    assert format_date(datetime.date(2021, 3, 5), america, 'DD.MM.YYYY') == '05.03.2021'
    assert format_date(value, america, 'YYYY-MM-DD HH24:MI:SS') == '2021-12-31 13:05:09'
    assert format_date(value, america, america.timestamp_format) \
           == '31-DEC-21 01.05.09.120000 PM'
    assert format_date(value, spain, spain.timestamp_format) == '31/12/21 13:05:09,120000'
    assert format_date(value, america, 'Month') == 'December '
    assert format_date(datetime.date(2021, 3, 5), america, 'FMMonth DD, YYYY') \
           == 'March 5, 2021'
    assert format_date(value, america, 'Dy dy DY "at" HH12 am') == 'Fri fri FRI at 01 pm'
    assert format_date(value, america, 'SS.FF3') == '09.120'

def test_format_date_timezone(america):
    value = datetime.datetime(2021, 12, 31, 10, 20, 30, tzinfo=tz.tzoffset(None, -12600))
    assert format_date(value, america, 'HH24:MI TZH:TZM') == '10:20 -03:30'
    assert format_date(value, america, 'HH24:MI TZR') == '10:20 -03:30'
    # naive values use session time zone
    value = datetime.datetime(2021, 12, 31, 10, 20, 30)
    assert format_date(value, america, 'TZR') == '+00:00'

def test_format_date_invalid(america):
    with pytest.raises(NlsError, match='ORA-01821'):
        format_date(datetime.date(2021, 1, 1), america, 'DD-QQ-YYYY')

@pytest.mark.parametrize('value', [
    datetime.datetime(2021, 12, 31),
    datetime.datetime(1999, 1, 1),
    datetime.datetime(2049, 6, 30),
    datetime.datetime(1950, 2, 28),
])
def test_date_round_trip(america, spain, value):
    for locale in (america, spain, SessionLocale.for_territory('JAPAN')):
        assert parse_date(format_date(value, locale), locale) == value

def test_date_value_round_trip(america, spain):
    value = datetime.date(2021, 12, 31)
    for locale in (america, spain):
        parsed = parse_date(format_date(value, locale), locale)
        assert isinstance(parsed, datetime.datetime)
        assert parsed == datetime.datetime(2021, 12, 31)
        assert parsed.date() == value

@pytest.mark.parametrize('fmt', [
    'DD-MON-RR HH.MI.SSXFF AM',
    'YYYY-MM-DD HH24:MI:SS.FF6',
    'FMMonth DD, YYYY HH12:MI:SS PM',
    'Day DD Month YYYY HH24:MI:SS.FF',
    'DD.MM.RRRR HH24:MI:SS.FF6 TZR',
])
def test_timestamp_round_trip(america, fmt):
    value = datetime.datetime(2021, 5, 7, 23, 59, 58, 123456)
    if 'TZR' in fmt:
        value = value.replace(tzinfo=tz.tzoffset(None, 7200))
    if 'FF' not in fmt:
        value = value.replace(microsecond=0)
    assert parse_date(format_date(value, america, fmt), america, fmt) == value

def test_parse_date(america):
    assert parse_date('31-dec-21', america) == datetime.datetime(2021, 12, 31)
    assert parse_date('  31-DEC-2021  ', america, 'DD-MON-YYYY') \
           == datetime.datetime(2021, 12, 31)
    assert parse_date('1-1-99', america, 'DD-MM-RR') == datetime.datetime(1999, 1, 1)
    value = parse_date('2021-12-31 10:20 +02:00', america, 'YYYY-MM-DD HH24:MI TZR')
    assert value.utcoffset() == datetime.timedelta(hours=2)
    value = parse_date('2021-12-31 10:20 -03 30', america, 'YYYY-MM-DD HH24:MI TZH TZM')
    assert value.utcoffset() == datetime.timedelta(hours=-3, minutes=-30)

@pytest.mark.parametrize('text, code', [
    ('31-XYZ-21', 'ORA-01861'),
    ('31/DEC/21', 'ORA-01861'),
    ('31-DEC-21 10:00', 'ORA-01830'),
    ('31-FEB-21', 'ORA-01839'),
])
def test_parse_date_invalid(america, text, code):
    with pytest.raises(NlsError, match=code) as cm:
        parse_date(text, america)
    assert cm.value.code == code

def test_format_timestamp(america):
    value = datetime.datetime(2021, 12, 31, 22, 30, tzinfo=tz.UTC)
    locale = america.with_numeric_characters(',.')
    assert format_timestamp(value.replace(tzinfo=None), NativeType.DATE, locale) \
           == '31-DEC-21'
    assert format_timestamp(value.replace(tzinfo=None), NativeType.TIMESTAMP, locale) \
           == '31-DEC-21 10.30.00,000000 PM'
    assert format_timestamp(value, NativeType.TIMESTAMP_TZ, locale) \
           == '31-DEC-21 10.30.00,000000 PM +00:00'
    locale = apply_session_command(locale, "ALTER SESSION SET TIME_ZONE = '+02:00'")
    assert format_timestamp(value, NativeType.TIMESTAMP_LTZ, locale) \
           == '01-JAN-22 12.30.00,000000 AM +02:00'

# ISO format

def test_iso_format():
    assert iso_format(datetime.datetime(2021, 12, 31), NativeType.DATE) \
           == '2021-12-31T00:00:00'
    assert iso_format(datetime.date(2021, 12, 31), NativeType.DATE) == '2021-12-31T00:00:00'
    assert iso_format(datetime.datetime(2021, 12, 31, 1, 2, 3, 456), NativeType.DATE) \
           == '2021-12-31T01:02:03'
    assert iso_format(datetime.datetime(2021, 12, 31, 1, 2, 3), NativeType.TIMESTAMP) \
           == '2021-12-31T01:02:03'
    assert iso_format(datetime.datetime(2021, 12, 31, 1, 2, 3, 456), NativeType.TIMESTAMP) \
           == '2021-12-31T01:02:03.000456'
    value = datetime.datetime(2021, 12, 31, 10, 20, 30, tzinfo=tz.tzoffset(None, 3600))
    assert iso_format(value, NativeType.TIMESTAMP) == '2021-12-31T10:20:30'
    assert iso_format(value, NativeType.TIMESTAMP_TZ) == '2021-12-31T10:20:30+01:00'
    locale = SessionLocale(time_zone='+02:00')
    assert iso_format(value, NativeType.TIMESTAMP_LTZ, locale) == '2021-12-31T11:20:30+02:00'

def test_iso_format_ignores_locale(america, spain):
    value = datetime.datetime(2021, 12, 31, 1, 2, 3, 500000)
    assert iso_format(value, NativeType.TIMESTAMP, america) \
           == iso_format(value, NativeType.TIMESTAMP, spain) == '2021-12-31T01:02:03.500000'
