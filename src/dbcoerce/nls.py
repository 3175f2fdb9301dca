# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/nls.py
# DESCRIPTION:    Session locale, number and date/time formatting
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

"""dbcoerce - Session locale and locale-aware formatting

Session locale is an explicit immutable value that is passed to every formatting call.
It is changed only by session commands (``ALTER SESSION SET ...``) that return a new
`SessionLocale` instance.

Number and date formatting uses Oracle-style format models. Supported number format
elements are ``FM 9 0 G D , . S MI``, supported date format elements are
``YYYY RRRR YY RR MM MON MONTH DD DY DAY HH HH12 HH24 MI SS FF[1-9] AM PM X TZH TZM TZR FM``,
double-quoted literals and punctuation.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple, Union
import re
import datetime
import decimal
from decimal import Decimal, ROUND_HALF_UP
from dataclasses import dataclass, replace
from functools import lru_cache
from dateutil import tz
from .types import NativeType, NlsError
from .config import CoercionConfig, coercion_config

#: Territory defaults: (decimal separator, group separator, date format, timestamp format)
TERRITORIES: Dict[str, Tuple[str, str, str, str]] = {
    'AMERICA': ('.', ',', 'DD-MON-RR', 'DD-MON-RR HH.MI.SSXFF AM'),
    'SPAIN': (',', '.', 'DD/MM/RR', 'DD/MM/RR HH24:MI:SSXFF'),
    'GERMANY': (',', '.', 'DD.MM.RR', 'DD.MM.RR HH24:MI:SSXFF'),
    'FRANCE': (',', ' ', 'DD/MM/RR', 'DD/MM/RR HH24:MI:SSXFF'),
    'ITALY': (',', '.', 'DD-MON-RR', 'DD-MON-RR HH24:MI:SSXFF'),
    'UNITED KINGDOM': ('.', ',', 'DD/MM/RR', 'DD/MM/RR HH24:MI:SSXFF'),
    'JAPAN': ('.', ',', 'RR-MM-DD', 'RR-MM-DD HH24:MI:SSXFF'),
    'POLAND': (',', ' ', 'RR/MM/DD', 'RR/MM/DD HH24:MI:SSXFF'),
    }

MONTHS = ('JANUARY', 'FEBRUARY', 'MARCH', 'APRIL', 'MAY', 'JUNE', 'JULY', 'AUGUST',
          'SEPTEMBER', 'OCTOBER', 'NOVEMBER', 'DECEMBER')
DAYS = ('MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY', 'SATURDAY', 'SUNDAY')

_ALTER_SESSION = re.compile(r"^\s*ALTER\s+SESSION\s+SET\s+(?P<assignments>.*?)\s*;?\s*$",
                            re.IGNORECASE | re.DOTALL)
_ASSIGNMENT = re.compile(r"\s*(?P<name>[A-Za-z_][A-Za-z0-9_$#]*)\s*=\s*"
                         r"(?P<value>'(?:[^']|'')*'|\"[^\"]*\"|[^\s'\"]+)")
_DATE_TOKEN = re.compile(r'"[^"]*"|YYYY|RRRR|YY|RR|MONTH|MON|MM|DAY|DY|DD|HH24|HH12|HH|MI|SS'
                         r'|FF[1-9]?|AM|PM|TZH|TZM|TZR|FM|X|[\s\-/,.;:]', re.IGNORECASE)
_TZ_OFFSET = re.compile(r'^(?P<sign>[+-])(?P<hours>\d{1,2}):(?P<minutes>\d{2})$')
_NUMERIC_WIDTH = {'YYYY': 4, 'RRRR': 4, 'YY': 2, 'RR': 2, 'MM': 2, 'DD': 2, 'HH': 2,
                  'HH12': 2, 'HH24': 2, 'MI': 2, 'SS': 2}

def get_timezone(timezone: str) -> datetime.tzinfo:
    """Returns `datetime.tzinfo` for time zone region name or ``[+|-]HH:MM`` offset.

    Arguments:
        timezone: Time zone region (e.g. ``Europe/Prague``), ``UTC``, offset, ``LOCAL``
                  (operating system time zone) or ``DBTIMEZONE`` (database time zone,
                  taken as UTC).

    Raises:
        NlsError: When time zone is not recognized.
    """
    m = _TZ_OFFSET.match(timezone.strip())
    if m:
        seconds = int(m.group('hours')) * 3600 + int(m.group('minutes')) * 60
        return tz.tzoffset(None, -seconds if m.group('sign') == '-' else seconds)
    if timezone.strip().upper() == 'LOCAL':
        return tz.tzlocal()
    if timezone.strip().upper() in ('UTC', 'GMT', 'Z', 'DBTIMEZONE'):
        return tz.UTC
    result = tz.gettz(timezone.strip())
    if result is None:
        raise NlsError(f"ORA-01882: timezone region not found: {timezone}",
                       code='ORA-01882')
    return result

@dataclass(frozen=True)
class SessionLocale:
    """Locale in effect for a database session.

    Attributes:
        territory (str): Territory name
        decimal_separator (str): Decimal separator (``D`` and ``X`` format elements)
        group_separator (str): Group separator (``G`` format element)
        date_format (str): DATE format model
        timestamp_format (str): TIMESTAMP format model
        timestamp_tz_format (str): TIMESTAMP WITH [LOCAL] TIME ZONE format model
        time_zone (str): Session time zone
        encoding (str): Character set used for character data
    """
    territory: str = 'AMERICA'
    decimal_separator: str = '.'
    group_separator: str = ','
    date_format: str = 'DD-MON-RR'
    timestamp_format: str = 'DD-MON-RR HH.MI.SSXFF AM'
    timestamp_tz_format: str = 'DD-MON-RR HH.MI.SSXFF AM TZR'
    time_zone: str = 'UTC'
    encoding: str = 'utf-8'
    @classmethod
    def for_territory(cls, territory: str, *, time_zone: str='UTC',
                      encoding: str='utf-8') -> SessionLocale:
        """Returns locale with defaults for territory.

        Arguments:
            territory: Territory name (case-insensitive).
            time_zone: Session time zone.
            encoding: Character set used for character data.

        Raises:
            NlsError: When territory is not known (``ORA-12705``).
        """
        name = ' '.join(territory.split()).upper()
        if name not in TERRITORIES:
            raise NlsError(f"ORA-12705: Cannot access NLS data files or invalid"
                           f" environment specified: territory {territory!r}",
                           code='ORA-12705')
        dec_sep, grp_sep, date_fmt, ts_fmt = TERRITORIES[name]
        return cls(territory=name, decimal_separator=dec_sep, group_separator=grp_sep,
                   date_format=date_fmt, timestamp_format=ts_fmt,
                   timestamp_tz_format=ts_fmt + ' TZR', time_zone=time_zone,
                   encoding=encoding)
    @classmethod
    def from_config(cls, config: CoercionConfig=None) -> SessionLocale:
        """Returns locale built from session defaults in configuration.

        Arguments:
            config: Configuration. Global `.coercion_config` is used when not specified.
        """
        if config is None:
            config = coercion_config
        defaults = config.session_defaults
        result = cls.for_territory(defaults.territory.value,
                                   time_zone=defaults.time_zone.value,
                                   encoding=config.encoding.value)
        if defaults.numeric_characters.value is not None:
            result = result.with_numeric_characters(defaults.numeric_characters.value)
        for opt, attr in ((defaults.date_format, 'date_format'),
                          (defaults.timestamp_format, 'timestamp_format'),
                          (defaults.timestamp_tz_format, 'timestamp_tz_format')):
            if opt.value is not None:
                _compile_date_model(opt.value)
                result = replace(result, **{attr: opt.value})
        return result
    def with_numeric_characters(self, chars: str) -> SessionLocale:
        """Returns copy of locale with decimal and group separators replaced.

        Arguments:
            chars: Two characters, decimal separator followed by group separator.

        Raises:
            NlsError: When characters are not valid separators.
        """
        if (len(chars) != 2 or chars[0] == chars[1]
            or any(c.isdigit() or c in '+-<>' for c in chars)):
            raise NlsError(f"ORA-12705: Cannot access NLS data files or invalid"
                           f" environment specified: numeric characters {chars!r}",
                           code='ORA-12705')
        return replace(self, decimal_separator=chars[0], group_separator=chars[1])
    def get_timezone(self) -> datetime.tzinfo:
        """Returns `datetime.tzinfo` for session time zone.
        """
        return get_timezone(self.time_zone)

def _unquote(value: str) -> str:
    if value.startswith("'"):
        return value[1:-1].replace("''", "'")
    if value.startswith('"'):
        return value[1:-1]
    return value

def is_session_command(sql: str) -> bool:
    """Returns True when SQL is an ``ALTER SESSION SET`` command.
    """
    return _ALTER_SESSION.match(sql) is not None

def apply_session_command(locale: SessionLocale, command: str) -> SessionLocale:
    """Returns new session locale derived from locale by ``ALTER SESSION SET`` command.

    Recognized parameters are ``NLS_TERRITORY``, ``NLS_NUMERIC_CHARACTERS``,
    ``NLS_DATE_FORMAT``, ``NLS_TIMESTAMP_FORMAT``, ``NLS_TIMESTAMP_TZ_FORMAT`` and
    ``TIME_ZONE``. Other parameters do not affect the locale. Setting the territory
    resets separators and formats to territory defaults.

    Arguments:
        locale: Current session locale (it's never modified).
        command: Session command.

    Raises:
        NlsError: When command is malformed or assigns invalid value.
    """
    m = _ALTER_SESSION.match(command)
    if m is None:
        raise NlsError(f"ORA-00922: missing or invalid option: {command!r}")
    assignments = m.group('assignments')
    changes: List[Tuple[str, str]] = []
    pos = 0
    while pos < len(assignments):
        am = _ASSIGNMENT.match(assignments, pos)
        if am is None:
            raise NlsError(f"ORA-00922: missing or invalid option: {command!r}")
        changes.append((am.group('name').upper(), _unquote(am.group('value'))))
        pos = am.end()
        while pos < len(assignments) and assignments[pos].isspace():
            pos += 1
    if not changes:
        raise NlsError(f"ORA-00922: missing or invalid option: {command!r}")
    result = locale
    for name, value in changes:
        if name == 'NLS_TERRITORY':
            result = SessionLocale.for_territory(value, time_zone=result.time_zone,
                                                 encoding=result.encoding)
        elif name == 'NLS_NUMERIC_CHARACTERS':
            result = result.with_numeric_characters(value)
        elif name in ('NLS_DATE_FORMAT', 'NLS_TIMESTAMP_FORMAT', 'NLS_TIMESTAMP_TZ_FORMAT'):
            _compile_date_model(value)
            result = replace(result, **{name[4:].lower(): value})
        elif name == 'TIME_ZONE':
            get_timezone(value)
            result = replace(result, time_zone=value)
    return result

# Numbers

@dataclass(frozen=True)
class _NumberModel:
    fill: bool
    sign: Optional[str]
    int_part: str
    decimal: Optional[str]
    frac_part: str
    width: int

@lru_cache(maxsize=64)
def _compile_number_model(template: str) -> _NumberModel:
    model = template.upper()
    fill = model.startswith('FM')
    if fill:
        model = model[2:]
    width = len(model) + 1
    sign = None
    if model.startswith('S'):
        sign, model = 'S<', model[1:]
    elif model.endswith('MI'):
        sign, model = 'MI', model[:-2]
    elif model.endswith('S'):
        sign, model = 'S>', model[:-1]
    int_part = []
    frac_part = []
    dec = None
    for ch in model:
        if ch in '90':
            (int_part if dec is None else frac_part).append(ch)
        elif ch in 'G,' and dec is None:
            int_part.append(ch)
        elif ch in 'D.' and dec is None:
            dec = ch
        else:
            raise NlsError(f"ORA-01481: invalid number format model: {template!r}",
                           code='ORA-01481')
    if not int_part and not frac_part:
        raise NlsError(f"ORA-01481: invalid number format model: {template!r}",
                       code='ORA-01481')
    return _NumberModel(fill, sign, ''.join(int_part), dec, ''.join(frac_part), width)

def to_decimal(value: Union[int, float, Decimal, str]) -> Decimal:
    """Returns `~decimal.Decimal` for numeric value or numeric text.

    `float` values are converted through their shortest `repr`, so ``38.73`` becomes
    ``Decimal('38.73')``.

    Raises:
        NlsError: When value is not a number (``ORA-01722``).
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except decimal.InvalidOperation:
            pass
    raise NlsError(f"ORA-01722: invalid number: {value!r}", code='ORA-01722')

def canonical_number(value: Union[int, float, Decimal, str]) -> str:
    """Returns locale-invariant text for number, with period as decimal point and no
    exponent or trailing fractional zeros.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    d = to_decimal(value)
    if d.is_nan():
        return 'Nan'
    if d.is_infinite():
        return '-Inf' if d < 0 else 'Inf'
    if d == 0:
        return '0'
    return format(d.normalize(), 'f')

def number_to_text(value: Union[int, float, Decimal], locale: SessionLocale) -> str:
    """Returns text for number fetched as STRING: session decimal separator and no
    group separators.
    """
    text = canonical_number(value)
    return text.replace('.', locale.decimal_separator) if '.' in text else text

def format_number(value: Union[int, float, Decimal, str], locale: SessionLocale,
                  template: str=None) -> str:
    """Returns text representation of number.

    Arguments:
        value: Number.
        locale: Session locale.
        template: Number format model. Without it, locale-invariant canonical text is
                  returned (see `canonical_number`).

    When value does not fit into format model, the result is filled with ``#``.

    Raises:
        NlsError: When format model is not valid, or value is not a number.
    """
    if template is None:
        return canonical_number(value)
    model = _compile_number_model(template)
    d = to_decimal(value)
    if not d.is_finite():
        return '#' * model.width
    nfrac = len(model.frac_part)
    with decimal.localcontext() as ctx:
        ctx.prec = max(len(d.as_tuple().digits) + nfrac + 2, 28)
        d = d.quantize(Decimal(1).scaleb(-nfrac), rounding=ROUND_HALF_UP)
    negative = d < 0
    int_str, _, frac_str = format(abs(d), 'f').partition('.')
    frac_str = frac_str.ljust(nfrac, '0')
    if int_str == '0':
        int_str = ''
    digit_count = len(model.int_part.replace('G', '').replace(',', ''))
    if len(int_str) > digit_count:
        return '#' * model.width
    # integer part, right to left
    zero_from = -1
    k = 0
    for tok in reversed(model.int_part):
        if tok in '90':
            if tok == '0':
                zero_from = k
            k += 1
    positions: List[Optional[str]] = [None] * len(model.int_part)
    k = 0
    for i in range(len(model.int_part) - 1, -1, -1):
        tok = model.int_part[i]
        if tok in '90':
            if k < len(int_str):
                positions[i] = int_str[len(int_str) - 1 - k]
            elif k <= zero_from:
                positions[i] = '0'
            k += 1
    seen = False
    for i, tok in enumerate(model.int_part):
        if tok in '90':
            seen = seen or positions[i] is not None
        elif seen:
            positions[i] = locale.group_separator if tok == 'G' else ','
    if not seen and nfrac == 0 and digit_count:
        last = max(i for i, tok in enumerate(model.int_part) if tok in '90')
        positions[last] = '0'
    blanks = positions.count(None)
    body = ''.join(p for p in positions if p is not None)
    frac = frac_str[:nfrac]
    if model.fill:
        i = nfrac
        while i > 0 and model.frac_part[i - 1] == '9' and frac[i - 1] == '0':
            i -= 1
        frac = frac[:i]
    if model.decimal is not None:
        body += (locale.decimal_separator if model.decimal == 'D' else '.') + frac
    if model.sign == 'S<':
        text = ('-' if negative else '+') + body
    elif model.sign == 'S>':
        text = body + ('-' if negative else '+')
    elif model.sign == 'MI':
        text = body + ('-' if negative else ('' if model.fill else ' '))
    else:
        text = ('-' if negative else ('' if model.fill else ' ')) + body
    return text if model.fill else ' ' * blanks + text

# Dates

@lru_cache(maxsize=64)
def _compile_date_model(fmt: str) -> Tuple[Tuple[str, str], ...]:
    tokens = []
    pos = 0
    while pos < len(fmt):
        m = _DATE_TOKEN.match(fmt, pos)
        if m is None:
            raise NlsError(f"ORA-01821: date format not recognized: {fmt!r}",
                           code='ORA-01821')
        tok = m.group()
        if tok.startswith('"'):
            tokens.append(('LIT', tok[1:-1]))
        elif len(tok) == 1 and not tok.isalpha():
            tokens.append(('LIT', tok))
        else:
            tokens.append((tok.upper(), tok))
        pos = m.end()
    return tuple(tokens)

def _cased(text: str, token: str) -> str:
    if token.isupper():
        return text.upper()
    if token[0].isupper():
        return text.capitalize()
    return text.lower()

def _utc_offset(value: datetime.datetime, locale: SessionLocale) -> datetime.timedelta:
    tzinfo = value.tzinfo if value.tzinfo is not None else locale.get_timezone()
    return tzinfo.utcoffset(value.replace(tzinfo=tzinfo))

def _split_offset(offset: datetime.timedelta) -> Tuple[str, int, int]:
    seconds = int(offset.total_seconds())
    sign = '-' if seconds < 0 else '+'
    seconds = abs(seconds)
    return sign, seconds // 3600, (seconds % 3600) // 60

def format_date(value: Union[datetime.date, datetime.datetime], locale: SessionLocale,
                fmt: str=None) -> str:
    """Returns text representation of date or timestamp.

    Arguments:
        value: Date or datetime. Naive values use session time zone for time zone
               format elements.
               `datetime.date` is formatted as midnight of that day.
        locale: Session locale.
        fmt: Date format model. Locale DATE format is used when not specified.

    Raises:
        NlsError: When format model is not valid.
    """
    if fmt is None:
        fmt = locale.date_format
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time())
    fill = False
    def num(n: int, width: int) -> str:
        return str(n) if fill else str(n).zfill(width)
    result = []
    for key, tok in _compile_date_model(fmt):
        if key == 'FM':
            fill = not fill
        elif key == 'LIT':
            result.append(tok)
        elif key in ('YYYY', 'RRRR'):
            result.append(num(value.year, 4))
        elif key in ('YY', 'RR'):
            result.append(num(value.year % 100, 2))
        elif key == 'MM':
            result.append(num(value.month, 2))
        elif key == 'MON':
            result.append(_cased(MONTHS[value.month - 1][:3], tok))
        elif key == 'MONTH':
            name = _cased(MONTHS[value.month - 1], tok)
            result.append(name if fill else name.ljust(9))
        elif key == 'DD':
            result.append(num(value.day, 2))
        elif key == 'DY':
            result.append(_cased(DAYS[value.weekday()][:3], tok))
        elif key == 'DAY':
            name = _cased(DAYS[value.weekday()], tok)
            result.append(name if fill else name.ljust(9))
        elif key in ('HH', 'HH12'):
            result.append(num(value.hour % 12 or 12, 2))
        elif key == 'HH24':
            result.append(num(value.hour, 2))
        elif key == 'MI':
            result.append(num(value.minute, 2))
        elif key == 'SS':
            result.append(num(value.second, 2))
        elif key.startswith('FF'):
            digits = int(key[2:] or 6)
            result.append(f'{value.microsecond:06d}'.ljust(9, '0')[:digits])
        elif key in ('AM', 'PM'):
            result.append(_cased('PM' if value.hour >= 12 else 'AM', tok))
        elif key == 'X':
            result.append(locale.decimal_separator)
        else:
            sign, hours, minutes = _split_offset(_utc_offset(value, locale))
            if key == 'TZH':
                result.append(f'{sign}{hours:02d}')
            elif key == 'TZM':
                result.append(f'{minutes:02d}')
            else:
                result.append(f'{sign}{hours:02d}:{minutes:02d}')
    return ''.join(result)

def _rr_year(year: int) -> int:
    current = datetime.date.today().year
    century, last = divmod(current, 100)
    if year < 50:
        return (century + (1 if last >= 50 else 0)) * 100 + year
    return (century - (1 if last < 50 else 0)) * 100 + year

def parse_date(text: str, locale: SessionLocale, fmt: str=None) -> datetime.datetime:
    """Returns datetime parsed from text using date format model.

    Inverse of `format_date`. Two-digit years are expanded using the ``RR`` century
    window for ``RR`` and ``RRRR`` elements, and to the current century for ``YY``.
    Missing year and month default to current year and month, missing day to 1.
    Returned value is timezone-aware when format model contains time zone elements.
    DATE values are returned as `datetime.datetime` at midnight, the way DATE columns
    are fetched, so `datetime.date` round trips compare by `.date()`.

    Arguments:
        text: Text to parse.
        locale: Session locale.
        fmt: Date format model. Locale DATE format is used when not specified.

    Raises:
        NlsError: When text does not match format model or is not a valid date.
    """
    if fmt is None:
        fmt = locale.date_format
    today = datetime.date.today()
    fields: Dict[str, Any] = {}
    pos = 0
    def mismatch() -> NlsError:
        return NlsError(f"ORA-01861: literal does not match format string:"
                        f" {text!r} / {fmt!r}", code='ORA-01861')
    def skip_ws(pos: int) -> int:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        return pos
    def match(pattern: str, pos: int) -> re.Match:
        m = re.compile(pattern, re.IGNORECASE).match(text, pos)
        if m is None:
            raise mismatch()
        return m
    for key, tok in _compile_date_model(fmt):
        if key == 'FM':
            continue
        if key == 'LIT' and tok.isspace():
            pos = skip_ws(pos)
            continue
        pos = skip_ws(pos)
        if key == 'LIT':
            if text[pos:pos + len(tok)].upper() != tok.upper():
                raise mismatch()
            pos += len(tok)
            continue
        if key in _NUMERIC_WIDTH:
            m = match(r'\d{1,%d}' % _NUMERIC_WIDTH[key], pos)
            fields[key] = m.group()
        elif key.startswith('FF'):
            m = match(r'\d{1,%d}' % int(key[2:] or 9), pos)
            fields['FF'] = m.group()
        elif key == 'MON':
            m = match('|'.join(name[:3] for name in MONTHS), pos)
            fields['MM'] = str([name[:3] for name in MONTHS].index(m.group().upper()) + 1)
        elif key == 'MONTH':
            m = match('|'.join(MONTHS), pos)
            fields['MM'] = str(MONTHS.index(m.group().upper()) + 1)
        elif key == 'DY':
            m = match('|'.join(name[:3] for name in DAYS), pos)
        elif key == 'DAY':
            m = match('|'.join(DAYS), pos)
        elif key in ('AM', 'PM'):
            m = match('AM|PM', pos)
            fields['PM'] = m.group().upper() == 'PM'
        elif key == 'X':
            m = match(re.escape(locale.decimal_separator), pos)
        elif key == 'TZH':
            m = match(r'[+-]\d{1,2}', pos)
            fields['TZH'] = m.group()
        elif key == 'TZM':
            m = match(r'\d{1,2}', pos)
            fields['TZM'] = m.group()
        else:
            m = match(r'[+-]\d{1,2}:\d{2}|UTC|GMT|Z\b|[A-Za-z][A-Za-z0-9_/+\-]*', pos)
            fields['TZR'] = m.group()
        pos = m.end()
    if skip_ws(pos) != len(text):
        raise NlsError(f"ORA-01830: date format picture ends before converting entire"
                       f" input string: {text!r}", code='ORA-01830')
    if 'YYYY' in fields:
        year = int(fields['YYYY'])
    elif 'RRRR' in fields:
        year = int(fields['RRRR'])
        if len(fields['RRRR']) <= 2:
            year = _rr_year(year)
    elif 'RR' in fields:
        year = _rr_year(int(fields['RR']))
    elif 'YY' in fields:
        year = today.year - today.year % 100 + int(fields['YY'])
    else:
        year = today.year
    if 'HH24' in fields:
        hour = int(fields['HH24'])
    else:
        hour = int(fields.get('HH12', fields.get('HH', 0)))
        if 'PM' in fields:
            if not 1 <= hour <= 12:
                raise NlsError(f"ORA-01849: hour must be between 1 and 12: {text!r}",
                               code='ORA-01849')
            hour = hour % 12 + (12 if fields['PM'] else 0)
    tzinfo = None
    if 'TZR' in fields:
        tzinfo = get_timezone(fields['TZR'])
    elif 'TZH' in fields:
        minutes = int(fields.get('TZM', 0))
        hours = int(fields['TZH'])
        seconds = abs(hours) * 3600 + minutes * 60
        tzinfo = tz.tzoffset(None, -seconds if fields['TZH'].startswith('-') else seconds)
    try:
        return datetime.datetime(year, int(fields.get('MM', today.month)),
                                 int(fields.get('DD', 1)), hour, int(fields.get('MI', 0)),
                                 int(fields.get('SS', 0)),
                                 int(fields.get('FF', '0').ljust(6, '0')[:6]), tzinfo)
    except ValueError as exc:
        raise NlsError(f"ORA-01839: date not valid: {text!r}",
                       code='ORA-01839') from exc

def format_timestamp(value: datetime.datetime, db_type: NativeType,
                     locale: SessionLocale) -> str:
    """Returns text representation of DATE or TIMESTAMP column value using locale
    format for the column type.

    TIMESTAMP WITH LOCAL TIME ZONE values are converted to session time zone.
    """
    if db_type == NativeType.DATE:
        return format_date(value, locale, locale.date_format)
    if db_type == NativeType.TIMESTAMP:
        return format_date(value, locale, locale.timestamp_format)
    if db_type == NativeType.TIMESTAMP_LTZ and isinstance(value, datetime.datetime):
        value = _to_session_tz(value, locale)
    return format_date(value, locale, locale.timestamp_tz_format)

def _to_session_tz(value: datetime.datetime, locale: SessionLocale) -> datetime.datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz.UTC)
    return value.astimezone(locale.get_timezone())

def iso_format(value: Union[datetime.date, datetime.datetime], db_type: NativeType,
               locale: SessionLocale=None) -> str:
    """Returns locale-invariant ISO 8601 text for DATE or TIMESTAMP column value.

    Format is ``YYYY-MM-DDTHH:MM:SS[.ffffff]``. DATE values never have fractional
    seconds, TIMESTAMP values have them only when non-zero. Offset is included only
    for TIMESTAMP WITH [LOCAL] TIME ZONE types; values of LOCAL TIME ZONE type are
    converted to session time zone (UTC without locale).
    """
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time())
    if db_type == NativeType.DATE:
        return value.replace(tzinfo=None, microsecond=0).isoformat(timespec='seconds')
    if db_type == NativeType.TIMESTAMP:
        return value.replace(tzinfo=None).isoformat()
    if db_type == NativeType.TIMESTAMP_LTZ:
        return _to_session_tz(value, locale or SessionLocale()).isoformat()
    if value.tzinfo is None:
        value = value.replace(tzinfo=(locale or SessionLocale()).get_timezone())
    return value.isoformat()
