# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/config.py
# DESCRIPTION:    Coercion layer configuration
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

"""dbcoerce - Coercion layer configuration


"""

from __future__ import annotations
from typing import Dict, Union, Iterable
from configparser import ConfigParser, ExtendedInterpolation
from firebird.base.config import Config, StrOption, IntOption, BoolOption, EnumOption, \
     ListOption
from .types import LogicalType, OutFormat

class SessionDefaults(Config): # pylint: disable=R0902
    """Default session locale configuration.
    """
    def __init__(self, name: str, *, optional: bool=False, description: str=None):
        super().__init__(name, optional=optional, description=description)
        #: Session territory, default: AMERICA
        self.territory: StrOption = \
            StrOption('territory', "Session territory", default='AMERICA')
        #: Decimal and group separator override (NLS_NUMERIC_CHARACTERS)
        self.numeric_characters: StrOption = \
            StrOption('numeric_characters', "Decimal and group separator override")
        #: DATE format model override (NLS_DATE_FORMAT)
        self.date_format: StrOption = \
            StrOption('date_format', "DATE format model override")
        #: TIMESTAMP format model override (NLS_TIMESTAMP_FORMAT)
        self.timestamp_format: StrOption = \
            StrOption('timestamp_format', "TIMESTAMP format model override")
        #: TIMESTAMP WITH TIME ZONE format model override (NLS_TIMESTAMP_TZ_FORMAT)
        self.timestamp_tz_format: StrOption = \
            StrOption('timestamp_tz_format', "TIMESTAMP WITH TIME ZONE format model override")
        #: Session time zone, default: UTC
        self.time_zone: StrOption = \
            StrOption('time_zone', "Session time zone", default='UTC')

class CoercionConfig(Config):
    """Bind/fetch coercion layer configuration.
    """
    def __init__(self, name: str):
        super().__init__(name)
        #: Encoding used for character binds and columns
        self.encoding: StrOption = \
            StrOption('encoding', "Encoding used for character binds and columns",
                      default='utf-8')
        #: Logical types that are fetched as STRING unless overriden per column
        self.fetch_as_string: ListOption = \
            ListOption('fetch_as_string', LogicalType,
                       "Logical types that are fetched as STRING", default=[])
        #: Logical types that are fetched as BUFFER unless overriden per column
        self.fetch_as_buffer: ListOption = \
            ListOption('fetch_as_buffer', LogicalType,
                       "Logical types that are fetched as BUFFER", default=[])
        #: Return NUMBER columns as `decimal.Decimal` instead `float`, default: False
        self.fetch_decimals: BoolOption = \
            BoolOption('fetch_decimals', "Return NUMBER columns as Decimal", default=False)
        #: Default shape of fetched rows, default: ARRAY
        self.out_format: EnumOption = \
            EnumOption('out_format', OutFormat, "Default shape of fetched rows",
                       default=OutFormat.ARRAY)
        #: Max. size used for variable-length OUT binds that do not specify it
        self.bind_default_max_size: IntOption = \
            IntOption('bind_default_max_size',
                      "Max. size used for variable-length OUT binds that do not specify it")
        #: Default session locale ('dbcoerce.session.defaults')
        self.session_defaults: SessionDefaults = \
            SessionDefaults('dbcoerce.session.defaults', optional=True,
                            description="Default session locale.")
    def read(self, filenames: Union[str, Iterable], encoding: str=None):
        """Read configuration from a filename or an iterable of filenames.

        Files that cannot be opened are silently ignored. Return list of successfully
        read files.
        """
        parser = ConfigParser(interpolation=ExtendedInterpolation())
        read_ok = parser.read(filenames, encoding)
        if read_ok:
            self.load_config(parser)
        return read_ok
    def read_file(self, f):
        """Read configuration from a file-like object.

        The `f` argument must be iterable, returning one line at a time.
        """
        parser = ConfigParser(interpolation=ExtendedInterpolation())
        parser.read_file(f)
        self.load_config(parser)
    def read_string(self, string: str) -> None:
        """Read configuration from a given string.
        """
        parser = ConfigParser(interpolation=ExtendedInterpolation())
        parser.read_string(string)
        self.load_config(parser)
    def read_dict(self, dictionary: Dict) -> None:
        """Read configuration from a dictionary.

        Keys are section names, values are dictionaries with keys and values
        that should be present in the section.
        """
        parser = ConfigParser(interpolation=ExtendedInterpolation())
        parser.read_dict(dictionary)
        self.load_config(parser)

# Configuration

coercion_config: CoercionConfig = CoercionConfig('dbcoerce')
