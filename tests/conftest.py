# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
#   PROGRAM/MODULE: dbcoerce
#   FILE:           tests/conftest.py
#   DESCRIPTION:    Test fixtures
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

import pytest
from firebird.base.config import ConfigProto
from firebird.base.hooks import hook_manager
from dbcoerce import coercion_config, SessionLocale, BindResolver, Session, NativeResult, \
     NativeType, DbObjectType, DbObjectAttr

class StubConnection:
    """Native connection stub that records calls.
    """
    def __init__(self, result: NativeResult=None, types: dict=None, error: Exception=None):
        self.calls = []
        self.described = []
        self.result = NativeResult() if result is None else result
        self.types = {} if types is None else types
        self.error = error
    async def execute(self, sql, binds, *, many=False):
        self.calls.append((sql, binds, many))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result
    def describe_type(self, name):
        self.described.append(name)
        return self.types[name]

# Structured types

PERSON = DbObjectType('HR', 'PERSON', (
    DbObjectAttr('ID', NativeType.NUMBER, precision=10, scale=0),
    DbObjectAttr('NAME', NativeType.VARCHAR, max_size=10),
    DbObjectAttr('NNAME', NativeType.NVARCHAR, max_size=5),
    DbObjectAttr('PHOTO', NativeType.RAW, max_size=4),
    DbObjectAttr('AMOUNT', NativeType.NUMBER, precision=5, scale=2),
    DbObjectAttr('BORN', NativeType.DATE),
    ))

NAMES = DbObjectType('HR', 'NAMES', element_type=DbObjectAttr(None, NativeType.VARCHAR,
                                                              max_size=10))

PEOPLE = DbObjectType('HR', 'PEOPLE',
                      element_type=DbObjectAttr(None, NativeType.OBJECT, object_type=PERSON))

TEAM = DbObjectType('HR', 'TEAM', (
    DbObjectAttr('TITLE', NativeType.VARCHAR, max_size=20),
    DbObjectAttr('MEMBERS', NativeType.OBJECT, object_type=PEOPLE),
    DbObjectAttr('TAGS', NativeType.OBJECT, object_type=NAMES),
    ))

# Fixtures

@pytest.fixture()
def coercion_cfg():
    proto = ConfigProto()
    coercion_config.save_proto(proto)
    yield coercion_config
    coercion_config.clear()
    coercion_config.load_proto(proto)

@pytest.fixture
def america():
    return SessionLocale.for_territory('AMERICA')

@pytest.fixture
def spain():
    return SessionLocale.for_territory('SPAIN')

@pytest.fixture
def resolver(coercion_cfg):
    return BindResolver(coercion_cfg)

@pytest.fixture
def coercer(resolver):
    return resolver.coercer

@pytest.fixture
def marshaller(resolver):
    return resolver.marshaller

@pytest.fixture
def person_type():
    return PERSON

@pytest.fixture
def names_type():
    return NAMES

@pytest.fixture
def people_type():
    return PEOPLE

@pytest.fixture
def team_type():
    return TEAM

@pytest.fixture
def stub():
    return StubConnection(types={'HR.PERSON': PERSON, 'HR.NAMES': NAMES, 'HR.TEAM': TEAM})

@pytest.fixture
def session(stub, coercion_cfg, america):
    return Session(stub, locale=america, config=coercion_cfg)

@pytest.fixture
def hooks():
    hook_manager.remove_all_hooks()
    yield hook_manager
    hook_manager.remove_all_hooks()
