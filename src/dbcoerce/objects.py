# SPDX-FileCopyrightText: 2026-present The dbcoerce Project
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: dbcoerce
# FILE:           dbcoerce/objects.py
# DESCRIPTION:    Structured values (objects and collections)
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

"""dbcoerce - Structured values (objects and collections)

Structured values are instances of classes built by `ObjectMarshaller.object_class()`
for particular `.DbObjectType`. Attribute values and collection elements are validated
on construction and assignment, so size and precision violations never reach the
database.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Type
from firebird.base.types import UNDEFINED
from firebird.base.logging import LoggingIdMixin, get_logger
from .types import DatabaseError, BindTypeMismatchError, StructuredValueSizeError, \
     NativeType, DbObjectType, DbObjectAttr, NativeObject, ColumnMetadata
from .nls import to_decimal

class DbObject:
    """Base class for structured values of database object types.

    Attribute values could be passed as mapping, keyword arguments, or both::

        Person = marshaller.object_class(person_type)
        person = Person({'ID': 1}, NAME='John')

    Unset attributes read as `None` (SQL NULL).
    """
    #: Structured type of instances (set on built classes)
    _type_: DbObjectType = None
    #: Marshaller that built the class
    _marshaller_: ObjectMarshaller = None
    def __init__(self, values: Mapping[str, Any]=None, **kwargs):
        object.__setattr__(self, '_values', {})
        if values is not None:
            if not isinstance(values, Mapping):
                raise BindTypeMismatchError("NJS-011: encountered bind value and type"
                                            f" mismatch: {self._type_.fqn} expects mapping")
            kwargs = {**values, **kwargs}
        for name, value in kwargs.items():
            setattr(self, name, value)
    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        attr = self._find_attr(name)
        return self._values.get(attr.name)
    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return
        attr = self._find_attr(name)
        self._values[attr.name] = self._marshaller_.validate(attr, value)
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DbObject) or isinstance(other, DbCollection):
            return NotImplemented
        return self._type_ == other._type_ \
               and {k: v for k, v in self._values.items() if v is not None} \
               == {k: v for k, v in other._values.items() if v is not None}
    def __repr__(self):
        values = ', '.join(f'{k}={v!r}' for k, v in self._values.items())
        return f"<{self._type_.fqn}({values})>"
    def _find_attr(self, name: str) -> DbObjectAttr:
        attr = self._type_.get_attribute(name)
        if attr is None:
            attr = self._type_.get_attribute(name.upper())
        if attr is None:
            raise AttributeError(f"Type {self._type_.fqn} has no attribute '{name}'")
        return attr
    def as_dict(self) -> Dict[str, Any]:
        """Returns attribute values as dictionary, nested structured values included.
        """
        return {attr.name: _plain(self._values.get(attr.name))
                for attr in self._type_.attributes}
    @property
    def type_info(self) -> DbObjectType:
        """Structured type of this value.
        """
        return self._type_

class DbCollection(DbObject):
    """Base class for structured values of database collection types.

    Collection is a sparse mapping from integer index to element. Deleted elements
    leave holes, so elements should be traversed with `first_index()`, `next_index()`,
    `last_index()` and `prev_index()`.

    Arguments:
        values: Initial elements, appended in order.
    """
    def __init__(self, values: Iterable[Any]=None):
        object.__setattr__(self, '_values', {})
        if values is not None:
            if isinstance(values, (str, bytes, Mapping)):
                raise BindTypeMismatchError("NJS-011: encountered bind value and type"
                                            f" mismatch: {self._type_.fqn} expects"
                                            " sequence")
            for value in values:
                self.append(value)
    def __getattr__(self, name: str) -> Any:
        raise AttributeError(name)
    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return
        raise AttributeError(f"Collection {self._type_.fqn} has no attribute '{name}'")
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DbCollection):
            return NotImplemented
        return self._type_ == other._type_ and self._values == other._values
    def __repr__(self):
        return f"<{self._type_.fqn}{self._values!r}>"
    def __len__(self):
        return len(self._values)
    def __iter__(self) -> Iterator[Any]:
        return iter(self.get_values())
    def __getitem__(self, index: int) -> Any:
        return self.get_element(index)
    def __setitem__(self, index: int, value: Any) -> None:
        self.set_element(index, value)
    def __delitem__(self, index: int) -> None:
        self.delete_element(index)
    def __contains__(self, value: Any) -> bool:
        return value in self._values.values()
    def _missing(self, index: int) -> DatabaseError:
        return DatabaseError(f"ORA-22160: element at index [{index}] does not exist",
                             code='ORA-22160', index=index)
    def _validate(self, index: int, value: Any) -> Any:
        return self._marshaller_.validate(self._type_.element_type, value, index=index)
    def append(self, value: Any) -> None:
        """Appends element after the last index.

        Raises:
            StructuredValueSizeError: When element violates element type size or precision.
        """
        last = self.last_index()
        index = 0 if last is None else last + 1
        self._values[index] = self._validate(index, value)
    def set_element(self, index: int, value: Any) -> None:
        """Replaces element at existing index, or appends it when index follows the
        last index.

        Raises:
            DatabaseError: When index is neither existing nor appendable (``ORA-22160``).
            StructuredValueSizeError: When element violates element type size or precision.
        """
        last = self.last_index()
        if index not in self._values and index != (0 if last is None else last + 1):
            raise self._missing(index)
        self._values[index] = self._validate(index, value)
    def delete_element(self, index: int) -> None:
        """Deletes element at index, leaving a hole in the index sequence.

        Raises:
            DatabaseError: When there is no element at index (``ORA-22160``).
        """
        if index not in self._values:
            raise self._missing(index)
        del self._values[index]
    def trim(self, count: int) -> None:
        """Removes the specified number of elements from the end of collection.

        Raises:
            DatabaseError: When collection has less elements (``ORA-22167``).
        """
        if count > len(self._values):
            raise DatabaseError(f"ORA-22167: given trim size [{count}] must be less than"
                                f" or equal to [{len(self._values)}]", code='ORA-22167')
        for index in self.get_keys()[len(self._values) - count:]:
            del self._values[index]
    def get_element(self, index: int) -> Any:
        """Returns element at index.

        Raises:
            DatabaseError: When there is no element at index (``ORA-22160``).
        """
        if index not in self._values:
            raise self._missing(index)
        return self._values[index]
    def has_element(self, index: int) -> bool:
        """Returns True when collection has element at index.
        """
        return index in self._values
    def first_index(self) -> Optional[int]:
        "Returns first index, or None for empty collection."
        return min(self._values) if self._values else None
    def last_index(self) -> Optional[int]:
        "Returns last index, or None for empty collection."
        return max(self._values) if self._values else None
    def next_index(self, index: int) -> Optional[int]:
        "Returns index that follows the specified one, or None."
        following = [i for i in self._values if i > index]
        return min(following) if following else None
    def prev_index(self, index: int) -> Optional[int]:
        "Returns index that precedes the specified one, or None."
        preceding = [i for i in self._values if i < index]
        return max(preceding) if preceding else None
    def get_keys(self) -> List[int]:
        "Returns list of indices in ascending order."
        return sorted(self._values)
    def get_values(self) -> List[Any]:
        "Returns list of elements in index order."
        return [self._values[i] for i in self.get_keys()]
    def as_dict(self) -> Dict[int, Any]:
        """Returns elements as dictionary keyed by index, nested structured values
        included.
        """
        return {i: _plain(self._values[i]) for i in self.get_keys()}

def _plain(value: Any) -> Any:
    return value.as_dict() if isinstance(value, DbObject) else value

class ObjectMarshaller(LoggingIdMixin):
    """Builds structured value classes, validates attribute values and converts
    structured values to and from their wire form.

    Arguments:
        resolver: `.BindResolver` used for value shape validation and native values
                  of scalar attributes.
        coercer: `.FetchCoercer` used for scalar attribute values on fetch.
    """
    def __init__(self, resolver, coercer):
        self.resolver = resolver
        self.coercer = coercer
        self._classes: Dict[str, Type[DbObject]] = {}
    def object_class(self, obj_type: DbObjectType) -> Type[DbObject]:
        """Returns application class for structured type.

        Classes are built on first request and cached by fully qualified type name.
        """
        cls = self._classes.get(obj_type.fqn)
        if cls is None or cls._type_ != obj_type:
            base = DbCollection if obj_type.is_collection else DbObject
            cls = type(obj_type.name, (base, ), {'_type_': obj_type, '_marshaller_': self,
                                                 '__module__': __name__})
            self._classes[obj_type.fqn] = cls
            get_logger(self).debug("Built class for %s", obj_type.fqn)
        return cls
    def build(self, obj_type: DbObjectType, value: Any) -> Optional[DbObject]:
        """Returns structured value of type built from mapping (object types) or
        sequence (collection types). Existing structured values of the same type are
        returned unchanged.

        Raises:
            BindTypeMismatchError: When value could not be converted to type.
            StructuredValueSizeError: When attribute or element violates its type.
        """
        if value is None or value is UNDEFINED:
            return None
        if isinstance(value, DbObject):
            if value._type_ != obj_type:
                raise BindTypeMismatchError(f"NJS-011: encountered bind value and type"
                                            f" mismatch: expected {obj_type.fqn},"
                                            f" got {value._type_.fqn}")
            return value
        if obj_type.is_collection and isinstance(value, (list, tuple)):
            return self.object_class(obj_type)(value)
        if not obj_type.is_collection and isinstance(value, Mapping):
            return self.object_class(obj_type)(value)
        raise BindTypeMismatchError(f"NJS-011: encountered bind value and type mismatch:"
                                    f" {type(value).__name__} for {obj_type.fqn}")
    def validate(self, attr: DbObjectAttr, value: Any, *, index: int=None) -> Any:
        """Returns validated attribute or element value.

        Arguments:
            attr: Attribute or collection element type.
            value: Application value.
            index: Element index (collection elements only).

        Raises:
            BindTypeMismatchError: When value shape does not match attribute type.
            StructuredValueSizeError: When value exceeds attribute length or precision
                                      (``NJS-142`` for attributes, ``NJS-143`` for
                                      collection elements).
        """
        if attr.db_type == NativeType.OBJECT:
            return self.build(attr.object_type, value)
        value = self.resolver.check_attribute(attr, value)
        if value is None:
            return None
        actual = None
        limit = attr.max_size
        if attr.db_type in (NativeType.VARCHAR, NativeType.CHAR, NativeType.LONG):
            actual = len(value.encode(self.resolver.encoding))
        elif attr.db_type in (NativeType.NVARCHAR, NativeType.NCHAR):
            actual = len(value)
        elif attr.db_type == NativeType.RAW:
            actual = len(value)
        elif attr.db_type == NativeType.NUMBER and attr.precision:
            limit = attr.precision - (attr.scale or 0)
            integral = int(abs(to_decimal(value)))
            actual = len(str(integral)) if integral else 0
        if limit is not None and actual is not None and actual > limit:
            if index is None:
                raise StructuredValueSizeError(
                    f"NJS-142: value too large for attribute \"{attr.name}\""
                    f" (actual: {actual}, maximum: {limit})",
                    attr_name=attr.name, max_size=limit, actual_size=actual)
            raise StructuredValueSizeError(
                f"NJS-143: value too large for collection element at index {index}"
                f" (actual: {actual}, maximum: {limit})", code='NJS-143',
                index=index, max_size=limit, actual_size=actual)
        return value
    def to_native(self, value: Optional[DbObject]) -> Optional[NativeObject]:
        """Returns wire form of structured value. `None` stays `None` (SQL NULL).
        """
        if value is None:
            return None
        obj_type = value._type_
        result = NativeObject(obj_type.fqn)
        if obj_type.is_collection:
            for index in value.get_keys():
                result.elements[index] = self._attr_to_native(obj_type.element_type,
                                                              value.get_element(index))
        else:
            for attr in obj_type.attributes:
                if attr.name in value._values:
                    result.attributes[attr.name] = \
                        self._attr_to_native(attr, value._values[attr.name])
        return result
    def _attr_to_native(self, attr: DbObjectAttr, value: Any) -> Any:
        if attr.db_type == NativeType.OBJECT:
            return self.to_native(value)
        return self.resolver.attribute_native_value(attr, value)
    def from_native(self, wire: Optional[NativeObject],
                    obj_type: DbObjectType) -> Optional[DbObject]:
        """Returns structured value of type from its wire form. `None` stays `None`.

        Raises:
            BindTypeMismatchError: When wire value is not of type.
        """
        if wire is None:
            return None
        if wire.type_name != obj_type.fqn:
            raise BindTypeMismatchError(f"NJS-011: encountered bind value and type"
                                        f" mismatch: expected {obj_type.fqn},"
                                        f" got {wire.type_name}")
        cls = self.object_class(obj_type)
        if obj_type.is_collection:
            result = cls()
            for index in sorted(wire.elements):
                result._values[index] = self._attr_from_native(obj_type.element_type,
                                                               wire.elements[index])
        else:
            result = cls()
            for name, native in wire.attributes.items():
                attr = obj_type.get_attribute(name)
                if attr is None:
                    raise AttributeError(f"Type {obj_type.fqn} has no attribute '{name}'")
                result._values[name] = self._attr_from_native(attr, native)
        return result
    def _attr_from_native(self, attr: DbObjectAttr, native: Any) -> Any:
        if attr.db_type == NativeType.OBJECT:
            return self.from_native(native, attr.object_type)
        column = ColumnMetadata(attr.name or '', attr.db_type, attr.precision, attr.scale,
                                attr.max_size)
        return self.coercer.coerce(native, attr.db_type, column=column)
