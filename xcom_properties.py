# This file is part of the XCom EW Save Parser distribution.
# Copyright (c) 2025 The XCom EW Save Parser contributors.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, version 3.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

# Property model for checkpoint state.
#
# size() is the value stored in the property's size field. fullSize() is
# every byte the property occupies in the stream: the common envelope, the
# bytes the size field leaves out (enum type, struct name, bool value) and the
# payload.

import collections
import enum

from xcom_io import InvalidOperationError, isNarrowEncodable, stringSize

# "None" string (9 bytes) + the int that follows it
PROPERTY_LIST_TERMINATOR_SIZE = 9 + 4

class PropertyKind(enum.Enum):
   INT = "Int"
   FLOAT = "Float"
   BOOL = "Bool"
   STRING = "String"
   NAME = "Name"
   OBJECT = "Object"
   ENUM = "Enum"
   STRUCT = "Struct"
   ARRAY = "Array"
   OBJECT_ARRAY = "ObjectArray"
   NUMBER_ARRAY = "NumberArray"
   STRING_ARRAY = "StringArray"
   ENUM_ARRAY = "EnumArray"
   STRUCT_ARRAY = "StructArray"
   STATIC_ARRAY = "StaticArray"

ARRAY_KINDS = (
   PropertyKind.ARRAY,
   PropertyKind.OBJECT_ARRAY,
   PropertyKind.NUMBER_ARRAY,
   PropertyKind.STRING_ARRAY,
   PropertyKind.ENUM_ARRAY,
   PropertyKind.STRUCT_ARRAY,
)

# Tag written in the stream for each kind
KIND_STRINGS = {
   PropertyKind.INT: "IntProperty",
   PropertyKind.FLOAT: "FloatProperty",
   PropertyKind.BOOL: "BoolProperty",
   PropertyKind.STRING: "StrProperty",
   PropertyKind.NAME: "NameProperty",
   PropertyKind.OBJECT: "ObjectProperty",
   PropertyKind.ENUM: "ByteProperty",
   PropertyKind.STRUCT: "StructProperty",
}
for arrayKind in ARRAY_KINDS:
   KIND_STRINGS[arrayKind] = "ArrayProperty"

EnumValue = collections.namedtuple("EnumValue", ["name", "number"])

def propertyListSize(properties) -> int:
   return sum(prop.fullSize() for prop in properties) + PROPERTY_LIST_TERMINATOR_SIZE

class Property:
   kind: PropertyKind

   def __init__(self, name: str, arrayIndex: int = 0):
      self.name = name
      self.arrayIndex = arrayIndex

   def kindString(self) -> str:
      return KIND_STRINGS[self.kind]

   def size(self) -> int:
      raise NotImplementedError

   def uncountedSize(self) -> int:
      return 0

   def fullSize(self) -> int:
      envelope = stringSize(self.name) + 4 + stringSize(self.kindString()) + 4 + 4 + 4
      return envelope + self.uncountedSize() + self.size()

   def __eq__(self, other):
      return type(self) is type(other) and vars(self) == vars(other)

   def __repr__(self):
      return str(self)

   def __str__(self):
      return f"<{type(self).__name__}: name={self.name}, arrayIndex={self.arrayIndex}, value={self.valueString()}>"

   def valueString(self) -> str:
      return ""

class IntProperty(Property):
   kind = PropertyKind.INT

   def __init__(self, name: str, value: int, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.value = value

   def size(self) -> int:
      return 4

   def valueString(self) -> str:
      return str(self.value)

class FloatProperty(Property):
   kind = PropertyKind.FLOAT

   def __init__(self, name: str, value: float, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.value = value

   def size(self) -> int:
      return 4

   def valueString(self) -> str:
      return str(self.value)

class BoolProperty(Property):
   kind = PropertyKind.BOOL

   def __init__(self, name: str, value: bool, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.value = value

   # The value byte is not counted by the size field.
   def size(self) -> int:
      return 0

   def uncountedSize(self) -> int:
      return 1

   def valueString(self) -> str:
      return str(self.value)

class StringProperty(Property):
   kind = PropertyKind.STRING

   def __init__(self, name: str, value: str, isWide: bool | None = None, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.value = value
      if isWide is None:
         isWide = not isNarrowEncodable(value)
      self.isWide = isWide

   def size(self) -> int:
      return stringSize(self.value, self.isWide)

   def valueString(self) -> str:
      return f"'{self.value}'"

class NameProperty(Property):
   kind = PropertyKind.NAME

   def __init__(self, name: str, value: str, number: int = 0, arrayIndex: int = 0, isWide: bool | None = None):
      super().__init__(name, arrayIndex)
      self.value = value
      self.number = number
      if isWide is None:
         isWide = not isNarrowEncodable(value)
      self.isWide = isWide

   def size(self) -> int:
      return stringSize(self.value, self.isWide) + 4

   def valueString(self) -> str:
      return f"'{self.value}'#{self.number}"

class ObjectProperty(Property):
   kind = PropertyKind.OBJECT

   def __init__(self, name: str, actor: int, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.actor = actor

   def size(self) -> int:
      return 4

   def valueString(self) -> str:
      return "null" if self.actor == -1 else f"actor[{self.actor}]"

class EnumProperty(Property):
   kind = PropertyKind.ENUM

   def __init__(self, name: str, enumType: str, value: EnumValue, arrayIndex: int = 0, isWide: bool | None = None):
      super().__init__(name, arrayIndex)
      self.enumType = enumType
      self.value = EnumValue(*value)
      # Width of the value name; numeric enums have none.
      if self.isNumeric():
         isWide = False
      elif isWide is None:
         isWide = not isNarrowEncodable(self.value.name)
      self.isWide = isWide

   def isNumeric(self) -> bool:
      return self.enumType == "None"

   def size(self) -> int:
      if self.isNumeric():
         return 1
      return stringSize(self.value.name, self.isWide) + 4

   def uncountedSize(self) -> int:
      return stringSize(self.enumType) + 4

   def valueString(self) -> str:
      if self.isNumeric():
         return str(self.value.number)
      return f"{self.enumType}::{self.value.name}#{self.value.number}"

class StructProperty(Property):
   """Either opaque engine bytes (nativeData) or a nested property list."""
   kind = PropertyKind.STRUCT

   def __init__(self, name: str, structName: str, properties=None, nativeData: bytes | None = None, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.structName = structName
      self.properties = [] if properties is None else list(properties)
      self.nativeData = None if nativeData is None else bytes(nativeData)
      if self.nativeData is not None and len(self.properties) > 0:
         raise InvalidOperationError(f"Struct property '{name}' cannot hold both native data and properties")

   def isNative(self) -> bool:
      return self.nativeData is not None

   def size(self) -> int:
      if self.isNative():
         return len(self.nativeData)
      return propertyListSize(self.properties)

   def uncountedSize(self) -> int:
      return stringSize(self.structName) + 4

   def valueString(self) -> str:
      if self.isNative():
         return f"{self.structName}(0x{self.nativeData.hex()})"
      return f"{self.structName}{self.properties}"

class ArrayProperty(Property):
   """Array whose element bytes are not interpreted."""
   kind = PropertyKind.ARRAY

   def __init__(self, name: str, arrayBound: int, data: bytes = b"", arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.arrayBound = arrayBound
      self.data = bytes(data)

   def size(self) -> int:
      return 4 + len(self.data)

   def valueString(self) -> str:
      return f"[{self.arrayBound}](0x{self.data.hex()})"

class ObjectArrayProperty(Property):
   kind = PropertyKind.OBJECT_ARRAY

   def __init__(self, name: str, elements, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.elements = list(elements)

   def size(self) -> int:
      return 4 + 8 * len(self.elements)

   def valueString(self) -> str:
      return str(self.elements)

class NumberArrayProperty(Property):
   kind = PropertyKind.NUMBER_ARRAY

   def __init__(self, name: str, elements, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.elements = list(elements)

   def size(self) -> int:
      return 4 + 4 * len(self.elements)

   def valueString(self) -> str:
      return str(self.elements)

class StringArrayProperty(Property):
   kind = PropertyKind.STRING_ARRAY

   def __init__(self, name: str, elements, wideFlags=None, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.elements = list(elements)
      if wideFlags is None:
         wideFlags = [None] * len(self.elements)
      if len(wideFlags) != len(self.elements):
         raise InvalidOperationError(f"String array '{name}' has {len(self.elements)} elements but {len(wideFlags)} wide flags")
      self.wideFlags = [not isNarrowEncodable(text) if wide is None else wide for (text, wide) in zip(self.elements, wideFlags)]

   def size(self) -> int:
      return 4 + sum(stringSize(text, wide) for (text, wide) in zip(self.elements, self.wideFlags))

   def valueString(self) -> str:
      return str(self.elements)

class EnumArrayProperty(Property):
   kind = PropertyKind.ENUM_ARRAY

   def __init__(self, name: str, elements, wideFlags=None, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.elements = [EnumValue(*element) for element in elements]
      if wideFlags is None:
         wideFlags = [None] * len(self.elements)
      if len(wideFlags) != len(self.elements):
         raise InvalidOperationError(f"Enum array '{name}' has {len(self.elements)} elements but {len(wideFlags)} wide flags")
      self.wideFlags = [not isNarrowEncodable(element.name) if wide is None else wide for (element, wide) in zip(self.elements, wideFlags)]

   def size(self) -> int:
      return 4 + sum(stringSize(element.name, wide) + 4 for (element, wide) in zip(self.elements, self.wideFlags))

   def valueString(self) -> str:
      return str([f"{element.name}#{element.number}" for element in self.elements])

class StructArrayProperty(Property):
   """Each element is its own "None"-terminated property list."""
   kind = PropertyKind.STRUCT_ARRAY

   def __init__(self, name: str, elements, arrayIndex: int = 0):
      super().__init__(name, arrayIndex)
      self.elements = [list(element) for element in elements]

   def size(self) -> int:
      return 4 + sum(propertyListSize(element) for element in self.elements)

   def valueString(self) -> str:
      return str(self.elements)

class StaticArrayProperty(Property):
   """Groups the elements of a fixed-size array.

   Only exists in memory: the stream holds one property per element, each
   tagged with its position, and no wrapper.
   """
   kind = PropertyKind.STATIC_ARRAY

   def __init__(self, name: str, properties):
      super().__init__(name, 0)
      self.properties = list(properties)
      for (idx, prop) in enumerate(self.properties):
         if prop.name != name:
            raise InvalidOperationError(f"Static array '{name}' element {idx} is named '{prop.name}'")
         if isinstance(prop, StaticArrayProperty):
            raise InvalidOperationError(f"Static array '{name}' cannot contain another static array")
         prop.arrayIndex = idx

   def kindString(self) -> str:
      raise InvalidOperationError(f"Static array '{self.name}' has no stream kind")

   def size(self) -> int:
      raise InvalidOperationError(f"Static array '{self.name}' has no size field")

   def fullSize(self) -> int:
      return sum(prop.fullSize() for prop in self.properties)

   def valueString(self) -> str:
      return str(self.properties)
