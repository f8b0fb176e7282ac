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

SAVE_VERSION = 16 # Enemy Within

# File layout
HEADER_REGION_SIZE = 1024
HEADER_LENGTH_OFFSET = 1016
HEADER_CRC_OFFSET = 1020

# Compressed chunks
UPK_MAGIC = 0x9e2a83c1 # unrealEnginePackageSignature
CHUNK_SIZE = 0x20000
CHUNK_FLAGS = 0x20000 # Same value on the trailing short chunk
CHUNK_HEADER_SIZE = 24

# Struct types whose payload is a fixed engine layout rather than a property list.
NATIVE_STRUCTS = (
   "Box",
   "Color",
   "Guid",
   "IntPoint",
   "LinearColor",
   "Matrix",
   "Plane",
   "Quat",
   "Rotator",
   "TwoVectors",
   "Vector",
   "Vector2D",
   "Vector4",
)

# Every array is tagged "ArrayProperty" on disk. Entries here map a property
# name to the array variant to decode it as instead of inferring it from the
# payload.  Values: "Array", "ObjectArray", "NumberArray", "StringArray",
# "EnumArray", "StructArray".
ARRAY_KIND_HINTS: dict[str, str] = {}

# A fixed-size array whose only stored element is index 0 looks like a plain
# property. Names listed here are always decoded as StaticArrayProperty.
STATIC_ARRAY_NAMES: set[str] = set()
