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

import enum
import struct
import zlib

class XComError(Exception):
   def __init__(self, message: str, offset: int | None = None):
      super().__init__(message)
      self.message = message
      self.offset = offset

   def __str__(self):
      if self.offset is None:
         return self.message
      return f"{self.message} (at offset {self.offset})"

class ParseError(XComError):
   pass

class OutOfBoundsError(ParseError):
   pass

class CorruptChunkError(ParseError):
   pass

class UnexpectedKindError(ParseError):
   pass

class ChecksumMismatchError(ParseError):
   pass

class InvalidOperationError(XComError):
   pass

class SeekKind(enum.Enum):
   START = 0
   CURRENT = 1
   END = 2

# Single-byte strings are stored as ISO-8859-1.
NARROW_ENCODING = "latin-1"

def isNarrowEncodable(text: str) -> bool:
   try:
      text.encode(NARROW_ENCODING)
   except UnicodeEncodeError:
      return False
   return True

def stringSize(text: str, wide: bool | None = None) -> int:
   if wide is None:
      wide = not isNarrowEncodable(text)
   if wide:
      return 4 + (len(text.encode("utf-16-le")) + 2)
   return 4 + len(text) + 1

class XComIO:
   """Growable little-endian byte buffer with a single read/write cursor.

   The logical size is tracked separately from the backing capacity so
   ensure() can reserve room ahead of a run of writes. Writing in the middle
   of the buffer overwrites, writing at the end appends.
   """

   INITIAL_CAPACITY = 1024 * 1024

   def __init__(self, data=None):
      if data is None:
         self.data = bytearray(self.INITIAL_CAPACITY)
         self.length = 0
      else:
         self.data = bytearray(data)
         self.length = len(data)
      self.pos = 0

   def offset(self) -> int:
      return self.pos

   def size(self) -> int:
      return self.length

   def release(self) -> bytes:
      return bytes(self.data[:self.length])

   def seek(self, kind: SeekKind, offset: int) -> None:
      match kind:
         case SeekKind.START:
            newPos = offset
         case SeekKind.CURRENT:
            newPos = self.pos + offset
         case SeekKind.END:
            newPos = self.length + offset
         case _:
            raise InvalidOperationError(f"Unknown seek kind {kind}")
      if newPos < 0 or newPos > self.length:
         raise OutOfBoundsError(f"Seek to {newPos} outside {self.length}-byte buffer", self.pos)
      self.pos = newPos

   def ensure(self, count: int) -> None:
      needed = self.pos + count
      if needed <= len(self.data):
         return
      capacity = max(len(self.data), 1)
      while capacity < needed:
         capacity *= 2
      self.data.extend(bytes(capacity - len(self.data)))

   def crc(self, length: int) -> int:
      if length < 0 or self.pos + length > self.length:
         raise OutOfBoundsError(f"CRC range of {length} bytes exceeds {self.length}-byte buffer", self.pos)
      return zlib.crc32(self.data[self.pos:self.pos+length]) & 0xffffffff

   # Reading

   def readRaw(self, length: int) -> bytes:
      if length < 0:
         raise OutOfBoundsError(f"Negative read length {length}", self.pos)
      nextPos = self.pos + length
      if nextPos > self.length:
         raise OutOfBoundsError(f"Read of {length} bytes exceeds {self.length}-byte buffer", self.pos)
      value = bytes(self.data[self.pos:nextPos])
      self.pos = nextPos
      return value

   def readInt(self) -> int:
      return struct.unpack("<i", self.readRaw(4))[0]

   def readUint32(self) -> int:
      return struct.unpack("<I", self.readRaw(4))[0]

   def readFloat(self) -> float:
      return struct.unpack("<f", self.readRaw(4))[0]

   def readByte(self) -> int:
      return self.readRaw(1)[0]

   def readBool(self) -> bool:
      return self.readByte() != 0

   def readUnicodeString(self) -> tuple[str, bool]:
      lengthOffset = self.pos
      strlen = self.readInt()
      if strlen == 0:
         return ("", False)
      if strlen > 0:
         raw = self.readRaw(strlen)
         if raw[-1] != 0:
            raise ParseError(f"String of length {strlen} is not null terminated", lengthOffset)
         return (raw[:-1].decode(NARROW_ENCODING), False)
      raw = self.readRaw(-strlen * 2)
      if raw[-2:] != b"\0\0":
         raise ParseError(f"Wide string of length {strlen} is not null terminated", lengthOffset)
      try:
         return (raw[:-2].decode("utf-16-le"), True)
      except UnicodeDecodeError as error:
         raise ParseError(f"Wide string decode failure of length {strlen}: {error}", lengthOffset)

   def readString(self) -> str:
      return self.readUnicodeString()[0]

   # Writing

   def pack(self, fmt: str, value) -> bytes:
      try:
         return struct.pack(fmt, value)
      except struct.error as error:
         raise InvalidOperationError(f"Value {value} does not fit '{fmt}': {error}", self.pos)

   def writeRaw(self, value) -> None:
      length = len(value)
      self.ensure(length)
      self.data[self.pos:self.pos+length] = value
      self.pos += length
      if self.pos > self.length:
         self.length = self.pos

   def writeInt(self, value: int) -> None:
      self.writeRaw(self.pack("<i", value))

   def writeUint32(self, value: int) -> None:
      self.writeRaw(self.pack("<I", value))

   def writeFloat(self, value: float) -> None:
      self.writeRaw(self.pack("<f", value))

   def writeByte(self, value: int) -> None:
      self.writeRaw(self.pack("<B", value))

   def writeBool(self, value: bool) -> None:
      self.writeByte(1 if value else 0)

   def writeUnicodeString(self, text: str, wide: bool | None = None) -> None:
      if wide is None:
         wide = not isNarrowEncodable(text)
      if wide:
         encoded = text.encode("utf-16-le")
         self.writeInt(-(len(encoded) // 2 + 1))
         self.writeRaw(encoded + b"\0\0")
      else:
         try:
            encoded = text.encode(NARROW_ENCODING)
         except UnicodeEncodeError:
            raise InvalidOperationError(f"String '{text}' cannot be stored as single-byte text", self.pos)
         self.writeInt(len(encoded) + 1)
         self.writeRaw(encoded + b"\0")

   def writeString(self, text: str) -> None:
      self.writeUnicodeString(text, None)
