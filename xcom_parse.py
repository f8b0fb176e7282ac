#!/usr/bin/env python3
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

# File layout:
#   [0, 1024)  Header, with the header length and header CRC at 1016 and 1020
#   [1024, )   LZO1X compressed chunks, each with a 24-byte chunk header
# The decompressed chunks hold the actor table followed by checkpoint chunks.

import sys

import lzo

from xcom_data.data import (
   ARRAY_KIND_HINTS,
   CHUNK_FLAGS,
   CHUNK_HEADER_SIZE,
   HEADER_CRC_OFFSET,
   HEADER_LENGTH_OFFSET,
   HEADER_REGION_SIZE,
   NATIVE_STRUCTS,
   SAVE_VERSION,
   STATIC_ARRAY_NAMES,
   UPK_MAGIC,
)
from xcom_io import (
   ChecksumMismatchError,
   CorruptChunkError,
   ParseError,
   SeekKind,
   UnexpectedKindError,
   XComIO,
)
from xcom_properties import (
   KIND_STRINGS,
   ArrayProperty,
   BoolProperty,
   EnumArrayProperty,
   EnumProperty,
   EnumValue,
   FloatProperty,
   IntProperty,
   NameProperty,
   NumberArrayProperty,
   ObjectArrayProperty,
   ObjectProperty,
   PropertyKind,
   StaticArrayProperty,
   StringArrayProperty,
   StringProperty,
   StructArrayProperty,
   StructProperty,
)

PROGRESS_BAR_ENABLE_DECOMPRESS = True
PROGRESS_BAR_ENABLE_PARSE = True
PRINT_DEBUG = False

KNOWN_KIND_STRINGS = frozenset(KIND_STRINGS.values())

class ProgressBar():
   prior = None
   current = 0
   fillChar = "#"
   emptyChar = "."
   completedChar = b'\x13\x27'.decode('utf-16')
   fillColor = "\033[1;37;47m"
   emptyColor = "\033[0;30;40m"
   resetColor = "\033[0m"

   def __init__(self, total, prefix: str = "", width: int = 70):
      self.total = total
      self.prefix = prefix
      self.width = width
      self.show()
   def add(self, more = 1):
      self.current += more
      self.show()
   def set(self, current = 1):
      self.current = current
      self.show()
   def show(self):
      if self.total <= 0:
         return
      filled = int(round(self.current / self.total * self.width))
      if filled != self.prior:
         if sys.stdout.isatty():
            print(f"{self.prefix}[{self.fillColor}{self.fillChar*filled}{self.emptyColor}{(self.emptyChar*(self.width-filled))}{self.resetColor}]   {round(self.current)}/{self.total}", end='\r', flush=True)
         self.prior = filled
   def complete(self):
      if sys.stdout.isatty():
         print(f"{self.prefix}[{self.fillChar*self.width}] {self.completedChar} {self.total}/{self.total}", flush=True)

def confirmBasicType(io: XComIO, reader, expectedValue, message = None):
   originalOffset = io.offset()
   value = reader()
   if value != expectedValue:
      if message is None:
         raise ParseError(f"Value {value} does not match the expected value {expectedValue}.", originalOffset)
      else:
         raise ParseError(f"Value {value} does not match the expected value {expectedValue}: {message}", originalOffset)
   return value

def confirmNoneTerminator(io: XComIO, context: str) -> None:
   originalOffset = io.offset()
   value = io.readString()
   if value != "None":
      raise UnexpectedKindError(f"Expected 'None' for {context} but found '{value}'", originalOffset)

# Actor names are stored split as (base name, instance number), where the
# instance number is one more than the "_N" suffix and 0 means no suffix.
def decomposeActorName(actorName: str) -> tuple[str, int]:
   pos = actorName.rfind("_")
   if pos != -1:
      suffix = actorName[pos+1:]
      if suffix.isascii() and suffix.isdigit() and (suffix == "0" or suffix[0] != "0"):
         return (actorName[:pos], int(suffix) + 1)
   return (actorName, 0)

def composeActorName(baseName: str, instanceNumber: int) -> str:
   if instanceNumber == 0:
      return baseName
   return f"{baseName}_{instanceNumber - 1}"

class Header:

   def __init__(self, version: int = SAVE_VERSION, gameNumber: int = 0, saveNumber: int = 0, saveDescription: str = "", time: str = "", mapCommand: str = "", tacticalSave: bool = False, ironman: bool = False, autosave: bool = False, dlc: str = "", language: str = "INT"):
      self.version = version
      self.gameNumber = gameNumber
      self.saveNumber = saveNumber
      self.saveDescription = saveDescription
      self.time = time
      self.mapCommand = mapCommand
      self.tacticalSave = tacticalSave
      self.ironman = ironman
      self.autosave = autosave
      self.dlc = dlc
      self.language = language
      # Filled in by parseHeader; recomputed on save.
      self.bodyCrc = None
      self.headerLength = None
      self.headerCrc = None

   def parse(self, io: XComIO) -> None:
      self.version = io.readInt()
      if self.version != SAVE_VERSION:
         print(f"WARNING: Unexpected save version {self.version}, expected {SAVE_VERSION}.", file=sys.stderr)
      confirmBasicType(io, io.readInt, 0, "Header reserved field")
      self.gameNumber = io.readInt()
      self.saveNumber = io.readInt()
      self.saveDescription = io.readString()
      self.time = io.readString()
      self.mapCommand = io.readString()
      self.tacticalSave = io.readBool()
      self.ironman = io.readBool()
      self.autosave = io.readBool()
      self.dlc = io.readString()
      self.language = io.readString()
      self.bodyCrc = io.readUint32()
      io.seek(SeekKind.START, HEADER_LENGTH_OFFSET)
      self.headerLength = io.readInt()
      self.headerCrc = io.readUint32()

   def sameFields(self, other) -> bool:
      return all(getattr(self, field) == getattr(other, field) for field in (
         "version", "gameNumber", "saveNumber", "saveDescription", "time", "mapCommand",
         "tacticalSave", "ironman", "autosave", "dlc", "language"))

   def __eq__(self, other):
      return isinstance(other, Header) and self.sameFields(other)

   def __str__(self):
      string = "<Header: "
      string += f"version={self.version}, "
      string += f"gameNumber={self.gameNumber}, "
      string += f"saveNumber={self.saveNumber}, "
      string += f"saveDescription={self.saveDescription}, "
      string += f"time={self.time}, "
      string += f"mapCommand={self.mapCommand}, "
      string += f"tacticalSave={self.tacticalSave}, "
      string += f"ironman={self.ironman}, "
      string += f"autosave={self.autosave}, "
      string += f"dlc={self.dlc}, "
      string += f"language={self.language}, "
      string += f"bodyCrc={self.bodyCrc}, "
      string += f"headerLength={self.headerLength}, "
      string += f"headerCrc={self.headerCrc}>"
      return string

class Checkpoint:

   def __init__(self, name: str = "", instanceName: str = "", vector = (0.0, 0.0, 0.0), rotator = (0, 0, 0), className: str = "", properties = None, padSize: int = 0, templateIndex: int = -1):
      self.name = name
      self.instanceName = instanceName
      self.vector = list(vector)
      self.rotator = list(rotator)
      self.className = className
      self.properties = [] if properties is None else list(properties)
      self.padSize = padSize
      self.templateIndex = templateIndex

   def __eq__(self, other):
      return isinstance(other, Checkpoint) and vars(self) == vars(other)

   def __str__(self):
      return f"<Checkpoint: name={self.name}, instanceName={self.instanceName}, vector={self.vector}, rotator={self.rotator}, className={self.className}, properties={len(self.properties)}, padSize={self.padSize}, templateIndex={self.templateIndex}>"

class CheckpointChunk:

   def __init__(self, unknownInt1: int = 0, gameType: str = "", unknownInt2: int = 0, checkpoints = None, className: str = "", actors = None, unknownInt3: int = 0, displayName: str = "", mapName: str = "", unknownInt4: int = 0, nameTableLength: int = 0, actorTemplateTableLength: int = 0):
      self.unknownInt1 = unknownInt1
      self.gameType = gameType
      self.unknownInt2 = unknownInt2
      self.checkpoints = [] if checkpoints is None else list(checkpoints)
      self.nameTableLength = nameTableLength
      self.className = className
      self.actors = [] if actors is None else list(actors)
      self.unknownInt3 = unknownInt3
      self.actorTemplateTableLength = actorTemplateTableLength
      self.displayName = displayName
      self.mapName = mapName
      self.unknownInt4 = unknownInt4

   def __eq__(self, other):
      return isinstance(other, CheckpointChunk) and vars(self) == vars(other)

   def __str__(self):
      return f"<CheckpointChunk: gameType={self.gameType}, className={self.className}, displayName={self.displayName}, mapName={self.mapName}, checkpoints={len(self.checkpoints)}, actors={len(self.actors)}, unknownInts={[self.unknownInt1, self.unknownInt2, self.unknownInt3, self.unknownInt4]}>"

class SavedGame:

   def __init__(self, header: Header, actors = None, checkpointChunks = None, checksumMismatches = None):
      self.header = header
      self.actors = [] if actors is None else list(actors)
      self.checkpointChunks = [] if checkpointChunks is None else list(checkpointChunks)
      self.checksumMismatches = [] if checksumMismatches is None else list(checksumMismatches)

   def __eq__(self, other):
      return isinstance(other, SavedGame) and self.header == other.header and self.actors == other.actors and self.checkpointChunks == other.checkpointChunks

   def __str__(self):
      return f"<SavedGame: header={self.header}, actors={len(self.actors)}, checkpointChunks={len(self.checkpointChunks)}>"

def parseHeader(io: XComIO) -> Header:
   header = Header()
   header.parse(io)
   return header

def checkChecksums(io: XComIO, header: Header) -> list[ChecksumMismatchError]:
   mismatches = []

   io.seek(SeekKind.START, HEADER_REGION_SIZE)
   bodyCrc = io.crc(io.size() - HEADER_REGION_SIZE)
   if bodyCrc != header.bodyCrc:
      mismatches.append(ChecksumMismatchError(f"Body CRC 0x{header.bodyCrc:08x} does not match computed 0x{bodyCrc:08x}", HEADER_REGION_SIZE))

   if header.headerLength < 0 or header.headerLength > HEADER_LENGTH_OFFSET:
      mismatches.append(ChecksumMismatchError(f"Header length {header.headerLength} is outside the header region", HEADER_LENGTH_OFFSET))
   else:
      io.seek(SeekKind.START, 0)
      headerCrc = io.crc(header.headerLength)
      if headerCrc != header.headerCrc:
         mismatches.append(ChecksumMismatchError(f"Header CRC 0x{header.headerCrc:08x} does not match computed 0x{headerCrc:08x}", HEADER_CRC_OFFSET))

   return mismatches

def verifyChecksums(data) -> list[ChecksumMismatchError]:
   io = XComIO(data)
   header = parseHeader(io)
   return checkChecksums(io, header)

def decompressSaveFile(data, offset: int = HEADER_REGION_SIZE) -> bytes:
   io = XComIO(data)
   io.seek(SeekKind.START, offset)

   # First pass: chunk headers only, to size the output.
   chunks = []
   totalUncompressedSize = 0
   while io.offset() < io.size():
      chunkOffset = io.offset()
      if io.size() - chunkOffset < CHUNK_HEADER_SIZE:
         raise CorruptChunkError(f"Truncated chunk header of {io.size() - chunkOffset} bytes", chunkOffset)
      magic = io.readUint32()
      if magic != UPK_MAGIC:
         raise CorruptChunkError(f"Chunk magic 0x{magic:08x} does not match 0x{UPK_MAGIC:08x}", chunkOffset)
      flags = io.readInt()
      compressedLength1 = io.readInt()
      uncompressedLength1 = io.readInt()
      compressedLength2 = io.readInt()
      uncompressedLength2 = io.readInt()

      if compressedLength1 != compressedLength2:
         raise CorruptChunkError(f"Compressed size mismatch {compressedLength1} != {compressedLength2}", chunkOffset)
      if uncompressedLength1 != uncompressedLength2:
         raise CorruptChunkError(f"Uncompressed size mismatch {uncompressedLength1} != {uncompressedLength2}", chunkOffset)
      if compressedLength1 < 0 or uncompressedLength1 < 0:
         raise CorruptChunkError(f"Negative chunk size compressed={compressedLength1} uncompressed={uncompressedLength1}", chunkOffset)
      if io.offset() + compressedLength1 > io.size():
         raise CorruptChunkError(f"Chunk compressed length exceeds end of file by {io.offset() + compressedLength1 - io.size()}", chunkOffset)
      if PRINT_DEBUG:
         print(f"Chunk at {chunkOffset}: flags=0x{flags:x} compressed={compressedLength1} uncompressed={uncompressedLength1}")
         if flags != CHUNK_FLAGS:
            print(f"Chunk at {chunkOffset} has unusual flags 0x{flags:x}")

      chunks.append((io.offset(), compressedLength1, uncompressedLength1))
      totalUncompressedSize += uncompressedLength1
      io.seek(SeekKind.CURRENT, compressedLength1)

   decompressedData = bytearray(totalUncompressedSize)
   if PROGRESS_BAR_ENABLE_DECOMPRESS:
      progressBar = ProgressBar(totalUncompressedSize, "Decompression: ")
   outputOffset = 0
   for (dataOffset, compressedLength, uncompressedLength) in chunks:
      try:
         dData = lzo.decompress(bytes(data[dataOffset:dataOffset+compressedLength]), False, uncompressedLength)
      except lzo.error as error:
         raise CorruptChunkError(f"LZO decompression failed: {error}", dataOffset)
      if len(dData) != uncompressedLength:
         raise CorruptChunkError(f"Decompression didn't return the expected amount return={len(dData)} != expected={uncompressedLength}", dataOffset)
      decompressedData[outputOffset:outputOffset+uncompressedLength] = dData
      outputOffset += uncompressedLength
      if PROGRESS_BAR_ENABLE_DECOMPRESS:
         progressBar.set(outputOffset)

   if PROGRESS_BAR_ENABLE_DECOMPRESS:
      progressBar.complete()
   return bytes(decompressedData)

def looksLikePropertyList(io: XComIO, endOffset: int) -> bool:
   # Peeks at a name / 0 / kind string triple, or a bare "None" terminator.
   originalOffset = io.offset()
   try:
      name = io.readString()
      if io.readInt() != 0:
         return False
      if name == "None":
         return io.offset() <= endOffset
      kindString = io.readString()
      return kindString in KNOWN_KIND_STRINGS and io.offset() <= endOffset
   except ParseError:
      return False
   finally:
      io.seek(SeekKind.START, originalOffset)

def consumesExactly(io: XComIO, endOffset: int, reader) -> bool:
   originalOffset = io.offset()
   try:
      reader()
      return io.offset() == endOffset
   except ParseError:
      return False
   finally:
      io.seek(SeekKind.START, originalOffset)

def parseObjectReference(io: XComIO) -> int:
   pairOffset = io.offset()
   first = io.readInt()
   second = io.readInt()
   if first == -1 and second == -1:
      return -1
   if second < 0 or second % 2 != 0 or first != second + 1:
      raise ParseError(f"Invalid object reference pair ({first}, {second})", pairOffset)
   return second // 2

def inferArrayKind(io: XComIO, name: str, arrayBound: int, dataLength: int) -> PropertyKind:
   if name in ARRAY_KIND_HINTS:
      return PropertyKind(ARRAY_KIND_HINTS[name])
   if arrayBound <= 0 or dataLength <= 0:
      return PropertyKind.ARRAY
   # Trial reads run on a copy of the payload so none can pass its end.
   payload = XComIO(io.readRaw(dataLength))
   io.seek(SeekKind.CURRENT, -dataLength)
   if looksLikePropertyList(payload, dataLength):
      return PropertyKind.STRUCT_ARRAY
   if dataLength == 8 * arrayBound and consumesExactly(payload, dataLength, lambda: [parseObjectReference(payload) for idx in range(arrayBound)]):
      return PropertyKind.OBJECT_ARRAY
   if dataLength == 4 * arrayBound:
      return PropertyKind.NUMBER_ARRAY
   if consumesExactly(payload, dataLength, lambda: [payload.readUnicodeString() for idx in range(arrayBound)]):
      return PropertyKind.STRING_ARRAY
   if consumesExactly(payload, dataLength, lambda: [(payload.readString(), payload.readInt()) for idx in range(arrayBound)]):
      return PropertyKind.ENUM_ARRAY
   return PropertyKind.ARRAY

def parseArrayProperty(io: XComIO, name: str, size: int, arrayIndex: int):
   sizeOffset = io.offset()
   if size < 4:
      raise ParseError(f"Array property '{name}' size {size} is smaller than its bound field", sizeOffset)
   endOffset = io.offset() + size
   arrayBound = io.readInt()
   dataLength = size - 4
   kind = inferArrayKind(io, name, arrayBound, dataLength)
   match kind:
      case PropertyKind.ARRAY:
         prop = ArrayProperty(name, arrayBound, io.readRaw(dataLength), arrayIndex)
      case PropertyKind.OBJECT_ARRAY:
         prop = ObjectArrayProperty(name, [parseObjectReference(io) for idx in range(arrayBound)], arrayIndex)
      case PropertyKind.NUMBER_ARRAY:
         prop = NumberArrayProperty(name, [io.readInt() for idx in range(arrayBound)], arrayIndex)
      case PropertyKind.STRING_ARRAY:
         strings = [io.readUnicodeString() for idx in range(arrayBound)]
         prop = StringArrayProperty(name, [text for (text, wide) in strings], [wide for (text, wide) in strings], arrayIndex)
      case PropertyKind.ENUM_ARRAY:
         elements = []
         wideFlags = []
         for idx in range(arrayBound):
            (elementName, wide) = io.readUnicodeString()
            elementNumber = io.readInt()
            elements.append(EnumValue(elementName, elementNumber))
            wideFlags.append(wide)
         prop = EnumArrayProperty(name, elements, wideFlags, arrayIndex)
      case PropertyKind.STRUCT_ARRAY:
         prop = StructArrayProperty(name, [parseProperties(io, endOffset) for idx in range(arrayBound)], arrayIndex)
      case _:
         raise UnexpectedKindError(f"Array hint {kind} for '{name}' is not an array kind", sizeOffset)
   if io.offset() != endOffset:
      raise ParseError(f"Array property '{name}' consumed {io.offset() - sizeOffset} bytes of declared {size}", sizeOffset)
   return prop

def parseStructProperty(io: XComIO, name: str, size: int, arrayIndex: int):
   structName = io.readString()
   confirmBasicType(io, io.readInt, 0, f"StructProperty '{name}' reserved field")
   payloadOffset = io.offset()
   endOffset = payloadOffset + size
   if structName in NATIVE_STRUCTS or not looksLikePropertyList(io, endOffset):
      return StructProperty(name, structName, nativeData=io.readRaw(size), arrayIndex=arrayIndex)
   properties = parseProperties(io, endOffset)
   if io.offset() != endOffset:
      raise ParseError(f"Struct property '{name}' ({structName}) consumed {io.offset() - payloadOffset} bytes of declared {size}", payloadOffset)
   return StructProperty(name, structName, properties, arrayIndex=arrayIndex)

def parseProperty(io: XComIO, name: str | None = None):
   propertyOffset = io.offset()
   if name is None:
      name = io.readString()
   confirmBasicType(io, io.readInt, 0, f"Property '{name}' reserved field")
   kindOffset = io.offset()
   kindString = io.readString()
   confirmBasicType(io, io.readInt, 0, f"Property '{name}' kind reserved field")
   size = io.readInt()
   arrayIndex = io.readInt()

   match kindString:
      case "IntProperty":
         prop = IntProperty(name, io.readInt(), arrayIndex)
      case "FloatProperty":
         prop = FloatProperty(name, io.readFloat(), arrayIndex)
      case "BoolProperty":
         flagOffset = io.offset()
         flag = io.readByte()
         if flag != 0 and flag != 1:
            raise ParseError(f"BoolProperty '{name}' holds {flag}", flagOffset)
         prop = BoolProperty(name, flag != 0, arrayIndex)
      case "StrProperty":
         (text, wide) = io.readUnicodeString()
         prop = StringProperty(name, text, wide, arrayIndex)
      case "NameProperty":
         (value, wide) = io.readUnicodeString()
         number = io.readInt()
         prop = NameProperty(name, value, number, arrayIndex, wide)
      case "ObjectProperty":
         prop = ObjectProperty(name, io.readInt(), arrayIndex)
      case "ByteProperty":
         enumType = io.readString()
         confirmBasicType(io, io.readInt, 0, f"ByteProperty '{name}' reserved field")
         if enumType == "None":
            prop = EnumProperty(name, enumType, EnumValue(None, io.readByte()), arrayIndex)
         else:
            (valueName, wide) = io.readUnicodeString()
            valueNumber = io.readInt()
            prop = EnumProperty(name, enumType, EnumValue(valueName, valueNumber), arrayIndex, wide)
      case "StructProperty":
         prop = parseStructProperty(io, name, size, arrayIndex)
      case "ArrayProperty":
         prop = parseArrayProperty(io, name, size, arrayIndex)
      case _:
         raise UnexpectedKindError(f"Unknown property kind '{kindString}' for property '{name}'", kindOffset)

   if prop.size() != size:
      raise ParseError(f"Property '{name}' of kind {kindString} declares size {size} but holds {prop.size()}", propertyOffset)
   if PRINT_DEBUG:
      print(f"Property at {propertyOffset}: {prop}")
   return prop

def appendProperty(properties: list, prop) -> None:
   # Fixed-size arrays are stored as one property per element with the same
   # name and increasing array indices. Names in STATIC_ARRAY_NAMES are
   # grouped even when only element 0 is present.
   if prop.arrayIndex > 0 and len(properties) > 0 and properties[-1].name == prop.name:
      last = properties[-1]
      if isinstance(last, StaticArrayProperty):
         if prop.arrayIndex == len(last.properties):
            last.properties.append(prop)
            return
      elif last.arrayIndex == 0 and prop.arrayIndex == 1:
         properties[-1] = StaticArrayProperty(prop.name, [last, prop])
         return
   if prop.arrayIndex == 0 and prop.name in STATIC_ARRAY_NAMES:
      properties.append(StaticArrayProperty(prop.name, [prop]))
      return
   properties.append(prop)

def parseProperties(io: XComIO, endOffset: int | None = None) -> list:
   properties = []
   while True:
      if endOffset is not None and io.offset() >= endOffset:
         raise UnexpectedKindError("Property list is missing its 'None' terminator", io.offset())
      name = io.readString()
      if name == "None":
         confirmBasicType(io, io.readInt, 0, "Property list terminator")
         break
      appendProperty(properties, parseProperty(io, name))
   return properties

def parseActorTable(io: XComIO) -> list[str]:
   countOffset = io.offset()
   count = io.readInt()
   if count < 0:
      raise ParseError(f"Negative actor table count {count}", countOffset)
   actors = []
   for idx in range(count):
      baseName = io.readString()
      instanceNumber = io.readInt()
      actors.append(composeActorName(baseName, instanceNumber))
   return actors

def parseCheckpoint(io: XComIO) -> Checkpoint:
   checkpoint = Checkpoint()
   checkpoint.name = io.readString()
   checkpoint.instanceName = io.readString()
   checkpoint.vector = [io.readFloat() for idx in range(3)]
   checkpoint.rotator = [io.readInt() for idx in range(3)]
   checkpoint.className = io.readString()
   sizeOffset = io.offset()
   totalPropertySize = io.readInt()
   propertyStartOffset = io.offset()
   checkpoint.properties = parseProperties(io, propertyStartOffset + totalPropertySize)

   # The consumed bytes include the "None" terminator and the int after it.
   consumed = io.offset() - propertyStartOffset
   checkpoint.padSize = totalPropertySize - consumed
   if checkpoint.padSize < 0:
      raise ParseError(f"Checkpoint '{checkpoint.name}' properties use {consumed} bytes of declared {totalPropertySize}", sizeOffset)
   padding = io.readRaw(checkpoint.padSize)
   if any(byte != 0 for byte in padding):
      print(f"WARNING: Checkpoint '{checkpoint.name}' has non-zero padding which will be zeroed on save.", file=sys.stderr)
   checkpoint.templateIndex = io.readInt()
   return checkpoint

def parseCheckpointTable(io: XComIO) -> list[Checkpoint]:
   countOffset = io.offset()
   count = io.readInt()
   if count < 0:
      raise ParseError(f"Negative checkpoint table count {count}", countOffset)
   return [parseCheckpoint(io) for idx in range(count)]

def parseCheckpointChunk(io: XComIO) -> CheckpointChunk:
   chunk = CheckpointChunk()
   chunk.unknownInt1 = io.readInt()
   chunk.gameType = io.readString()
   confirmNoneTerminator(io, "checkpoint chunk placeholder")
   chunk.unknownInt2 = io.readInt()
   chunk.checkpoints = parseCheckpointTable(io)
   chunk.nameTableLength = io.readInt()
   if chunk.nameTableLength != 0:
      print(f"WARNING: Checkpoint chunk name table length is {chunk.nameTableLength}, expected 0.", file=sys.stderr)
   chunk.className = io.readString()
   chunk.actors = parseActorTable(io)
   chunk.unknownInt3 = io.readInt()
   chunk.actorTemplateTableLength = io.readInt()
   if chunk.actorTemplateTableLength != 0:
      print(f"WARNING: Checkpoint chunk actor template table length is {chunk.actorTemplateTableLength}, expected 0.", file=sys.stderr)
   chunk.displayName = io.readString()
   chunk.mapName = io.readString()
   chunk.unknownInt4 = io.readInt()
   return chunk

def parseSave(data, strictChecksums: bool = False, decompressedOutputFilename: str | None = None) -> SavedGame:
   io = XComIO(data)
   header = parseHeader(io)

   checksumMismatches = checkChecksums(io, header)
   for mismatch in checksumMismatches:
      if strictChecksums:
         raise mismatch
      print(f"WARNING: {mismatch}", file=sys.stderr)

   body = decompressSaveFile(data)
   if decompressedOutputFilename is not None:
      with open(decompressedOutputFilename, "wb") as fout:
         fout.write(body)

   bodyIO = XComIO(body)
   actors = parseActorTable(bodyIO)

   checkpointChunks = []
   if PROGRESS_BAR_ENABLE_PARSE:
      progressBar = ProgressBar(bodyIO.size(), "      Parsing: ")
   while bodyIO.offset() < bodyIO.size():
      checkpointChunks.append(parseCheckpointChunk(bodyIO))
      if PRINT_DEBUG:
         print(checkpointChunks[-1])
      if PROGRESS_BAR_ENABLE_PARSE:
         progressBar.set(bodyIO.offset())
   if PROGRESS_BAR_ENABLE_PARSE:
      progressBar.complete()

   return SavedGame(header, actors, checkpointChunks, checksumMismatches)

def readFullSaveFile(filename: str, decompressedOutputFilename: str | None = None, strictChecksums: bool = False) -> SavedGame:
   with open(filename, "rb") as fin:
      data = fin.read()
   return parseSave(data, strictChecksums, decompressedOutputFilename)

def readSaveHeader(filename: str) -> Header:
   with open(filename, "rb") as fin:
      data = fin.read(HEADER_REGION_SIZE)
   return parseHeader(XComIO(data))

if __name__ == '__main__':

   if len(sys.argv) <= 1:
      print("ERROR: Please supply save file path/name to perform parsing.", file=sys.stderr)
      exit(1)

   savedGame = readFullSaveFile(sys.argv[1])
   print(savedGame.header)
   print(f"Actors: {len(savedGame.actors)}")
   for chunk in savedGame.checkpointChunks:
      print(chunk)
      for checkpoint in chunk.checkpoints:
         print(f"   {checkpoint}")
         for prop in checkpoint.properties:
            print(f"      {prop}")

   exit(0)
