#!/usr/bin/python3
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

import sys

import lzo

import xcom_parse
from xcom_data.data import (
   CHUNK_FLAGS,
   CHUNK_HEADER_SIZE,
   CHUNK_SIZE,
   HEADER_LENGTH_OFFSET,
   HEADER_REGION_SIZE,
   UPK_MAGIC,
)
from xcom_io import InvalidOperationError, SeekKind, XComError, XComIO
from xcom_properties import PropertyKind, StaticArrayProperty

PROGRESS_BAR_ENABLE_COMPRESS = True

def addProperty(io: XComIO, prop, arrayIndex: int) -> None:
   if isinstance(prop, StaticArrayProperty):
      raise InvalidOperationError(f"Attempted to write static array property '{prop.name}' as a single property", io.offset())

   io.writeString(prop.name)
   io.writeInt(0)
   io.writeString(prop.kindString())
   io.writeInt(0)
   io.writeInt(prop.size())
   io.writeInt(arrayIndex)

   match prop.kind:
      case PropertyKind.INT:
         io.writeInt(prop.value)
      case PropertyKind.FLOAT:
         io.writeFloat(prop.value)
      case PropertyKind.BOOL:
         io.ensure(1)
         io.writeBool(prop.value)
      case PropertyKind.STRING:
         io.writeUnicodeString(prop.value, prop.isWide)
      case PropertyKind.NAME:
         io.writeUnicodeString(prop.value, prop.isWide)
         io.writeInt(prop.number)
      case PropertyKind.OBJECT:
         io.writeInt(prop.actor)
      case PropertyKind.ENUM:
         io.writeString(prop.enumType)
         io.writeInt(0)
         if prop.isNumeric():
            io.writeByte(prop.value.number)
         else:
            io.writeUnicodeString(prop.value.name, prop.isWide)
            io.writeInt(prop.value.number)
      case PropertyKind.STRUCT:
         io.writeString(prop.structName)
         io.writeInt(0)
         if prop.isNative():
            io.writeRaw(prop.nativeData)
         else:
            addProperties(io, prop.properties)
      case PropertyKind.ARRAY:
         io.writeInt(prop.arrayBound)
         io.writeRaw(prop.data)
      case PropertyKind.OBJECT_ARRAY:
         io.writeInt(len(prop.elements))
         for actor in prop.elements:
            if actor == -1:
               io.writeInt(-1)
               io.writeInt(-1)
            elif actor < 0:
               raise InvalidOperationError(f"Object array '{prop.name}' holds invalid actor index {actor}", io.offset())
            else:
               io.writeInt(actor * 2 + 1)
               io.writeInt(actor * 2)
      case PropertyKind.NUMBER_ARRAY:
         io.writeInt(len(prop.elements))
         for value in prop.elements:
            io.writeInt(value)
      case PropertyKind.STRING_ARRAY:
         io.writeInt(len(prop.elements))
         for (text, wide) in zip(prop.elements, prop.wideFlags):
            io.writeUnicodeString(text, wide)
      case PropertyKind.ENUM_ARRAY:
         io.writeInt(len(prop.elements))
         for (element, wide) in zip(prop.elements, prop.wideFlags):
            io.writeUnicodeString(element.name, wide)
            io.writeInt(element.number)
      case PropertyKind.STRUCT_ARRAY:
         io.writeInt(len(prop.elements))
         for element in prop.elements:
            addProperties(io, element)
      case _:
         raise InvalidOperationError(f"Unknown property kind {prop.kind} for '{prop.name}'", io.offset())

def addStaticArray(io: XComIO, staticArray: StaticArrayProperty) -> None:
   # Only the elements exist in the stream, each tagged with its position.
   for (idx, prop) in enumerate(staticArray.properties):
      addProperty(io, prop, idx)

def addPropertyEntry(io: XComIO, prop) -> None:
   if isinstance(prop, StaticArrayProperty):
      addStaticArray(io, prop)
   else:
      addProperty(io, prop, prop.arrayIndex)

def addProperties(io: XComIO, properties) -> None:
   for prop in properties:
      addPropertyEntry(io, prop)
   io.writeString("None")
   io.writeInt(0)

def addActorTable(io: XComIO, actors) -> None:
   io.writeInt(len(actors))
   for actor in actors:
      (baseName, instanceNumber) = xcom_parse.decomposeActorName(actor)
      io.writeString(baseName)
      io.writeInt(instanceNumber)

def addCheckpoint(io: XComIO, checkpoint: xcom_parse.Checkpoint) -> None:
   io.writeString(checkpoint.name)
   io.writeString(checkpoint.instanceName)
   for value in checkpoint.vector:
      io.writeFloat(value)
   for value in checkpoint.rotator:
      io.writeInt(value)
   io.writeString(checkpoint.className)

   if checkpoint.padSize < 0:
      raise InvalidOperationError(f"Checkpoint '{checkpoint.name}' has negative pad size {checkpoint.padSize}", io.offset())
   # Trailing "None" + int terminate the list.
   totalPropertySize = sum(prop.fullSize() for prop in checkpoint.properties)
   totalPropertySize += 9 + 4
   totalPropertySize += checkpoint.padSize
   io.writeInt(totalPropertySize)

   addProperties(io, checkpoint.properties)
   io.ensure(checkpoint.padSize)
   io.writeRaw(bytes(checkpoint.padSize))
   io.writeInt(checkpoint.templateIndex)

def addCheckpointTable(io: XComIO, checkpoints) -> None:
   io.writeInt(len(checkpoints))
   for checkpoint in checkpoints:
      addCheckpoint(io, checkpoint)

def addCheckpointChunk(io: XComIO, chunk: xcom_parse.CheckpointChunk) -> None:
   io.writeInt(chunk.unknownInt1)
   io.writeString(chunk.gameType)
   io.writeString("None")
   io.writeInt(chunk.unknownInt2)
   addCheckpointTable(io, chunk.checkpoints)
   io.writeInt(chunk.nameTableLength)
   io.writeString(chunk.className)
   addActorTable(io, chunk.actors)
   io.writeInt(chunk.unknownInt3)
   io.writeInt(chunk.actorTemplateTableLength)
   io.writeString(chunk.displayName)
   io.writeString(chunk.mapName)
   io.writeInt(chunk.unknownInt4)

def compressSaveData(rdata: bytes) -> XComIO:
   sdata = XComIO()
   sdata.writeRaw(bytes(HEADER_REGION_SIZE))

   dataOffset = 0
   if PROGRESS_BAR_ENABLE_COMPRESS:
      progressBar = xcom_parse.ProgressBar(len(rdata), "  Compressing: ")
   while dataOffset < len(rdata):

      chunkSize = CHUNK_SIZE
      if dataOffset + chunkSize > len(rdata):
         chunkSize = len(rdata) - dataOffset

      try:
         cdata = lzo.compress(rdata[dataOffset:dataOffset+chunkSize], 1, False)
      except lzo.error as error:
         raise XComError(f"LZO compression failed: {error}", dataOffset)

      sdata.ensure(CHUNK_HEADER_SIZE + len(cdata))
      sdata.writeUint32(UPK_MAGIC)
      sdata.writeInt(CHUNK_FLAGS)
      sdata.writeInt(len(cdata))
      sdata.writeInt(chunkSize)
      sdata.writeInt(len(cdata))
      sdata.writeInt(chunkSize)
      sdata.writeRaw(cdata)

      dataOffset += chunkSize
      if PROGRESS_BAR_ENABLE_COMPRESS:
         progressBar.set(dataOffset)
   if PROGRESS_BAR_ENABLE_COMPRESS:
      progressBar.complete()

   return sdata

def addHeader(io: XComIO, header: xcom_parse.Header) -> None:
   # Written into the reserved region once the compressed body is in place.
   io.seek(SeekKind.START, 0)
   io.writeInt(header.version)
   io.writeInt(0)
   io.writeInt(header.gameNumber)
   io.writeInt(header.saveNumber)
   io.writeString(header.saveDescription)
   io.writeString(header.time)
   io.writeString(header.mapCommand)
   io.writeBool(header.tacticalSave)
   io.writeBool(header.ironman)
   io.writeBool(header.autosave)
   io.writeString(header.dlc)
   io.writeString(header.language)

   bodyCrcOffset = io.offset()
   if bodyCrcOffset + 8 > HEADER_LENGTH_OFFSET:
      raise InvalidOperationError(f"Header fields need {bodyCrcOffset + 8} bytes, more than the {HEADER_LENGTH_OFFSET} available", bodyCrcOffset)

   io.seek(SeekKind.START, HEADER_REGION_SIZE)
   bodyCrc = io.crc(io.size() - HEADER_REGION_SIZE)
   io.seek(SeekKind.START, bodyCrcOffset)
   io.writeUint32(bodyCrc)

   # The header CRC covers everything up to 4 bytes past the body CRC.
   headerLength = io.offset() + 4
   io.seek(SeekKind.START, 0)
   headerCrc = io.crc(headerLength)

   io.seek(SeekKind.START, HEADER_LENGTH_OFFSET)
   io.writeInt(headerLength)
   io.writeUint32(headerCrc)

def saveToBytes(savedGame: xcom_parse.SavedGame) -> bytes:
   rdata = XComIO()
   addActorTable(rdata, savedGame.actors)
   for chunk in savedGame.checkpointChunks:
      addCheckpointChunk(rdata, chunk)

   sdata = compressSaveData(rdata.release())
   addHeader(sdata, savedGame.header)
   return sdata.release()

def saveFile(savedGame: xcom_parse.SavedGame, outFilename: str) -> None:
   data = saveToBytes(savedGame)
   with open(outFilename, "wb") as fout:
      fout.write(data)

if __name__ == '__main__':

   if len(sys.argv) != 3:
      print("USAGE: xcom_to_resave.py <input-file> <output-file>")
      exit(1)

   inFilename = sys.argv[1]
   outFilename = sys.argv[2]

   print("Parsing save file")
   savedGame = xcom_parse.readFullSaveFile(inFilename)

   print("Recreating save file")
   saveFile(savedGame, outFilename)

   exit(0)
