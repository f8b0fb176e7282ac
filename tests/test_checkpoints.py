import pytest

import xcom_parse
from xcom_io import InvalidOperationError, UnexpectedKindError, XComIO
from xcom_parse import (
   composeActorName,
   decomposeActorName,
   parseActorTable,
   parseCheckpoint,
   parseCheckpointChunk,
)
from xcom_properties import PROPERTY_LIST_TERMINATOR_SIZE
from xcom_to_resave import addActorTable, addCheckpoint, addCheckpointChunk

def encodeWith(writer, value):
   io = XComIO()
   writer(io, value)
   return io.release()

@pytest.mark.parametrize("actorName, expected", [
   ("XGUnit_3", ("XGUnit", 4)),
   ("XGUnit_0", ("XGUnit", 1)),
   ("XComHQ", ("XComHQ", 0)),
   ("Foo_Bar_12", ("Foo_Bar", 13)),
   ("Foo_03", ("Foo_03", 0)),
   ("Foo_", ("Foo_", 0)),
])
def test_actor_name_decomposition(actorName, expected):
   assert decomposeActorName(actorName) == expected
   assert composeActorName(*expected) == actorName

def test_actor_table_stores_split_names():
   actors = ["XGUnit_3", "XComHQ", "Foo_03"]
   data = encodeWith(addActorTable, actors)
   io = XComIO(data)
   assert io.readInt() == 3
   assert (io.readString(), io.readInt()) == ("XGUnit", 4)
   assert (io.readString(), io.readInt()) == ("XComHQ", 0)
   assert parseActorTable(XComIO(data)) == actors

def test_checkpoint_total_size(sampleCheckpoint):
   io = XComIO(encodeWith(addCheckpoint, sampleCheckpoint))
   io.readString()
   io.readString()
   [io.readFloat() for idx in range(3)]
   [io.readInt() for idx in range(3)]
   io.readString()
   propertySize = sum(prop.fullSize() for prop in sampleCheckpoint.properties)
   assert io.readInt() == propertySize + PROPERTY_LIST_TERMINATOR_SIZE + sampleCheckpoint.padSize

def test_checkpoint_decodes_with_padding(sampleCheckpoint):
   data = encodeWith(addCheckpoint, sampleCheckpoint)
   io = XComIO(data)
   checkpoint = parseCheckpoint(io)
   assert io.offset() == len(data)
   assert checkpoint.padSize == 4
   assert checkpoint == sampleCheckpoint
   assert data[-8:-4] == bytes(4)

def test_nonzero_padding_is_read_and_reported(sampleCheckpoint, capsys):
   data = bytearray(encodeWith(addCheckpoint, sampleCheckpoint))
   data[-5] = 0x7f
   checkpoint = parseCheckpoint(XComIO(bytes(data)))
   assert checkpoint == sampleCheckpoint
   assert "WARNING" in capsys.readouterr().err
   assert encodeWith(addCheckpoint, checkpoint)[-5] == 0

def test_negative_padding_is_refused(sampleCheckpoint):
   sampleCheckpoint.padSize = -1
   with pytest.raises(InvalidOperationError):
      encodeWith(addCheckpoint, sampleCheckpoint)

def test_checkpoint_chunk_decodes(sampleCheckpoint):
   chunk = xcom_parse.CheckpointChunk(
      unknownInt1=1,
      gameType="XComGame.XComTacticalGame",
      unknownInt2=2,
      checkpoints=[sampleCheckpoint, xcom_parse.Checkpoint("XGUnit_0", "Level.XGUnit_0", className="XGUnit")],
      className="XComGame.XComTacticalGame",
      actors=["XGUnit_0", "XGAIPlayer"],
      unknownInt3=3,
      displayName="Abandoned Factory",
      mapName="URB_Factory",
      unknownInt4=4,
   )
   data = encodeWith(addCheckpointChunk, chunk)
   io = XComIO(data)
   assert parseCheckpointChunk(io) == chunk
   assert io.offset() == len(data)

def test_unexpected_table_lengths_are_kept(capsys):
   chunk = xcom_parse.CheckpointChunk(gameType="Game", className="Game", nameTableLength=2, actorTemplateTableLength=5)
   decoded = parseCheckpointChunk(XComIO(encodeWith(addCheckpointChunk, chunk)))
   assert decoded.nameTableLength == 2
   assert decoded.actorTemplateTableLength == 5
   assert capsys.readouterr().err.count("WARNING") == 2

def test_chunk_placeholder_must_be_none():
   io = XComIO()
   io.writeInt(1)
   io.writeString("XComGame.XComTacticalGame")
   io.writeString("Nope")
   io.writeInt(0)
   with pytest.raises(UnexpectedKindError):
      parseCheckpointChunk(XComIO(io.release()))
