import struct

import pytest

import xcom_parse
import xcom_to_resave
from xcom_properties import (
   BoolProperty,
   EnumProperty,
   EnumValue,
   FloatProperty,
   IntProperty,
   NameProperty,
   NumberArrayProperty,
   ObjectArrayProperty,
   ObjectProperty,
   StaticArrayProperty,
   StringArrayProperty,
   StringProperty,
   StructArrayProperty,
   StructProperty,
)

@pytest.fixture(autouse=True)
def quietProgressBars(monkeypatch):
   monkeypatch.setattr(xcom_parse, "PROGRESS_BAR_ENABLE_DECOMPRESS", False)
   monkeypatch.setattr(xcom_parse, "PROGRESS_BAR_ENABLE_PARSE", False)
   monkeypatch.setattr(xcom_to_resave, "PROGRESS_BAR_ENABLE_COMPRESS", False)

@pytest.fixture
def sampleCheckpoint():
   return xcom_parse.Checkpoint(
      name="XGStrategy_0",
      instanceName="Command1.TheWorld:PersistentLevel.XGStrategy_0",
      vector=(1.5, -2.25, 100.0),
      rotator=(0, 16384, -32768),
      className="XGStrategy",
      properties=[
         IntProperty("m_iTurn", 12),
         FloatProperty("m_fTime", 0.5),
         BoolProperty("m_bIronman", True),
         StringProperty("m_strCallsign", "Zhang"),
         NameProperty("m_nmTag", "Soldier", 2),
         ObjectProperty("m_kGeoscape", 1),
         ObjectProperty("m_kHQ", -1),
         EnumProperty("m_eRank", "ESoldierRank", EnumValue("eRank_Colonel", 0)),
         EnumProperty("m_iKills", "None", EnumValue(None, 7)),
         StructProperty("m_vLoc", "Vector", nativeData=struct.pack("<3f", 1.0, 2.0, 3.0)),
         StructProperty("m_kStats", "TCharacterStats", [IntProperty("iHP", 6), StringProperty("strNote", "Снег")]),
         ObjectArrayProperty("arrUnits", [0, 1, -1]),
         NumberArrayProperty("arrScores", [10, -20, 30]),
         StringArrayProperty("arrNames", ["Alpha", "Beta"]),
         StructArrayProperty("arrItems", [[IntProperty("iCount", 2)], [IntProperty("iCount", 5), BoolProperty("bUsed", False)]]),
         StaticArrayProperty("m_arrSlots", [IntProperty("m_arrSlots", 4), IntProperty("m_arrSlots", 8), IntProperty("m_arrSlots", 15)]),
      ],
      padSize=4,
      templateIndex=-1,
   )

@pytest.fixture
def sampleSave(sampleCheckpoint):
   header = xcom_parse.Header(
      gameNumber=3,
      saveNumber=42,
      saveDescription="Test save - Operation Dying Star",
      time="2026-10-19 12:00",
      mapCommand="open Command1?game=XComGame.XComHeadQuartersGame",
      tacticalSave=False,
      ironman=True,
      autosave=False,
      dlc="",
      language="INT",
   )
   chunk = xcom_parse.CheckpointChunk(
      unknownInt1=1,
      gameType="XComStrategyGame.XComHeadquartersGame",
      unknownInt2=0,
      checkpoints=[sampleCheckpoint],
      className="XComStrategyGame.XComHeadquartersGame",
      actors=["XGStrategy_0", "XComHQPresentationLayer"],
      unknownInt3=7,
      displayName="Command1",
      mapName="Command1",
      unknownInt4=-1,
   )
   return xcom_parse.SavedGame(header, ["XGStrategy_0", "XGGeoscape_12", "XComMapManager"], [chunk])
