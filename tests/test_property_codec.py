import struct

import pytest

import xcom_data.data
import xcom_parse
from xcom_io import InvalidOperationError, ParseError, SeekKind, UnexpectedKindError, XComIO
from xcom_parse import inferArrayKind, parseProperties, parseProperty
from xcom_properties import (
   ArrayProperty,
   BoolProperty,
   EnumArrayProperty,
   EnumProperty,
   EnumValue,
   IntProperty,
   NameProperty,
   NumberArrayProperty,
   ObjectArrayProperty,
   PropertyKind,
   StaticArrayProperty,
   StructArrayProperty,
   StructProperty,
)
from xcom_to_resave import addProperties, addProperty, addPropertyEntry

def encode(prop):
   io = XComIO()
   addPropertyEntry(io, prop)
   return io.release()

def decode(data):
   io = XComIO(data)
   prop = parseProperty(io)
   assert io.offset() == len(data)
   return prop

def encodeList(properties):
   io = XComIO()
   addProperties(io, properties)
   return io.release()

def test_every_kind_decodes_to_the_same_model(sampleCheckpoint):
   for prop in sampleCheckpoint.properties:
      data = encode(prop)
      assert len(data) == prop.fullSize(), prop.name
      if isinstance(prop, StaticArrayProperty):
         assert parseProperties(XComIO(data + encodeList([]))) == [prop]
      else:
         assert decode(data) == prop

def test_envelope_layout():
   data = encode(IntProperty("Count", 7, 2))
   expected = struct.pack("<i", 6) + b"Count\0" + struct.pack("<i", 0)
   expected += struct.pack("<i", 12) + b"IntProperty\0" + struct.pack("<i", 0)
   expected += struct.pack("<iii", 4, 2, 7)
   assert data == expected

def test_bool_writes_zero_size_and_one_value_byte():
   data = encode(BoolProperty("Flag", True))
   assert struct.unpack_from("<ii", data, len(data) - 9) == (0, 0)
   assert data[-1:] == b"\x01"

def test_bool_value_must_be_zero_or_one():
   data = bytearray(encode(BoolProperty("Flag", True)))
   data[-1] = 2
   with pytest.raises(ParseError):
      decode(bytes(data))

def test_object_array_element_encoding():
   data = encode(ObjectArrayProperty("Units", [5, -1]))
   assert struct.unpack("<5i", data[-20:]) == (2, 11, 10, -1, -1)
   assert decode(data) == ObjectArrayProperty("Units", [5, -1])

def test_object_array_rejects_bad_actor_index():
   with pytest.raises(InvalidOperationError):
      encode(ObjectArrayProperty("Units", [-2]))

def test_static_array_expands_to_one_property_per_element():
   static = StaticArrayProperty("Slots", [IntProperty("Slots", 1), IntProperty("Slots", 2), IntProperty("Slots", 3)])
   data = encodeList([static])
   io = XComIO(data)
   for idx in range(3):
      element = parseProperty(io)
      assert element == IntProperty("Slots", idx + 1, idx)
   assert io.readString() == "None"
   assert io.readInt() == 0
   assert io.offset() == len(data)

def test_static_array_regroups_on_decode():
   static = StaticArrayProperty("Slots", [IntProperty("Slots", 1), IntProperty("Slots", 2), IntProperty("Slots", 3)])
   properties = [IntProperty("Before", 0), static, IntProperty("After", 9)]
   assert parseProperties(XComIO(encodeList(properties))) == properties

def test_non_contiguous_indices_stay_separate():
   properties = [IntProperty("Slots", 1, 0), IntProperty("Slots", 2, 2)]
   assert parseProperties(XComIO(encodeList(properties))) == properties

def test_static_array_cannot_be_written_as_one_property():
   static = StaticArrayProperty("Slots", [IntProperty("Slots", 1)])
   with pytest.raises(InvalidOperationError):
      addProperty(XComIO(), static, 0)

def test_unknown_kind_string():
   io = XComIO()
   io.writeString("Odd")
   io.writeInt(0)
   io.writeString("MapProperty")
   io.writeInt(0)
   io.writeInt(4)
   io.writeInt(0)
   io.writeInt(1)
   with pytest.raises(UnexpectedKindError):
      decode(io.release())

def test_declared_size_must_match_payload():
   data = bytearray(encode(IntProperty("Count", 7)))
   struct.pack_into("<i", data, len(data) - 12, 8)
   with pytest.raises(ParseError):
      decode(bytes(data))

def test_property_list_without_terminator():
   data = encode(IntProperty("Count", 7))
   with pytest.raises(UnexpectedKindError):
      parseProperties(XComIO(data), len(data))

def test_numeric_enum_is_a_single_byte():
   data = encode(EnumProperty("Kills", "None", EnumValue(None, 200)))
   # size, index, "None" type name, reserved int, value byte
   assert struct.unpack_from("<i", data, len(data) - 22)[0] == 1
   assert data[-1:] == b"\xc8"
   assert decode(data).value == EnumValue(None, 200)

def test_enum_array_is_recognised():
   prop = EnumArrayProperty("Ranks", [("EType_A", 0), ("EType_B", 3)])
   assert decode(encode(prop)) == prop

def test_raw_array_bytes_are_preserved():
   prop = ArrayProperty("Blob", 3, b"\x01\x02\x03\x04\x05")
   assert decode(encode(prop)) == prop

def test_empty_array_without_hint_decodes_raw():
   assert decode(encode(NumberArrayProperty("Empty", []))) == ArrayProperty("Empty", 0, b"")

def test_array_hint_overrides_inference(monkeypatch):
   monkeypatch.setitem(xcom_data.data.ARRAY_KIND_HINTS, "Empty", "NumberArray")
   monkeypatch.setitem(xcom_data.data.ARRAY_KIND_HINTS, "Scores", "Array")
   assert decode(encode(NumberArrayProperty("Empty", []))) == NumberArrayProperty("Empty", [])
   scores = NumberArrayProperty("Scores", [1, 2])
   assert decode(encode(scores)) == ArrayProperty("Scores", 2, struct.pack("<ii", 1, 2))

def test_unrecognised_struct_payload_stays_native():
   prop = StructProperty("Opaque", "TUnknown", nativeData=b"\x05\x00\x00\x00\xff")
   assert decode(encode(prop)) == prop

def test_empty_nested_struct():
   prop = StructProperty("Nothing", "TNothing", [])
   assert decode(encode(prop)) == prop

def test_wide_name_value_keeps_its_width():
   io = XComIO()
   io.writeString("m_nmTag")
   io.writeInt(0)
   io.writeString("NameProperty")
   io.writeInt(0)
   io.writeInt((4 + 16) + 4)
   io.writeInt(0)
   io.writeUnicodeString("Soldier", True)
   io.writeInt(2)
   data = io.release()
   prop = decode(data)
   assert prop == NameProperty("m_nmTag", "Soldier", 2, isWide=True)
   assert encode(prop) == data

def test_wide_enum_names_keep_their_width():
   prop = EnumProperty("m_eRank", "ESoldierRank", EnumValue("eRank_Colonel", 0), isWide=True)
   assert decode(encode(prop)) == prop
   ranks = EnumArrayProperty("arrRanks", [("EType_A", 0), ("EType_B", 3)], [True, False])
   decoded = decode(encode(ranks))
   assert decoded == ranks
   assert decoded.wideFlags == [True, False]

def test_single_element_static_array_needs_a_name_entry(monkeypatch):
   static = StaticArrayProperty("Slots", [IntProperty("Slots", 1)])
   data = encodeList([static])
   assert parseProperties(XComIO(data)) == [IntProperty("Slots", 1)]
   monkeypatch.setattr(xcom_parse, "STATIC_ARRAY_NAMES", {"Slots"})
   assert parseProperties(XComIO(data)) == [static]
   longer = StaticArrayProperty("Slots", [IntProperty("Slots", 1), IntProperty("Slots", 2)])
   assert parseProperties(XComIO(encodeList([longer]))) == [longer]

def test_enum_array_of_none_needs_a_hint(monkeypatch):
   prop = EnumArrayProperty("Ranks", [("None", 0)])
   assert decode(encode(prop)) == StructArrayProperty("Ranks", [[]])
   monkeypatch.setitem(xcom_data.data.ARRAY_KIND_HINTS, "Ranks", "EnumArray")
   assert decode(encode(prop)) == prop

def test_array_inference_stays_inside_the_payload():
   io = XComIO()
   io.writeString("A")
   # Valid strings after the payload must not be taken as further elements.
   for idx in range(64):
      io.writeString("B")
   io.seek(SeekKind.START, 0)
   assert inferArrayKind(io, "Blob", 3, 6) == PropertyKind.ARRAY
   assert io.offset() == 0
   assert inferArrayKind(io, "Blob", 1, 6) == PropertyKind.STRING_ARRAY
