import pytest

from address_reconcile.exceptions import FeedFormatError
from address_reconcile.parser import BoundingBox, parse_bbox, parse_osm_xml

OSM_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<osm version="0.6" generator="Overpass API">
  <note>The data included in this document is from www.openstreetmap.org.</note>
  <meta osm_base="2026-10-19T08:00:00Z"/>
  <node id="101" lat="49.1950" lon="16.6068" version="3" user="mapper">
    <tag k="addr:city" v="Brno"/>
    <tag k="addr:street" v="Masarykova"/>
    <tag k="addr:housenumber" v="427/31"/>
    <tag k="addr:conscriptionnumber" v="427"/>
    <tag k="addr:streetnumber" v="31"/>
    <tag k="ref:ruian" v="21733741"/>
    <tag k="building" v="yes"/>
  </node>
  <node id="102" lat="49.2000" lon="16.6100" version="1">
    <tag k="amenity" v="bench"/>
  </node>
</osm>
"""


def test_parse_osm_xml_reads_address_nodes():
    records = parse_osm_xml(OSM_DOCUMENT)

    assert len(records) == 1
    record = records[0]
    assert record.node_id == 101
    assert record.version == 3
    assert record.point == (16.6068, 49.1950)
    assert record.city == "Brno"
    assert record.house_number == "427/31"
    assert record.conscription_number == "427"
    assert record.ref_id == "21733741"
    assert record.tags == {"building": "yes"}


def test_parse_osm_xml_rejects_unknown_elements():
    with pytest.raises(FeedFormatError):
        parse_osm_xml('<osm><way id="1"/></osm>')
    with pytest.raises(FeedFormatError):
        parse_osm_xml("<html/>")
    with pytest.raises(FeedFormatError):
        parse_osm_xml("<osm><node")


def test_parse_bbox():
    bbox = parse_bbox("12.09, 48.55,18.87,51.06")
    assert bbox == BoundingBox(12.09, 48.55, 18.87, 51.06)
    assert bbox.as_overpass() == "48.55,12.09,51.06,18.87"


@pytest.mark.parametrize("text", ["1,2,3", "a,b,c,d", "5,5,1,1"])
def test_parse_bbox_rejects_malformed_boxes(text):
    with pytest.raises(ValueError):
        parse_bbox(text)


def test_tiles_cover_box_column_by_column():
    tiles = list(BoundingBox(14.0, 49.0, 15.5, 50.5).tiles(1.0))

    assert tiles == [
        BoundingBox(14.0, 49.0, 15.0, 50.0),
        BoundingBox(14.0, 50.0, 15.0, 50.5),
        BoundingBox(15.0, 49.0, 15.5, 50.0),
        BoundingBox(15.0, 50.0, 15.5, 50.5),
    ]
