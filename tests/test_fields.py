import datetime
import logging
from typing import Any, Optional

import pytest
from pydantic import ValidationError

from esmapper.fields import infer_field_type, multi_field_mapping, property_mapping
from esmapper.members import Member
from esmapper.models import (
    FieldType,
    GeoShapeTree,
    IndexableProperties,
    IndexableProperty,
    IndexMode,
    IndexOptions,
    MappingConfigurationError,
    MultiFieldPath,
    NormsLoading,
    PostingsFormat,
    Similarity,
    TermVector,
)


class GeoLocation:
    pass


def member(value_type=str, name="field"):
    return Member(name=name, value_type=value_type)


def test_default_property():
    """A property without options only has a type"""
    assert property_mapping(member(str), IndexableProperty()) == {"type": "string"}
    assert property_mapping(member(int), IndexableProperty(type=FieldType.INTEGER)) == {"type": "integer"}


def test_infer_field_type():
    """Field types are inferred from the element type of the member"""
    assert infer_field_type(str) == "string"
    assert infer_field_type(int) == "long"
    assert infer_field_type(bool) == "boolean"
    assert infer_field_type(float) == "double"
    assert infer_field_type(datetime.datetime) == "date"
    assert infer_field_type(dict[str, Any]) == "json"
    # unknown classes fall back to their lower-cased name
    assert infer_field_type(GeoLocation) == "geolocation"
    with pytest.raises(MappingConfigurationError):
        infer_field_type(int | str)

    assert property_mapping(member(list[datetime.date]), IndexableProperty()) == {"type": "date"}
    assert property_mapping(member(Optional[bool]), IndexableProperty()) == {"type": "boolean"}
    assert property_mapping(member(set[float] | None), IndexableProperty()) == {"type": "double"}


def test_unspecified_options_are_omitted():
    """Options that are not declared never end up in the mapping, not even as null"""
    mapping = property_mapping(member(), IndexableProperty(type=FieldType.STRING))
    assert mapping == {"type": "string"}
    mapping = property_mapping(member(), IndexableProperty(store=False, boost=1.0, ignore_malformed=False))
    assert set(mapping.keys()) == {"type"}


def test_property_options():
    prop = IndexableProperty(
        type=FieldType.STRING,
        index=IndexMode.NOT_ANALYZED,
        index_name="t",
        term_vector=TermVector.WITH_POSITIONS_OFFSETS,
        store=True,
        boost=2.5,
        null_value="NULL",
        norms_enabled=False,
        norms_loading=NormsLoading.LAZY,
        index_options=IndexOptions.DOCS,
        analyzer="english",
        index_analyzer="ngram",
        search_analyzer="standard",
        include_in_all=True,
        ignore_above=256,
        position_offset_gap=100,
        precision_step=4,
        ignore_malformed=True,
        postings_format=PostingsFormat.BLOOM_DEFAULT,
        format="yyyy-MM-dd",
    )
    assert property_mapping(member(), prop) == {
        "type": "string",
        "index": "not_analyzed",
        "index_name": "t",
        "term_vector": "with_positions_offsets",
        "store": "yes",
        "boost": 2.5,
        "null_value": "NULL",
        "norms.enabled": "false",
        "norms.loading": "lazy",
        "index_options": "docs",
        "analyzer": "english",
        "index_analyzer": "ngram",
        "search_analyzer": "standard",
        "include_in_all": "true",
        "ignore_above": 256,
        "position_offset_gap": 100,
        "precision_step": 4,
        "ignore_malformed": "true",
        "postings_format": "bloom_default",
        "format": "yyyy-MM-dd",
    }


def test_similarity():
    """The default similarity is lower case, BM25 is upper case. Similarity doesn't depend on postings format"""
    prop = IndexableProperty(similarity=Similarity.DEFAULT, postings_format=PostingsFormat.PULSING)
    assert property_mapping(member(), prop)["similarity"] == "default"
    prop = IndexableProperty(similarity=Similarity.BM25, postings_format=PostingsFormat.PULSING)
    assert property_mapping(member(), prop)["similarity"] == "BM25"
    assert "similarity" not in property_mapping(member(), IndexableProperty(postings_format=PostingsFormat.PULSING))


def test_geo_point():
    """Validation options are only written when switched on, normalization options only when switched off"""
    assert property_mapping(member(), IndexableProperty(type=FieldType.GEO_POINT)) == {"type": "geo_point"}
    prop = IndexableProperty(
        type=FieldType.GEO_POINT,
        geo_point_lat_lon=True,
        geo_point_geohash=True,
        geo_point_geohash_precision=12,
        geo_point_validate=True,
        geo_point_validate_lat=True,
        geo_point_validate_lon=True,
        geo_point_normalize=False,
        geo_point_normalize_lat=False,
        geo_point_normalize_lon=False,
    )
    assert property_mapping(member(), prop) == {
        "type": "geo_point",
        "lat_lon": "true",
        "geohash": "true",
        "geohash_precision": 12,
        "validate": "true",
        "validate_lat": "true",
        "validate_lon": "true",
        "normalize": "false",
        "normalize_lat": "false",
        "normalize_lon": "false",
    }


def test_geo_shape():
    prop = IndexableProperty(
        type=FieldType.GEO_SHAPE,
        geo_shape_tree=GeoShapeTree.QUADTREE,
        geo_shape_precision="1km",
        geo_shape_distance_error_pct=0.025,
    )
    assert property_mapping(member(), prop) == {
        "type": "geo_shape",
        "tree": "quadtree",
        "precision": "1km",
        "distance_error_pct": 0.025,
    }


def test_raw_mapping():
    """A raw mapping is used as is, ignoring all other options"""
    raw = '{"type": "object", "enabled": false, "properties": {"x": {"type": "long"}}}'
    prop = IndexableProperty(raw_mapping=raw, type=FieldType.STRING, store=True)
    assert property_mapping(member(dict), prop) == {
        "type": "object",
        "enabled": False,
        "properties": {"x": {"type": "long"}},
    }
    with pytest.raises(MappingConfigurationError):
        property_mapping(member(), IndexableProperty(raw_mapping="{type: string"))
    with pytest.raises(MappingConfigurationError):
        property_mapping(member(), IndexableProperty(raw_mapping="[1, 2]"))


def test_json_field_is_skipped(caplog):
    """A json field without raw mapping cannot be mapped: warn and return None"""
    with caplog.at_level(logging.WARNING):
        assert property_mapping(member(dict[str, Any], name="payload"), IndexableProperty()) is None
    assert "payload" in caplog.text
    assert property_mapping(member(str), IndexableProperty(type=FieldType.JSON)) is None


def test_invalid_declaration():
    """Declarations are validated when they are created"""
    with pytest.raises(ValidationError):
        IndexableProperty(boost="a lot")
    with pytest.raises(ValidationError):
        IndexableProperty(index="sometimes")


def test_multi_field():
    """Three named sub-properties give one multi_field with three fields"""
    props = IndexableProperties(
        path=MultiFieldPath.JUST_NAME,
        properties=[
            IndexableProperty(name="title", index=IndexMode.ANALYZED),
            IndexableProperty(name="untouched", index=IndexMode.NOT_ANALYZED),
            IndexableProperty(name="english", analyzer="english"),
        ],
    )
    assert multi_field_mapping(member(str, "title"), props) == {
        "type": "multi_field",
        "path": "just_name",
        "fields": {
            "title": {"type": "string", "index": "analyzed"},
            "untouched": {"type": "string", "index": "not_analyzed"},
            "english": {"type": "string", "analyzer": "english"},
        },
    }
    assert "path" not in multi_field_mapping(member(), IndexableProperties(properties=[IndexableProperty(name="x")]))


def test_multi_field_errors():
    """Sub-properties need a name, and there must be at least one"""
    with pytest.raises(MappingConfigurationError):
        multi_field_mapping(member(), IndexableProperties(properties=[]))
    props = IndexableProperties(properties=[IndexableProperty(name="a"), IndexableProperty()])
    with pytest.raises(MappingConfigurationError):
        multi_field_mapping(member(), props)


def test_multi_field_skips_json(caplog):
    """A sub-property without representable mapping is left out of the multi_field, the others are kept"""
    props = IndexableProperties(
        properties=[
            IndexableProperty(name="text"),
            IndexableProperty(name="raw", type=FieldType.JSON),
        ]
    )
    with caplog.at_level(logging.WARNING):
        mapping = multi_field_mapping(member(str, "body"), props)
    assert mapping == {"type": "multi_field", "fields": {"text": {"type": "string"}}}
    assert "body" in caplog.text
