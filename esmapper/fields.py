"""
Field level mappings: turn the declaration on a single member into the mapping of that field.

- property_mapping handles a scalar member (IndexableProperty)
- multi_field_mapping handles a group of scalar declarations on one member (IndexableProperties)

Only options that are explicitly declared are written to the mapping, everything else is left to the
defaults of the engine.
"""

import datetime
import decimal
import logging
import types
import uuid
from typing import Any, Union, get_origin

from elasticsearch import SerializationError
from elasticsearch.serializer import JsonSerializer

from esmapper.members import Member
from esmapper.models import (
    FieldType,
    IndexableProperties,
    IndexableProperty,
    MappingConfigurationError,
    flag_value,
    option_value,
)

FieldMapping = dict[str, Any]

# Field types inferred from the python type of a member declared with FieldType.AUTO.
# Types not listed here are mapped to their lower-cased class name.
TYPEMAP_PYTHON_TO_ES: dict[Any, str] = {
    str: "string",
    int: "long",
    float: "double",
    decimal.Decimal: "double",
    bool: "boolean",
    datetime.datetime: "date",
    datetime.date: "date",
    bytes: "binary",
    uuid.UUID: "string",
    # there is no sensible default mapping for free-form json, a raw_mapping is needed for these
    dict: "json",
    Any: "json",
}

JSON_TYPE = option_value(FieldType.JSON)


def infer_field_type(value_type: Any) -> str:
    tp = get_origin(value_type) or value_type
    if tp is Union or tp is types.UnionType:
        raise MappingConfigurationError(f"Cannot infer a single field type from {value_type!r}, please specify a type")
    if tp in TYPEMAP_PYTHON_TO_ES:
        return TYPEMAP_PYTHON_TO_ES[tp]
    name = getattr(tp, "__name__", None)
    if name is None:
        raise MappingConfigurationError(f"Cannot infer field type from {value_type!r}, please specify a type")
    return name.lower()


def field_type(member: Member, prop: IndexableProperty) -> str:
    if prop.type == FieldType.AUTO:
        return infer_field_type(member.element_type)
    return option_value(prop.type)


def parse_raw_mapping(raw_mapping: str) -> FieldMapping:
    try:
        mapping = JsonSerializer().loads(raw_mapping.encode("utf-8"))
    except (SerializationError, ValueError) as e:
        raise MappingConfigurationError(f"Invalid raw mapping {raw_mapping!r}: {e}") from e
    if not isinstance(mapping, dict):
        raise MappingConfigurationError(f"Raw mapping should be a JSON object, got {raw_mapping!r}")
    return mapping


def property_mapping(member: Member, prop: IndexableProperty) -> FieldMapping | None:
    """
    Create the mapping for a scalar field. Returns None if the field has no representable mapping
    (i.e. it is a json field without a raw mapping), in which case the field should be left out.
    """
    if prop.raw_mapping:
        return parse_raw_mapping(prop.raw_mapping)

    type = field_type(member, prop)
    if type == JSON_TYPE:
        logging.warning(f"Can't find mapping for json field {member.name}, please specify raw_mapping if needed")
        return None

    mapping: FieldMapping = {"type": type}

    if prop.index is not None:
        mapping["index"] = option_value(prop.index)
    if prop.index_name:
        mapping["index_name"] = prop.index_name
    if prop.term_vector is not None:
        mapping["term_vector"] = option_value(prop.term_vector)
    if prop.store:
        mapping["store"] = "yes"
    if prop.boost != 1.0:
        mapping["boost"] = prop.boost
    if prop.null_value:
        mapping["null_value"] = prop.null_value
    if prop.norms_enabled is not None:
        mapping["norms.enabled"] = flag_value(prop.norms_enabled)
    if prop.norms_loading is not None:
        mapping["norms.loading"] = option_value(prop.norms_loading)
    if prop.index_options is not None:
        mapping["index_options"] = option_value(prop.index_options)
    if prop.analyzer:
        mapping["analyzer"] = prop.analyzer
    if prop.index_analyzer:
        mapping["index_analyzer"] = prop.index_analyzer
    if prop.search_analyzer:
        mapping["search_analyzer"] = prop.search_analyzer
    if prop.include_in_all is not None:
        mapping["include_in_all"] = flag_value(prop.include_in_all)
    if prop.ignore_above is not None:
        mapping["ignore_above"] = prop.ignore_above
    if prop.position_offset_gap is not None:
        mapping["position_offset_gap"] = prop.position_offset_gap
    if prop.precision_step is not None:
        mapping["precision_step"] = prop.precision_step
    if prop.ignore_malformed:
        mapping["ignore_malformed"] = "true"
    if prop.postings_format is not None:
        mapping["postings_format"] = option_value(prop.postings_format)
    if prop.similarity is not None:
        # option_value keeps BM25 upper case, the engine doesn't recognise "bm25"
        mapping["similarity"] = option_value(prop.similarity)
    if prop.format:
        mapping["format"] = prop.format

    # geo_point
    if prop.geo_point_lat_lon:
        mapping["lat_lon"] = "true"
    if prop.geo_point_geohash:
        mapping["geohash"] = "true"
    if prop.geo_point_geohash_precision is not None:
        mapping["geohash_precision"] = prop.geo_point_geohash_precision
    if prop.geo_point_validate:
        mapping["validate"] = "true"
    if prop.geo_point_validate_lat:
        mapping["validate_lat"] = "true"
    if prop.geo_point_validate_lon:
        mapping["validate_lon"] = "true"
    if not prop.geo_point_normalize:
        mapping["normalize"] = "false"
    if not prop.geo_point_normalize_lat:
        mapping["normalize_lat"] = "false"
    if not prop.geo_point_normalize_lon:
        mapping["normalize_lon"] = "false"

    # geo_shape
    if prop.geo_shape_tree is not None:
        mapping["tree"] = option_value(prop.geo_shape_tree)
    if prop.geo_shape_precision:
        mapping["precision"] = prop.geo_shape_precision
    if prop.geo_shape_distance_error_pct is not None:
        mapping["distance_error_pct"] = prop.geo_shape_distance_error_pct

    return mapping


def multi_field_mapping(member: Member, props: IndexableProperties) -> FieldMapping:
    """Create a multi_field mapping containing one sub-field per declared property"""
    if not props.properties:
        raise MappingConfigurationError(f"IndexableProperties on {member.name} must have at least one IndexableProperty")

    mapping: FieldMapping = {"type": "multi_field"}
    if props.path is not None:
        mapping["path"] = option_value(props.path)

    fields: dict[str, FieldMapping] = {}
    for prop in props.properties:
        if not prop.name:
            raise MappingConfigurationError(f"Field name cannot be empty in multi-field {member.name}")
        field = property_mapping(member, prop)
        if field is not None:
            fields[prop.name] = field
    mapping["fields"] = fields
    return mapping
