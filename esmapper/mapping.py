"""
Create the elastic mapping for an annotated class

get_mapping(BlogPost) returns

    {"blog_post": {"properties": {...}, "_id": {...}, "_parent": {"type": ...}, ...}}

Members with an IndexableComponent are mapped recursively as object/nested fields. To avoid infinite recursion,
a component that refers back to the class that contains it (its immediate parent) is left out. Longer cycles
(A -> B -> C -> A) are not detected, these recurse until the configured max_depth and then fail.
"""

import logging
from typing import Any

from elasticsearch.serializer import JsonSerializer

from esmapper.config import get_settings
from esmapper.fields import FieldMapping, multi_field_mapping, property_mapping
from esmapper.members import (
    Member,
    component_members,
    discover_members,
    get_indexable,
    id_member,
    indexable_name,
    multi_field_members,
    property_members,
)
from esmapper.models import (
    IndexableComponent,
    IndexableId,
    IndexableProperties,
    IndexableProperty,
    MappingConfigurationError,
    flag_value,
    option_value,
)


def get_mapping(cls: type, require_id: bool | None = None) -> dict[str, Any]:
    """
    Create the mapping document for an @indexable class, keyed by its registered name.
    If require_id is True (default: the require_id setting), the class must have a member marked with IndexableId.
    """
    settings = get_settings()
    indexable = get_indexable(cls)
    if indexable is None:
        raise MappingConfigurationError(f"Class {cls.__name__} is not indexable, use the @indexable decorator")
    if require_id is None:
        require_id = settings.require_id

    name = indexable_name(cls)
    mapping = properties_mapping(cls, None, max_depth=settings.max_depth)

    if indexable.parent is not None:
        mapping["_parent"] = {"type": indexable_name(indexable.parent)}
    if indexable.index_analyzer:
        mapping["index_analyzer"] = indexable.index_analyzer
    if indexable.search_analyzer:
        mapping["search_analyzer"] = indexable.search_analyzer
    if indexable.dynamic_date_formats:
        mapping["dynamic_date_formats"] = list(indexable.dynamic_date_formats)
    if indexable.date_detection is not None:
        mapping["date_detection"] = indexable.date_detection
    if indexable.numeric_detection is not None:
        mapping["numeric_detection"] = indexable.numeric_detection

    member = id_member(discover_members(cls))
    if member is None:
        if require_id:
            raise MappingConfigurationError(f"Class {cls.__name__} has no member marked with IndexableId")
    elif id_map := id_mapping(member):
        mapping["_id"] = id_map

    logging.debug(f"Created mapping {name} for class {cls.__name__}")
    return {name: mapping}


def get_mapping_as_json(cls: type, require_id: bool | None = None) -> bytes:
    """The mapping of get_mapping, serialized as UTF-8 JSON"""
    return JsonSerializer().dumps(get_mapping(cls, require_id=require_id))


def id_mapping(member: Member) -> FieldMapping:
    indexable_id = member.get(IndexableId)
    assert indexable_id is not None
    id_map: FieldMapping = {}
    if indexable_id.index is not None:
        id_map["index"] = option_value(indexable_id.index)
    if indexable_id.store:
        id_map["store"] = "yes"
    # the path is only needed if the id member is also indexed as a field of its own
    if (prop := member.get(IndexableProperty)) is not None:
        id_map["path"] = member.field_name(prop.name)
    return id_map


def properties_mapping(cls: type, from_cls: type | None, max_depth: int, depth: int = 0) -> dict[str, Any]:
    """
    Map all members of cls as {"properties": {name: field mapping}}.
    from_cls is the class that contains cls as a component (if any); components of type from_cls are skipped.
    """
    if depth > max_depth:
        raise MappingConfigurationError(
            f"Components nested more than {max_depth} levels deep at {cls.__name__}, is there a reference cycle?"
        )
    members = list(discover_members(cls))
    properties: dict[str, FieldMapping] = {}

    for member in property_members(members):
        prop = member.get(IndexableProperty)
        assert prop is not None
        name = member.field_name(prop.name)
        field = property_mapping(member, prop)
        if field is not None:
            properties[name] = field

    for member in component_members(members):
        component = member.get(IndexableComponent)
        assert component is not None
        name = member.field_name(component.name)
        field = component_mapping(member, component, cls, from_cls, max_depth, depth)
        if field is not None:
            properties[name] = field

    for member in multi_field_members(members):
        props = member.get(IndexableProperties)
        assert props is not None
        name = member.field_name(props.name)
        properties[name] = multi_field_mapping(member, props)

    return {"properties": properties}


def component_mapping(
    member: Member,
    component: IndexableComponent,
    cls: type,
    from_cls: type | None,
    max_depth: int,
    depth: int,
) -> FieldMapping | None:
    component_cls = member.element_type
    if not isinstance(component_cls, type):
        raise MappingConfigurationError(f"Component {member.name} of {cls.__name__} should be a class, got {component_cls!r}")

    if from_cls is not None and component_cls is from_cls:
        # reference back to the enclosing class
        return None

    mapping = properties_mapping(component_cls, cls, max_depth=max_depth, depth=depth + 1)
    mapping["type"] = "nested" if component.nested else "object"
    if component.dynamic is not None:
        mapping["dynamic"] = option_value(component.dynamic)
    if not component.enabled:
        mapping["enabled"] = "false"
    if component.path:
        mapping["path"] = component.path
    if component.include_in_all is not None:
        mapping["include_in_all"] = flag_value(component.include_in_all)
    return mapping
