"""
Create elasticsearch mappings from annotated python classes
"""

from esmapper.mapping import get_mapping, get_mapping_as_json
from esmapper.members import Member, indexable, indexable_name
from esmapper.models import (
    Dynamic,
    FieldType,
    GeoShapeTree,
    IndexableComponent,
    IndexableId,
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

__all__ = [
    "get_mapping",
    "get_mapping_as_json",
    "indexable",
    "indexable_name",
    "Member",
    "MappingConfigurationError",
    "IndexableProperty",
    "IndexableComponent",
    "IndexableProperties",
    "IndexableId",
    "FieldType",
    "IndexMode",
    "TermVector",
    "NormsLoading",
    "IndexOptions",
    "PostingsFormat",
    "Similarity",
    "GeoShapeTree",
    "Dynamic",
    "MultiFieldPath",
]
