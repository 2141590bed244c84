from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated


class MappingConfigurationError(ValueError):
    """Raised when a class cannot be turned into a mapping because its declarations are incomplete or invalid"""


######################## OPTION VALUES #########################

# All enumerations are written to the mapping as their lower-cased member name (see option_value)


class FieldType(str, Enum):
    AUTO = "auto"
    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    SHORT = "short"
    BYTE = "byte"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    NULL = "null"
    DATE = "date"
    BINARY = "binary"
    IP = "ip"
    GEO_POINT = "geo_point"
    GEO_SHAPE = "geo_shape"
    ATTACHMENT = "attachment"
    TOKEN_COUNT = "token_count"
    COMPLETION = "completion"
    JSON = "json"


class IndexMode(str, Enum):
    ANALYZED = "analyzed"
    NOT_ANALYZED = "not_analyzed"
    NO = "no"


class TermVector(str, Enum):
    NO = "no"
    YES = "yes"
    WITH_OFFSETS = "with_offsets"
    WITH_POSITIONS = "with_positions"
    WITH_POSITIONS_OFFSETS = "with_positions_offsets"


class NormsLoading(str, Enum):
    EAGER = "eager"
    LAZY = "lazy"


class IndexOptions(str, Enum):
    DOCS = "docs"
    FREQS = "freqs"
    POSITIONS = "positions"
    OFFSETS = "offsets"


class PostingsFormat(str, Enum):
    DIRECT = "direct"
    MEMORY = "memory"
    PULSING = "pulsing"
    BLOOM_DEFAULT = "bloom_default"
    BLOOM_PULSING = "bloom_pulsing"
    DEFAULT = "default"


class Similarity(str, Enum):
    DEFAULT = "default"
    BM25 = "BM25"


class GeoShapeTree(str, Enum):
    GEOHASH = "geohash"
    QUADTREE = "quadtree"


class Dynamic(str, Enum):
    TRUE = "true"
    FALSE = "false"
    STRICT = "strict"


class MultiFieldPath(str, Enum):
    FULL = "full"
    JUST_NAME = "just_name"


def option_value(option: Enum) -> str:
    """Textual form of an enumerated option as the engine expects it (lower-cased, except BM25)"""
    if option is Similarity.BM25:
        return option.name.upper()
    return option.name.lower()


def flag_value(flag: bool) -> str:
    return "true" if flag else "false"


######################## DECLARATIONS #########################

# Declarations are attached to class attributes as Annotated metadata, e.g.
#   title: Annotated[str, IndexableProperty(analyzer="english")]
# An option left at None is "not specified" and never ends up in the mapping.


class Declaration(BaseModel):
    model_config = ConfigDict(frozen=True)


class IndexableProperty(Declaration):
    """A scalar (leaf) field"""

    name: str | None = None
    type: FieldType = FieldType.AUTO
    index: IndexMode | None = None
    index_name: str | None = None
    term_vector: TermVector | None = None
    store: bool = False
    boost: float = 1.0
    null_value: str | None = None
    norms_enabled: bool | None = None
    norms_loading: NormsLoading | None = None
    index_options: IndexOptions | None = None
    analyzer: str | None = None
    index_analyzer: str | None = None
    search_analyzer: str | None = None
    include_in_all: bool | None = None
    ignore_above: int | None = None
    position_offset_gap: int | None = None
    precision_step: int | None = None
    ignore_malformed: bool = False
    postings_format: PostingsFormat | None = None
    similarity: Similarity | None = None
    format: str | None = None
    raw_mapping: Annotated[
        str | None,
        Field(description="Pre-formed JSON mapping for this field, used verbatim instead of all other options"),
    ] = None

    geo_point_lat_lon: bool = False
    geo_point_geohash: bool = False
    geo_point_geohash_precision: int | None = None
    geo_point_validate: bool = False
    geo_point_validate_lat: bool = False
    geo_point_validate_lon: bool = False
    # normalisation is on by default in the engine, so only switching it off is written out
    geo_point_normalize: bool = True
    geo_point_normalize_lat: bool = True
    geo_point_normalize_lon: bool = True

    geo_shape_tree: GeoShapeTree | None = None
    geo_shape_precision: str | None = None
    geo_shape_distance_error_pct: float | None = None


class IndexableComponent(Declaration):
    """A member holding another annotated class (by value or as a collection), mapped as object or nested"""

    name: str | None = None
    nested: bool = False
    dynamic: Dynamic | None = None
    enabled: bool = True
    path: str | None = None
    include_in_all: bool | None = None


class IndexableProperties(Declaration):
    """
    Several scalar declarations on one member, mapped as a single multi_field.
    Every sub-property needs an explicit name, there is no fallback to the member name.
    """

    name: str | None = None
    path: MultiFieldPath | None = None
    properties: tuple[IndexableProperty, ...] = ()


class IndexableId(Declaration):
    """Marks the member holding the document id"""

    index: IndexMode | None = None
    store: bool = False


class Indexable(Declaration):
    """Root metadata of a document type, attached with the @indexable class decorator"""

    name: str | None = None
    parent: type | None = None
    index_analyzer: str | None = None
    search_analyzer: str | None = None
    dynamic_date_formats: tuple[str, ...] = ()
    date_detection: bool | None = None
    numeric_detection: bool | None = None
