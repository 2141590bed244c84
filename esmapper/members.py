"""
Discovery of the mappable members of a class.

A member is any attribute whose type hint is Annotated with one or more declarations from esmapper.models:

    @indexable(name="blog")
    class BlogPost:
        slug: Annotated[str, IndexableId(), IndexableProperty(index=IndexMode.NOT_ANALYZED)]
        comments: Annotated[list[Comment], IndexableComponent(nested=True)]

Type hints are collected along the whole MRO, so inherited members are flattened into the class.
Classes can also register members explicitly by defining a __mapping_members__ classmethod that returns
Member objects (e.g. for computed values that have no attribute of their own).
"""

import collections.abc
import inspect
import re
import sys
import types
from dataclasses import dataclass
from typing import Annotated, Any, Iterable, Iterator, TypeVar, Union, get_args, get_origin

from esmapper.models import (
    Declaration,
    Indexable,
    IndexableComponent,
    IndexableId,
    IndexableProperties,
    IndexableProperty,
    MappingConfigurationError,
)

if sys.version_info >= (3, 14):
    import annotationlib

D = TypeVar("D", bound=Declaration)

# Container types that are mapped as their element type
_COLLECTIONS = {
    list,
    set,
    frozenset,
    tuple,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
}


@dataclass(frozen=True)
class Member:
    name: str | None
    value_type: Any
    declarations: tuple[Declaration, ...] = ()

    def get(self, kind: type[D]) -> D | None:
        """Return the declaration of the given kind, or None if the member doesn't carry one"""
        found = [d for d in self.declarations if isinstance(d, kind)]
        if len(found) > 1:
            raise MappingConfigurationError(f"Member {self.name} has more than one {kind.__name__} declaration")
        return found[0] if found else None

    def field_name(self, override: str | None) -> str:
        """The explicit name from the declaration if given, otherwise the member name"""
        name = override or self.name
        if not name:
            raise MappingConfigurationError(f"Unable to find field name for member of type {self.value_type!r}")
        return name

    @property
    def element_type(self) -> Any:
        return element_type(self.value_type)


def element_type(tp: Any) -> Any:
    """
    Reduce a type hint to the type of the values that end up in the document:
    Optional[X] -> X, list[X] / set[X] / tuple[X, ...] -> X
    """
    origin = get_origin(tp)
    if origin is Annotated:
        return element_type(get_args(tp)[0])
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return element_type(args[0])
        return tp
    if origin in _COLLECTIONS:
        args = get_args(tp)
        if args:
            return element_type(args[0])
        return Any
    if tp in _COLLECTIONS:
        return Any
    return tp


def class_annotations(cls: type) -> dict[str, Any]:
    """The annotations declared on cls itself (not its bases), without resolving them"""
    if sys.version_info >= (3, 14):
        return annotationlib.get_annotations(cls, format=annotationlib.Format.FORWARDREF)
    return inspect.get_annotations(cls)


def resolve_hint(cls: type, name: str, hint: Any) -> Any:
    """
    Evaluate a postponed (string) annotation in the namespace of the class that declared it.
    Only annotations that can carry declarations need to resolve, other attributes may use names that
    only exist for type checkers (e.g. imported under TYPE_CHECKING).
    """
    if not isinstance(hint, str):
        return hint
    module = sys.modules.get(cls.__module__)
    try:
        return eval(hint, getattr(module, "__dict__", {}), dict(vars(cls)))
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        if "Annotated" in hint:
            raise MappingConfigurationError(f"Cannot resolve type of member {name} of {cls.__name__}: {e}") from e
        return None


def discover_members(cls: type) -> Iterator[Member]:
    hints: dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        for name, hint in class_annotations(base).items():
            hints[name] = resolve_hint(base, name, hint)
    for name, hint in hints.items():
        if get_origin(hint) is not Annotated:
            continue
        value_type, *metadata = get_args(hint)
        declarations = tuple(m for m in metadata if isinstance(m, Declaration))
        if declarations:
            yield Member(name=name, value_type=value_type, declarations=declarations)
    registered = getattr(cls, "__mapping_members__", None)
    if registered is not None:
        yield from registered()


def members_with(members: Iterable[Member], kind: type[Declaration]) -> list[Member]:
    return [m for m in members if m.get(kind) is not None]


def property_members(members: Iterable[Member]) -> list[Member]:
    return members_with(members, IndexableProperty)


def component_members(members: Iterable[Member]) -> list[Member]:
    return members_with(members, IndexableComponent)


def multi_field_members(members: Iterable[Member]) -> list[Member]:
    return members_with(members, IndexableProperties)


def id_member(members: Iterable[Member]) -> Member | None:
    candidates = members_with(members, IndexableId)
    if len(candidates) > 1:
        names = ", ".join(str(m.name) for m in candidates)
        raise MappingConfigurationError(f"Only one member can be the document id, found: {names}")
    return candidates[0] if candidates else None


######################## ROOT METADATA #########################


def indexable(
    name: str | None = None,
    parent: type | None = None,
    index_analyzer: str | None = None,
    search_analyzer: str | None = None,
    dynamic_date_formats: Iterable[str] = (),
    date_detection: bool | None = None,
    numeric_detection: bool | None = None,
):
    """Class decorator that marks a class as a document type and sets its root-level mapping options"""
    declaration = Indexable(
        name=name,
        parent=parent,
        index_analyzer=index_analyzer,
        search_analyzer=search_analyzer,
        dynamic_date_formats=tuple(dynamic_date_formats),
        date_detection=date_detection,
        numeric_detection=numeric_detection,
    )

    def decorate(cls):
        cls.__indexable__ = declaration
        return cls

    return decorate


def get_indexable(cls: type) -> Indexable | None:
    # Root metadata belongs to the decorated class only, subclasses need their own decorator
    return cls.__dict__.get("__indexable__")


def snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def indexable_name(cls: type) -> str:
    """Name the type is registered under: the explicit name, or the class name in lower_snake case"""
    indexable = get_indexable(cls)
    if indexable is not None and indexable.name:
        return indexable.name
    return snake_case(cls.__name__)
