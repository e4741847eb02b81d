"""Kotlin API metadata: the types, functions and classes read from a library."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ClassKind(Enum):
    """The declaration kind of a Kotlin class."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM_CLASS = "enum_class"
    OBJECT = "object"
    DATA_CLASS = "data_class"
    SEALED_CLASS = "sealed_class"


@dataclass(frozen=True)
class KotlinType:
    """A Kotlin type reference as recorded in library metadata."""

    class_name: str = ""
    nullable: bool = False
    type_args: tuple[KotlinType, ...] = ()
    is_type_param: bool = False
    type_param_name: str = ""
    is_star_projection: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "type_args", tuple(self.type_args))


@dataclass(frozen=True)
class Param:
    """A function or constructor parameter."""

    name: str
    type: KotlinType


@dataclass(frozen=True)
class FunctionFlags:
    """Modifier flags of a Kotlin function."""

    is_suspend: bool = False
    is_public: bool = False


@dataclass
class Function:
    """A Kotlin function declaration."""

    name: str
    return_type: KotlinType
    jvm_name: str = ""
    params: list[Param] = field(default_factory=list)
    flags: FunctionFlags = field(default_factory=FunctionFlags)
    receiver: KotlinType | None = None


@dataclass
class Property:
    """A Kotlin property declaration."""

    name: str
    type: KotlinType


@dataclass
class Constructor:
    """A Kotlin constructor."""

    params: list[Param] = field(default_factory=list)
    is_primary: bool = False


@dataclass
class APIObject:
    """The public API of one Kotlin class."""

    class_name: str
    jvm_class_name: str = ""
    kind: ClassKind = ClassKind.CLASS
    functions: list[Function] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)
    constructors: list[Constructor] = field(default_factory=list)
    enum_entries: list[str] = field(default_factory=list)
    sealed_subs: list[APIObject] = field(default_factory=list)