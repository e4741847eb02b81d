"""Translation of Kotlin types and declarations into Mochi types."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum

from kotlinbridge.model import APIObject, ClassKind, Function, KotlinType
from kotlinbridge.names import NameRegistry, class_to_extern_name, kotlin_to_mochi_name


@dataclass(frozen=True)
class MochiType:
    """A Mochi type produced by translation."""

    name: str = ""
    type_args: tuple[MochiType, ...] = ()
    is_void: bool = False
    is_extern: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "type_args", tuple(self.type_args))

    def __str__(self) -> str:
        if self.is_void:
            return "(void)"
        if not self.type_args:
            return self.name
        args = ", ".join(str(arg) for arg in self.type_args)
        return f"{self.name}<{args}>"


@dataclass(frozen=True)
class MochiParam:
    """One parameter of a Mochi shim function."""

    name: str
    type: MochiType


@dataclass
class MochiFunction:
    """A shim function exposed to Mochi."""

    name: str = ""
    params: list[MochiParam] = field(default_factory=list)
    return_type: MochiType = field(default_factory=MochiType)
    is_suspend: bool = False
    orig_name: str = ""
    jvm_name: str = ""
    receiver: MochiType | None = None


@dataclass
class MochiClass:
    """A Kotlin class translated for the Mochi bridge."""

    extern_type_name: str
    kind: ClassKind = ClassKind.CLASS
    functions: list[MochiFunction] = field(default_factory=list)
    properties: list[MochiFunction] = field(default_factory=list)
    constructors: list[MochiFunction] = field(default_factory=list)
    enum_variants: list[str] = field(default_factory=list)
    sealed_variants: list[str] = field(default_factory=list)


class RefusalReason(Enum):
    """Why a Kotlin type cannot be bridged."""

    NOT_REFUSED = 0
    UNRESOLVED_TYPE_PARAM = 1
    INLINE_REIFIED_NO_MONOMORPHISE = 2
    DYNAMIC_TYPE = 3
    THROWABLE_RETURN = 4
    RAW_CONTINUATION = 5
    RAW_LAMBDA = 6
    KCLASS_REFLECTION = 7
    UNSIGNED_INT_JVM17 = 8
    JAVA_NON_PRIMITIVE_ARRAY = 9

    def __str__(self) -> str:
        return _REFUSAL_MESSAGES[self]


_REFUSAL_MESSAGES = {
    RefusalReason.NOT_REFUSED: "",
    RefusalReason.UNRESOLVED_TYPE_PARAM: "unresolved type parameter (add to monomorphise)",
    RefusalReason.INLINE_REIFIED_NO_MONOMORPHISE: (
        "inline reified function (add instantiation to monomorphise)"
    ),
    RefusalReason.DYNAMIC_TYPE: "dynamic type (Kotlin/JS only)",
    RefusalReason.THROWABLE_RETURN: "Throwable return type (use sealed Result instead)",
    RefusalReason.RAW_CONTINUATION: "raw Continuation type (use suspend bridge)",
    RefusalReason.RAW_LAMBDA: "raw FunctionN lambda type",
    RefusalReason.KCLASS_REFLECTION: "KClass/KFunction reflection type",
    RefusalReason.UNSIGNED_INT_JVM17: "unsigned integer type (UInt/ULong) on JVM < 21",
    RefusalReason.JAVA_NON_PRIMITIVE_ARRAY: "non-primitive Java array type",
}


class RefusalError(Exception):
    """Raised when a Kotlin type or declaration cannot be bridged."""

    def __init__(self, reason: RefusalReason, type_name: str = "") -> None:
        self.reason = reason
        self.type_name = type_name
        subject = f"{type_name}: " if type_name else ""
        super().__init__(f"{subject}{reason}")


_SCALARS = {
    "kotlin.Int": "int",
    "kotlin.Long": "long",
    "kotlin.Short": "int",
    "kotlin.Byte": "int",
    "kotlin.Double": "double",
    "kotlin.Float": "float",
    "kotlin.Boolean": "bool",
    "kotlin.Char": "int",
    "kotlin.String": "string",
    "kotlin.Unit": "",
    "kotlin.Nothing": "",
    "kotlin.Any": "any",
    "java.lang.String": "string",
}

_PRIMITIVE_ARRAYS = {
    "kotlin.IntArray": "int",
    "kotlin.LongArray": "long",
    "kotlin.ShortArray": "int",
    "kotlin.FloatArray": "float",
    "kotlin.DoubleArray": "double",
    "kotlin.BooleanArray": "bool",
}

_COLLECTIONS = {
    "kotlin.collections.List": "List",
    "kotlin.collections.MutableList": "List",
    "kotlin.collections.Set": "Set",
    "kotlin.collections.MutableSet": "Set",
    "kotlin.collections.Map": "Map",
    "kotlin.collections.MutableMap": "Map",
    "kotlin.Array": "List",
    "kotlin.collections.Collection": "List",
    "kotlin.collections.MutableCollection": "List",
    "kotlin.collections.Iterable": "List",
    "kotlin.collections.MutableIterable": "List",
    "kotlin.sequences.Sequence": "List",
    "java.util.List": "List",
    "java.util.ArrayList": "List",
    "java.util.Map": "Map",
    "java.util.HashMap": "Map",
    "java.util.LinkedHashMap": "Map",
}

_REFUSED = {
    "kotlin.coroutines.Continuation": RefusalReason.RAW_CONTINUATION,
    "kotlin.reflect.KClass": RefusalReason.KCLASS_REFLECTION,
    "kotlin.reflect.KFunction": RefusalReason.KCLASS_REFLECTION,
    "kotlin.reflect.KProperty": RefusalReason.KCLASS_REFLECTION,
    "kotlin.UInt": RefusalReason.UNSIGNED_INT_JVM17,
    "kotlin.ULong": RefusalReason.UNSIGNED_INT_JVM17,
    "kotlin.UShort": RefusalReason.UNSIGNED_INT_JVM17,
    "kotlin.UByte": RefusalReason.UNSIGNED_INT_JVM17,
}

_THROWABLE_PREFIXES = (
    "java.lang.Throwable",
    "java.lang.Exception",
    "java.lang.Error",
    "java.lang.RuntimeException",
    "kotlin.Exception",
    "kotlin.Error",
)


def is_refused(kt: KotlinType) -> RefusalReason:
    """Return why kt cannot be bridged, or RefusalReason.NOT_REFUSED."""
    if kt.is_type_param:
        return RefusalReason.UNRESOLVED_TYPE_PARAM
    if kt.class_name in _REFUSED:
        return _REFUSED[kt.class_name]
    if kt.class_name.startswith(_THROWABLE_PREFIXES):
        return RefusalReason.THROWABLE_RETURN
    if kt.class_name.startswith("kotlin.jvm.functions."):
        return RefusalReason.RAW_LAMBDA
    return RefusalReason.NOT_REFUSED


def _optional(mt: MochiType, nullable: bool) -> MochiType:
    return MochiType("Option", (mt,)) if nullable else mt


def _translate_inner(kt: KotlinType) -> MochiType:
    return translate(dataclasses.replace(kt, nullable=False))


def translate(kt: KotlinType) -> MochiType:
    """Translate a Kotlin type to a Mochi type; raise RefusalError if it cannot be bridged."""
    reason = is_refused(kt)
    if reason is not RefusalReason.NOT_REFUSED:
        raise RefusalError(reason, kt.class_name or kt.type_param_name)

    name = kt.class_name
    if name in _SCALARS:
        scalar = _SCALARS[name]
        if not scalar:
            return MochiType(is_void=True)
        return _optional(MochiType(scalar), kt.nullable)

    if name == "kotlin.ByteArray":
        return _optional(MochiType("bytes"), kt.nullable)

    if name in _PRIMITIVE_ARRAYS:
        element = MochiType(_PRIMITIVE_ARRAYS[name])
        return _optional(MochiType("List", (element,)), kt.nullable)

    if name == "kotlin.Result":
        return _optional(MochiType("KotlinResult", is_extern=True), kt.nullable)

    if name == "kotlin.Triple" and len(kt.type_args) == 3:
        args = tuple(_translate_inner(arg) for arg in kt.type_args)
        return _optional(MochiType("Triple", args), kt.nullable)

    if name == "kotlin.Pair" and len(kt.type_args) == 2:
        args = tuple(_translate_inner(arg) for arg in kt.type_args)
        return _optional(MochiType("Pair", args), kt.nullable)

    if name in _COLLECTIONS:
        args = tuple(
            MochiType("any") if arg.is_star_projection else _translate_inner(arg)
            for arg in kt.type_args
        )
        return _optional(MochiType(_COLLECTIONS[name], args), kt.nullable)

    simple = name.rpartition(".")[2]
    return _optional(MochiType(simple, is_extern=True), kt.nullable)


def translate_function(fn: Function) -> MochiFunction:
    """Translate a Kotlin function; raise RefusalError if any part cannot be bridged."""
    return_type = translate(fn.return_type)
    receiver = translate(fn.receiver) if fn.receiver is not None else None
    params = [MochiParam(p.name, translate(p.type)) for p in fn.params]
    return MochiFunction(
        name=kotlin_to_mochi_name(fn.name),
        params=params,
        return_type=return_type,
        is_suspend=fn.flags.is_suspend,
        orig_name=fn.name,
        jvm_name=fn.jvm_name,
        receiver=receiver,
    )


def translate_class(obj: APIObject, name_registry: NameRegistry | None = None) -> MochiClass:
    """Translate a class's public API, skipping members that cannot be bridged."""
    extern = class_to_extern_name(obj.class_name)
    mc = MochiClass(
        extern_type_name=extern,
        kind=obj.kind,
        enum_variants=list(obj.enum_entries),
        sealed_variants=[class_to_extern_name(sub.class_name) for sub in obj.sealed_subs],
    )

    def allocate(name: str) -> str:
        return name_registry.allocate(extern, name) if name_registry is not None else name

    for fn in obj.functions:
        try:
            mf = translate_function(fn)
        except RefusalError:
            continue
        mf.name = allocate(mf.name)
        mc.functions.append(mf)

    for prop in obj.properties:
        try:
            prop_type = translate(prop.type)
        except RefusalError:
            continue
        mc.properties.append(
            MochiFunction(
                name=allocate("get_" + kotlin_to_mochi_name(prop.name)),
                orig_name=prop.name,
                jvm_name=prop.name,
                return_type=prop_type,
            )
        )

    for index, ctor in enumerate(obj.constructors):
        try:
            params = [MochiParam(p.name, translate(p.type)) for p in ctor.params]
        except RefusalError:
            continue
        base = kotlin_to_mochi_name(extern) + "_new"
        if index > 0:
            base += "_" + "_" * index
        mc.constructors.append(
            MochiFunction(
                name=allocate(base),
                params=params,
                return_type=MochiType(extern, is_extern=True),
                orig_name="constructor",
                jvm_name="<init>",
            )
        )

    return mc