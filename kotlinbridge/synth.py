"""Generation of the Java native-image bridge sources for a Kotlin artifact."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from kotlinbridge.model import APIObject
from kotlinbridge.names import NameRegistry, shim_fn_name
from kotlinbridge.typemap import MochiFunction, MochiType, translate_class

_INDENT = "    "


@dataclass(frozen=True)
class BridgeFunction:
    """One @CEntryPoint method of the generated bridge class."""

    c_name: str
    java_name: str
    return_type: str
    param_list: str
    body: str


def _signature(returns: str, name: str, params: str = "") -> str:
    return f"public static {returns} {name}({params})"


def _method(signature: str, body: Sequence[str]) -> list[str]:
    return [f"{signature} {{", *(_INDENT + line for line in body), "}"]


def _field(java_type: str, name: str, initial: str) -> list[str]:
    return [f"private static final {java_type} {name} = {initial};"]


def _java_class(
    artifact: str,
    imports: Sequence[str],
    class_name: str,
    members: Sequence[Sequence[str]],
) -> str:
    lines = [f"package com.mochi.bridge.{artifact};", ""]
    lines.extend(f"import {name};" for name in imports)
    lines.extend(["", f"public final class {class_name} {{"])
    for position, member in enumerate(members):
        if position:
            lines.append("")
        lines.extend(_INDENT + line if line else "" for line in member)
    lines.append("}")
    return "\n".join(lines) + "\n"


def _handle_registry_source(artifact: str) -> str:
    members = [
        _field("ConcurrentHashMap<Long, Object>", "handles", "new ConcurrentHashMap<>()")
        + _field("AtomicLong", "nextHandle", "new AtomicLong(1)"),
        _method(
            _signature("long", "register", "Object obj"),
            [
                "if (obj == null) return 0;",
                "long id = nextHandle.getAndIncrement();",
                "handles.put(id, obj);",
                "return id;",
            ],
        ),
        _method(_signature("Object", "get", "long id"), ["return handles.get(id);"]),
        _method(_signature("void", "release", "long id"), ["handles.remove(id);"]),
    ]
    imports = [
        "java.util.concurrent.ConcurrentHashMap",
        "java.util.concurrent.atomic.AtomicLong",
    ]
    return _java_class(artifact, imports, "MochiHandleRegistry", members)


def _parameterized(kind: str, args: str) -> str:
    return f"TypeToken.getParameterized({kind}.class, {args}).getType()"


def _jni_helpers_source(artifact: str) -> str:
    members = [
        _field("Gson", "GSON", "new Gson()"),
        ["// JVM strings are already Unicode, so conversion is the identity."]
        + _method(_signature("String", "fromMochiString", "String s"), ["return s;"])
        + _method(
            _signature("String", "toMochiString", "String s"),
            ['return s != null ? s : "";'],
        ),
        ["// Collections cross the boundary as JSON strings."]
        + _method(
            _signature("<T> String", "listToJson", "List<T> list"),
            ["return GSON.toJson(list);"],
        ),
        _method(
            _signature("<T> List<T>", "jsonToList", "String json, Class<T> elementType"),
            [
                f"Type listType = {_parameterized('List', 'elementType')};",
                "return GSON.fromJson(json, listType);",
            ],
        ),
        _method(
            _signature("<K, V> String", "mapToJson", "Map<K, V> map"),
            ["return GSON.toJson(map);"],
        ),
        _method(
            _signature(
                "<K, V> Map<K, V>",
                "jsonToMap",
                "String json, Class<K> keyType, Class<V> valueType",
            ),
            [
                f"Type mapType = {_parameterized('Map', 'keyType, valueType')};",
                "return GSON.fromJson(json, mapType);",
            ],
        ),
    ]
    imports = [
        "com.google.gson.Gson",
        "com.google.gson.reflect.TypeToken",
        "java.lang.reflect.Type",
        "java.util.List",
        "java.util.Map",
    ]
    return _java_class(artifact, imports, "MochiJNI", members)


def _bridge_source(artifact: str, functions: Iterable[BridgeFunction]) -> str:
    members = [
        [f'@CEntryPoint(name = "{bf.c_name}")']
        + _method(
            _signature(bf.return_type, bf.java_name, f"IsolateThread thread{bf.param_list}"),
            [bf.body],
        )
        for bf in functions
    ]
    imports = [
        "org.graalvm.nativeimage.IsolateThread",
        "org.graalvm.nativeimage.c.function.CEntryPoint",
    ]
    return _java_class(artifact, imports, "MochiBridge", members)


def mochi_type_to_java(mt: MochiType) -> str:
    """Map a Mochi type to the Java type used at the native boundary."""
    if mt.is_void:
        return "void"
    if mt.name in ("int", "long"):
        return "long"
    if mt.name in ("double", "float"):
        return mt.name
    if mt.name == "bool":
        return "boolean"
    if mt.name in ("string", "bytes"):
        return "String"
    if mt.name == "Option":
        if len(mt.type_args) == 1 and mt.type_args[0].name == "string":
            return "String"
        return "long"
    if mt.name in ("List", "Set", "Map"):
        return "String"
    return "long"


def mochi_to_java_camel(name: str) -> str:
    """Convert a snake_case name to lowerCamelCase ("my_class_greet" -> "myClassGreet")."""
    pieces = []
    for index, part in enumerate(name.split("_")):
        if not part:
            continue
        pieces.append(part if index == 0 else part[0].upper() + part[1:])
    return "".join(pieces)


def _build_body(class_name: str, mf: MochiFunction, return_java: str, call_args: list[str]) -> str:
    call = f"{class_name}.{mf.orig_name}({', '.join(call_args)})"
    if mf.return_type.is_void or return_java == "void":
        return f"// invoke {call};"
    if return_java == "String":
        return f"return MochiJNI.toMochiString(/* {call} */ null);"
    if return_java == "boolean":
        return f"return false; // {call}"
    if return_java in ("double", "float"):
        return f"return 0; // {call}"
    return f"return 0L; // {call}"


def build_bridge_function(class_name: str, mf: MochiFunction) -> BridgeFunction:
    """Describe the bridge entry point for one translated function."""
    c_name = mf.name or shim_fn_name(class_name, mf.orig_name)
    return_java = mochi_type_to_java(mf.return_type)
    params = ", ".join(f"{mochi_type_to_java(p.type)} {p.name}" for p in mf.params)
    return BridgeFunction(
        c_name=c_name,
        java_name=mochi_to_java_camel(mf.name),
        return_type=return_java,
        param_list=f", {params}" if params else "",
        body=_build_body(class_name, mf, return_java, [p.name for p in mf.params]),
    )


def synthesize(artifact: str, classes: Iterable[APIObject], output_dir: str | Path) -> Path:
    """Write MochiBridge.java, MochiHandleRegistry.java and MochiJNI.java for an artifact.

    The files go to <output_dir>/java/com/mochi/bridge/<artifact>/; that
    directory is returned.
    """
    package_dir = Path(output_dir, "java", "com", "mochi", "bridge", artifact)
    package_dir.mkdir(parents=True, exist_ok=True)

    registry = NameRegistry()
    functions: list[BridgeFunction] = []
    for obj in classes:
        mc = translate_class(obj, registry)
        for mf in (*mc.functions, *mc.constructors, *mc.properties):
            functions.append(build_bridge_function(mc.extern_type_name, mf))

    outputs = {
        "MochiBridge.java": _bridge_source(artifact, functions),
        "MochiHandleRegistry.java": _handle_registry_source(artifact),
        "MochiJNI.java": _jni_helpers_source(artifact),
    }
    for filename, text in outputs.items():
        (package_dir / filename).write_text(text, encoding="utf-8")
    return package_dir