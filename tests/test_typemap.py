import pytest

from kotlinbridge.model import (
    APIObject,
    ClassKind,
    Constructor,
    Function,
    FunctionFlags,
    KotlinType,
    Param,
    Property,
)
from kotlinbridge.names import NameRegistry
from kotlinbridge.typemap import (
    MochiType,
    RefusalError,
    RefusalReason,
    is_refused,
    translate,
    translate_class,
    translate_function,
)


def kt(name):
    return KotlinType(class_name=name)


def kt_n(name):
    return KotlinType(class_name=name, nullable=True)


def kt_args(name, *args):
    return KotlinType(class_name=name, type_args=args)


def kt_args_n(name, *args):
    return KotlinType(class_name=name, type_args=args, nullable=True)


def kt_param(name):
    return KotlinType(is_type_param=True, type_param_name=name)


def make_function(name, params, ret, is_suspend=False):
    return Function(
        name=name,
        jvm_name=name,
        params=list(params or []),
        return_type=ret,
        flags=FunctionFlags(is_suspend=is_suspend, is_public=True),
    )


@pytest.mark.parametrize(
    "name, expected",
    [
        ("kotlin.Int", "int"),
        ("kotlin.Long", "long"),
        ("kotlin.Short", "int"),
        ("kotlin.Byte", "int"),
        ("kotlin.Double", "double"),
        ("kotlin.Float", "float"),
        ("kotlin.Boolean", "bool"),
        ("kotlin.Char", "int"),
        ("kotlin.String", "string"),
        ("kotlin.Any", "any"),
    ],
)
def test_translate_primitives(name, expected):
    got = translate(kt(name))
    assert not got.is_void
    assert str(got) == expected


@pytest.mark.parametrize("name", ["kotlin.Unit", "kotlin.Nothing"])
def test_translate_void(name):
    got = translate(kt(name))
    assert got.is_void
    assert str(got) == "(void)"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("kotlin.String", "Option<string>"),
        ("kotlin.Int", "Option<int>"),
        ("kotlin.Boolean", "Option<bool>"),
        ("kotlin.Long", "Option<long>"),
        ("kotlin.Double", "Option<double>"),
        ("java.lang.String", "Option<string>"),
    ],
)
def test_translate_nullable_wrapping(name, expected):
    assert str(translate(kt_n(name))) == expected


@pytest.mark.parametrize(
    "input_type, expected",
    [
        (kt_args("kotlin.collections.List", kt("kotlin.String")), "List<string>"),
        (kt_args("kotlin.collections.MutableList", kt("kotlin.Int")), "List<int>"),
        (kt_args("kotlin.collections.Set", kt("kotlin.String")), "Set<string>"),
        (
            kt_args("kotlin.collections.Map", kt("kotlin.String"), kt("kotlin.Int")),
            "Map<string, int>",
        ),
        (
            kt_args("kotlin.collections.MutableMap", kt("kotlin.Long"), kt("kotlin.Boolean")),
            "Map<long, bool>",
        ),
        (kt_args("kotlin.Array", kt("kotlin.String")), "List<string>"),
        (kt_args("kotlin.collections.Collection", kt("kotlin.Int")), "List<int>"),
        (kt_args("kotlin.collections.Iterable", kt("kotlin.String")), "List<string>"),
        (kt_args("kotlin.sequences.Sequence", kt("kotlin.Double")), "List<double>"),
        (kt_args("java.util.List", kt("kotlin.String")), "List<string>"),
        (
            kt_args("java.util.Map", kt("kotlin.String"), kt("kotlin.Int")),
            "Map<string, int>",
        ),
    ],
)
def test_translate_collections(input_type, expected):
    assert str(translate(input_type)) == expected


def test_translate_nested_generics():
    inner = kt_args("kotlin.collections.List", kt("kotlin.Int"))
    outer = kt_args("kotlin.collections.List", inner)
    assert str(translate(outer)) == "List<List<int>>"

    map_type = kt_args("kotlin.collections.Map", kt("kotlin.String"), inner)
    assert str(translate(map_type)) == "Map<string, List<int>>"


def test_collection_element_nullability_is_dropped():
    got = translate(kt_args("kotlin.collections.List", kt_n("kotlin.String")))
    assert str(got) == "List<string>"


def test_nullable_collection_is_wrapped():
    got = translate(kt_args_n("kotlin.collections.List", kt("kotlin.Int")))
    assert str(got) == "Option<List<int>>"


@pytest.mark.parametrize(
    "input_type, reason",
    [
        (kt_param("T"), RefusalReason.UNRESOLVED_TYPE_PARAM),
        (kt("kotlin.coroutines.Continuation"), RefusalReason.RAW_CONTINUATION),
        (kt("kotlin.reflect.KClass"), RefusalReason.KCLASS_REFLECTION),
        (kt("kotlin.reflect.KFunction"), RefusalReason.KCLASS_REFLECTION),
        (kt("kotlin.reflect.KProperty"), RefusalReason.KCLASS_REFLECTION),
        (kt("kotlin.UInt"), RefusalReason.UNSIGNED_INT_JVM17),
        (kt("kotlin.ULong"), RefusalReason.UNSIGNED_INT_JVM17),
        (kt("kotlin.UShort"), RefusalReason.UNSIGNED_INT_JVM17),
        (kt("kotlin.UByte"), RefusalReason.UNSIGNED_INT_JVM17),
        (kt("kotlin.jvm.functions.Function0"), RefusalReason.RAW_LAMBDA),
        (kt("kotlin.jvm.functions.Function2"), RefusalReason.RAW_LAMBDA),
        (kt("java.lang.Throwable"), RefusalReason.THROWABLE_RETURN),
        (kt("java.lang.Exception"), RefusalReason.THROWABLE_RETURN),
        (kt("java.lang.RuntimeException"), RefusalReason.THROWABLE_RETURN),
        (kt("kotlin.Exception"), RefusalReason.THROWABLE_RETURN),
    ],
)
def test_translate_refusals(input_type, reason):
    assert is_refused(input_type) is reason
    with pytest.raises(RefusalError) as info:
        translate(input_type)
    assert info.value.reason is reason


def test_is_refused_accepts_plain_type():
    assert is_refused(kt("kotlin.String")) is RefusalReason.NOT_REFUSED


def test_refusal_inside_collection_propagates():
    with pytest.raises(RefusalError) as info:
        translate(kt_args("kotlin.collections.List", kt("kotlin.UInt")))
    assert info.value.reason is RefusalReason.UNSIGNED_INT_JVM17


def test_refusal_reason_messages():
    assert str(is_refused(kt("kotlin.String"))) == ""
    assert str(is_refused(kt("kotlin.jvm.functions.Function1"))) == "raw FunctionN lambda type"
    with pytest.raises(RefusalError) as info:
        translate(kt("kotlin.coroutines.Continuation"))
    assert str(info.value.reason) == "raw Continuation type (use suspend bridge)"


def test_translate_kotlin_result():
    got = translate(kt_args("kotlin.Result", kt("kotlin.String")))
    assert got == MochiType("KotlinResult", is_extern=True)

    got_n = translate(kt_args_n("kotlin.Result", kt("kotlin.String")))
    assert str(got_n) == "Option<KotlinResult>"


def test_translate_triple():
    got = translate(
        kt_args("kotlin.Triple", kt("kotlin.Int"), kt("kotlin.String"), kt("kotlin.Boolean"))
    )
    assert str(got) == "Triple<int, string, bool>"


def test_translate_pair():
    got = translate(kt_args("kotlin.Pair", kt("kotlin.String"), kt("kotlin.Int")))
    assert str(got) == "Pair<string, int>"


def test_translate_byte_array():
    assert translate(kt("kotlin.ByteArray")).name == "bytes"
    assert str(translate(kt_n("kotlin.ByteArray"))) == "Option<bytes>"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("kotlin.IntArray", "List<int>"),
        ("kotlin.LongArray", "List<long>"),
        ("kotlin.ShortArray", "List<int>"),
        ("kotlin.FloatArray", "List<float>"),
        ("kotlin.DoubleArray", "List<double>"),
        ("kotlin.BooleanArray", "List<bool>"),
    ],
)
def test_translate_primitive_arrays(name, expected):
    assert str(translate(kt(name))) == expected


def test_translate_java_string():
    assert translate(kt("java.lang.String")).name == "string"


def test_translate_extern_type():
    got = translate(kt("com.example.MyClass"))
    assert got.is_extern
    assert got.name == "MyClass"


def test_translate_star_projection():
    star = KotlinType(is_star_projection=True)
    got = translate(KotlinType(class_name="kotlin.collections.List", type_args=(star,)))
    assert str(got) == "List<any>"


def test_translate_function_normal():
    fn = make_function(
        "greetUser",
        [Param("name", kt("kotlin.String")), Param("age", kt("kotlin.Int"))],
        kt("kotlin.String"),
    )
    mf = translate_function(fn)
    assert mf.name == "greet_user"
    assert mf.is_suspend is False
    assert [p.type.name for p in mf.params] == ["string", "int"]
    assert [p.name for p in mf.params] == ["name", "age"]
    assert mf.return_type.name == "string"
    assert mf.orig_name == "greetUser"
    assert mf.jvm_name == "greetUser"


def test_translate_function_suspend():
    mf = translate_function(make_function("fetchData", [], kt("kotlin.String"), True))
    assert mf.is_suspend is True


def test_translate_function_unresolved_type_param():
    fn = make_function("map", [Param("t", kt_param("T"))], kt("kotlin.String"))
    with pytest.raises(RefusalError) as info:
        translate_function(fn)
    assert info.value.reason is RefusalReason.UNRESOLVED_TYPE_PARAM


def test_translate_function_unresolved_return_type():
    with pytest.raises(RefusalError) as info:
        translate_function(make_function("get", [], kt_param("T")))
    assert info.value.reason is RefusalReason.UNRESOLVED_TYPE_PARAM


def test_translate_function_extension():
    fn = Function(
        name="trimToNull",
        jvm_name="trimToNull",
        return_type=kt_n("kotlin.String"),
        receiver=kt("kotlin.String"),
        flags=FunctionFlags(is_public=True),
    )
    mf = translate_function(fn)
    assert mf.receiver is not None
    assert mf.receiver.name == "string"
    assert str(mf.return_type) == "Option<string>"


def test_translate_function_void_return():
    mf = translate_function(make_function("doNothing", None, kt("kotlin.Unit")))
    assert mf.return_type.is_void


def test_translate_class_without_registry():
    obj = APIObject(
        class_name="com.example.User",
        kind=ClassKind.DATA_CLASS,
        functions=[
            make_function("greetUser", [], kt("kotlin.String")),
            make_function("broken", [], kt_param("T")),
        ],
        properties=[
            Property("userName", kt("kotlin.String")),
            Property("callback", kt("kotlin.jvm.functions.Function0")),
        ],
        constructors=[
            Constructor(params=[Param("name", kt("kotlin.String"))], is_primary=True),
            Constructor(params=[Param("id", kt("kotlin.Long"))]),
            Constructor(params=[Param("raw", kt("kotlin.UInt"))]),
        ],
        enum_entries=["A", "B"],
        sealed_subs=[APIObject(class_name="com.example.User$Admin")],
    )
    mc = translate_class(obj, None)
    assert mc.extern_type_name == "User"
    assert mc.kind is ClassKind.DATA_CLASS
    assert [f.name for f in mc.functions] == ["greet_user"]
    assert [p.name for p in mc.properties] == ["get_user_name"]
    assert mc.properties[0].orig_name == "userName"
    assert str(mc.properties[0].return_type) == "string"
    assert [c.name for c in mc.constructors] == ["user_new", "user_new__"]
    assert mc.constructors[0].return_type == MochiType("User", is_extern=True)
    assert mc.constructors[0].jvm_name == "<init>"
    assert mc.constructors[0].orig_name == "constructor"
    assert mc.enum_variants == ["A", "B"]
    assert mc.sealed_variants == ["UserAdmin"]


def test_translate_class_with_registry_deduplicates():
    obj = APIObject(
        class_name="com.example.Store",
        functions=[
            make_function("get", [Param("id", kt("kotlin.Int"))], kt("kotlin.String")),
            make_function("get", [Param("key", kt("kotlin.String"))], kt("kotlin.Int")),
        ],
        properties=[Property("size", kt("kotlin.Int"))],
        constructors=[Constructor()],
    )
    mc = translate_class(obj, NameRegistry())
    assert [f.name for f in mc.functions] == ["store_get", "store_get_2"]
    assert [p.name for p in mc.properties] == ["store_get_size"]
    assert [c.name for c in mc.constructors] == ["store_store_new"]


def test_translate_empty_class():
    mc = translate_class(APIObject(class_name="com.example.EmptyClass"), NameRegistry())
    assert mc.extern_type_name == "EmptyClass"
    assert mc.functions == []
    assert mc.properties == []
    assert mc.constructors == []