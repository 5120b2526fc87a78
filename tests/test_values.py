from __future__ import annotations

import itertools
import math

import pytest

from kestrel_ref import numeric, values
from kestrel_ref.types import AnnotationType, KsListConstructor
from tests.support.harness import (
    KestrelRuntimeError,
    KestrelTypeError,
    KsAnnotation,
    KsBool,
    KsList,
    KsMap,
    KsNull,
    KsString,
    to_py,
)

def L(*items):
    return KsList(list(items))

def n(v):
    return numeric.number_of(v)

def s(text: str) -> KsString:
    return KsString(text)

# a spread of values across every storable variant, with deliberate near-duplicates
SAMPLES = [
    KsNull(),
    KsNull(),
    KsBool(True),
    KsBool(False),
    n(0),
    n(1),
    numeric.of_double(1.0),
    numeric.of_double(1.0 + 1e-15),
    numeric.of_double(0.5),
    numeric.of_double(math.nan),
    numeric.of_double(math.inf),
    numeric.of_long(2**62 + 1),
    numeric.of_double(float(2**62)),
    n(2),
    s(""),
    s("1"),
    s("abc"),
    L(),
    L(n(1), n(2)),
    L(numeric.of_double(1.0), n(2)),
    L(n(2), n(1)),
    KsMap({}),
    KsMap({s("a"): n(1)}),
    KsMap({s("a"): numeric.of_double(1.0)}),
    KsAnnotation(s("x"), AnnotationType.VARARG),
    KsAnnotation(s("x"), AnnotationType.VARARG),
]


def test_equal_values_hash_equal() -> None:
    for a, b in itertools.product(SAMPLES, repeat=2):
        if values.equals(a, b):
            assert values.value_hash(a) == values.value_hash(b), f"{a!r} == {b!r} but hashes differ"


def test_equality_is_symmetric() -> None:
    for a, b in itertools.product(SAMPLES, repeat=2):
        assert values.equals(a, b) == values.equals(b, a), f"{a!r} vs {b!r}"


@pytest.mark.parametrize(
    "lhs, rhs, expected",
    [
        pytest.param(n(1), numeric.of_double(1.0), True, id="exact-vs-double"),
        pytest.param(KsBool(True), n(1), True, id="bool-as-one"),
        pytest.param(KsBool(False), n(0), True, id="bool-as-zero"),
        pytest.param(s("1"), n(1), False, id="string-vs-number"),
        pytest.param(KsNull(), n(0), False, id="null-vs-zero"),
        pytest.param(KsNull(), KsNull(), True, id="null-vs-null"),
        pytest.param(L(n(1), n(2)), L(n(1), numeric.of_double(2.0)), True, id="lists-elementwise"),
        pytest.param(L(n(1)), L(n(1), n(1)), False, id="lists-length"),
        pytest.param(KsMap({s("k"): n(1)}), KsMap({s("k"): n(1)}), True, id="maps"),
        pytest.param(KsMap({s("k"): n(1)}), KsMap({s("k"): n(2)}), False, id="maps-differ"),
        pytest.param(numeric.of_double(math.nan), numeric.of_double(math.nan), True, id="nan-under-epsilon"),
        pytest.param(numeric.of_long(2**62 + 1), numeric.of_double(float(2**62)), True, id="large-long-vs-double"),
    ],
)
def test_equals(lhs, rhs, expected: bool) -> None:
    assert values.equals(lhs, rhs) is expected
    assert (lhs == rhs) is expected


@pytest.mark.parametrize(
    "lhs, rhs, expected",
    [
        pytest.param(n(1), n(2), -1, id="numbers"),
        pytest.param(KsNull(), n(-5), -1, id="null-lowest"),
        pytest.param(n(-5), KsNull(), 1, id="null-flipped"),
        pytest.param(s("b"), s("a"), 1, id="strings"),
        pytest.param(s("10"), n(9), -1, id="cross-type-lexical"),
        pytest.param(L(n(9)), L(n(1), n(1)), -1, id="lists-by-length"),
        pytest.param(L(n(1), n(3)), L(n(1), n(2)), 1, id="lists-elementwise"),
        pytest.param(KsBool(True), n(0), 1, id="bool-numeric"),
    ],
)
def test_compare_to(lhs, rhs, expected: int) -> None:
    assert values.compare_to(lhs, rhs) == expected


@pytest.mark.parametrize(
    "fn, lhs, rhs, expected",
    [
        pytest.param(values.add, s("a"), n(1), "a1", id="string-concat"),
        pytest.param(values.add, n(1), s("a"), "1a", id="string-concat-right"),
        pytest.param(values.add, L(n(1), n(2)), n(10), [11, 12], id="list-broadcast"),
        pytest.param(values.add, L(n(1), n(2)), L(n(3), n(4)), [4, 6], id="list-pairwise"),
        pytest.param(values.subtract, L(n(5), n(6)), n(1), [4, 5], id="list-subtract"),
        pytest.param(values.multiply, n(2), L(n(1), n(2)), [2, 4], id="number-times-list"),
        pytest.param(values.divide, L(n(4), n(2)), n(2), [2.0, 1.0], id="list-divide"),
        pytest.param(values.multiply, n(3), s("ab"), "ababab", id="repeat-string"),
        pytest.param(values.multiply, s("ab"), n(2), "abab", id="repeat-string-right"),
        pytest.param(values.multiply, n(2), KsNull(), "nullnull", id="repeat-null-text"),
        pytest.param(values.multiply, n(2), KsMap({s("k"): n(1)}), "{k: 1}{k: 1}", id="repeat-map-text"),
        pytest.param(values.add, KsMap({s("a"): n(1)}), KsMap({s("b"): n(2)}), {"a": 1, "b": 2}, id="map-merge"),
        pytest.param(values.add, KsMap({s("a"): n(1)}), s("b"), {"a": 1, "b": None}, id="map-add-key"),
        pytest.param(values.add, KsBool(True), n(1), 2, id="bool-arithmetic"),
    ],
)
def test_polymorphic_arithmetic(fn, lhs, rhs, expected) -> None:
    assert to_py(fn(lhs, rhs)) == expected


@pytest.mark.parametrize(
    "fn, lhs, rhs, exc",
    [
        pytest.param(values.add, L(n(1)), L(n(1), n(2)), KestrelRuntimeError, id="uneven-lists"),
        pytest.param(values.add, KsNull(), n(1), KestrelTypeError, id="null-plus-number"),
        pytest.param(values.subtract, s("a"), n(1), KestrelTypeError, id="string-minus"),
        pytest.param(values.divide, s("a"), s("b"), KestrelTypeError, id="string-divide"),
        pytest.param(values.multiply, s("a"), s("b"), KestrelTypeError, id="string-times-string"),
    ],
)
def test_unsupported_arithmetic(fn, lhs, rhs, exc) -> None:
    with pytest.raises(exc):
        fn(lhs, rhs)


def test_uneven_lists_message() -> None:
    with pytest.raises(KestrelRuntimeError, match="Cannot add two lists of uneven sizes"):
        values.add(L(n(1)), L())


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param(KsNull(), False, id="null"),
        pytest.param(s(""), False, id="empty-string"),
        pytest.param(s("x"), True, id="string"),
        pytest.param(L(), False, id="empty-list"),
        pytest.param(L(KsNull()), True, id="list"),
        pytest.param(KsMap({}), False, id="empty-map"),
        pytest.param(numeric.of_double(1e-16), False, id="tiny-number"),
        pytest.param(n(-3), True, id="negative-number"),
    ],
)
def test_get_boolean(value, expected: bool) -> None:
    assert values.get_boolean(value) is expected


def test_get_string_nests() -> None:
    value = L(n(1), numeric.of_double(2.5), s("a"), KsNull(), KsMap({s("k"): KsBool(True)}))
    assert values.get_string(value) == "[1, 2.5, a, null, {k: true}]"
    assert values.get_pretty_string(L(numeric.of_double(3.14159), n(2))) == "[3.1.., 2]"


class TestListContainer:
    def test_get_wraps_index(self) -> None:
        items = L(n(10), n(20), n(30))
        assert to_py(items.get(n(-1))) == 30
        assert to_py(items.get(n(4))) == 20

    def test_get_on_empty_is_null(self) -> None:
        assert isinstance(L().get(n(0)), KsNull)

    def test_put_null_address_appends(self) -> None:
        items = L(n(1))
        assert items.put(KsNull(), n(2))
        assert to_py(items) == [1, 2]

    def test_put_negative_counts_from_end(self) -> None:
        items = L(n(1), n(2), n(3))
        assert items.put(n(-1), n(9))
        assert to_py(items) == [1, 2, 9]

    def test_put_past_end_pads(self) -> None:
        items = L(n(1))
        assert items.put(n(3), n(4))
        assert to_py(items) == [1, None, None, 4]

    def test_put_refuses_non_numeric(self) -> None:
        items = L(n(1))
        assert not items.put(s("x"), n(4))
        assert not items.put(n(-5), n(4))
        assert to_py(items) == [1]


class TestMapContainer:
    def test_get_missing_is_null(self) -> None:
        assert isinstance(KsMap({}).get(s("x")), KsNull)

    def test_numeric_keys_unify(self) -> None:
        table = KsMap({n(1): s("one")})
        assert to_py(table.get(numeric.of_double(1.0))) == "one"

    def test_append_adds_null_valued_key(self) -> None:
        table = KsMap({})
        table.append(s("k"))
        assert to_py(table) == {"k": None}


@pytest.mark.parametrize(
    "lhs, rhs, expected",
    [
        pytest.param(L(s("a"), s("b")), s("b"), 1, id="list-index"),
        pytest.param(L(s("a")), s("z"), None, id="list-missing"),
        pytest.param(KsMap({s("k"): n(1)}), s("k"), "k", id="map-key"),
        pytest.param(KsMap({s("k"): n(1)}), s("z"), None, id="map-missing"),
        pytest.param(s("hello world"), s("o w"), "o w", id="regex-plain"),
        pytest.param(s("abc123"), s(r"(\d+)"), "123", id="regex-one-group"),
        pytest.param(s("a1b2"), s(r"([a-z])(\d)"), ["a", "1"], id="regex-groups"),
        pytest.param(s("abc"), s(r"\d"), None, id="regex-no-match"),
        pytest.param(n(1234), s("23"), "23", id="number-as-text"),
    ],
)
def test_contains(lhs, rhs, expected) -> None:
    assert to_py(values.contains(lhs, rhs)) == expected


def test_contains_bad_pattern() -> None:
    with pytest.raises(KestrelRuntimeError, match="Incorrect matching pattern"):
        values.contains(s("abc"), s("("))


class TestBinding:
    def test_rebound_copy_shares_storage(self) -> None:
        original = L(n(1))
        alias = values.rebound_to(original, "x")

        assert alias is not original
        assert alias.bound == "x"
        assert original.bound is None

        alias.append(n(2))
        assert to_py(original) == [1, 2]

    def test_list_constructor_becomes_plain_list(self) -> None:
        pattern = KsListConstructor([n(1)])
        bound = values.rebound_to(pattern, "x")
        assert type(bound) is KsList

    def test_bind_to_sets_in_place(self) -> None:
        value = n(3)
        assert values.bind_to(value, "y") is value
        assert values.get_variable(value) == "y"

    def test_unbound_value_is_not_assignable(self) -> None:
        with pytest.raises(KestrelRuntimeError, match="is not a variable"):
            values.assert_assignable(n(3))


def test_unpack_exposes_elements() -> None:
    assert to_py(KsList(values.unpack(L(n(1), n(2))))) == [1, 2]
    assert to_py(KsList(values.unpack(KsMap({s("a"): n(1)})))) == ["a"]

    with pytest.raises(KestrelRuntimeError, match="Unable to unpack a non-list"):
        values.unpack(s("abc"))


def test_append_rejects_scalars() -> None:
    with pytest.raises(KestrelTypeError):
        values.append(n(1), n(2))


def test_type_predicates() -> None:
    assert values.is_null(KsNull())
    assert not values.is_null(n(0))
    assert values.type_name(KsListConstructor([])) == "list"
    assert values.type_name(KsMap({})) == "map"
