"""Tests for push/remove/includes/math/inc/dec/update."""

import math

import pytest

from mirrormap import KeyTypeError, PathError, Store, StoreTypeError
from mirrormap.core import apply_math


class TestPush:
    """Tests for push()."""

    def test_push(self, store):
        """Values are appended to arrays."""
        store.set("arr", [1])
        store.push("arr", 2).push("arr", "three")
        assert store.get("arr") == [1, 2, "three"]

    def test_push_skips_duplicates(self, store):
        """Equal elements aren't appended twice unless allowed."""
        store.set("arr", [1, {"id": 1}])
        store.push("arr", 1)
        store.push("arr", {"id": 1})
        assert store.get("arr") == [1, {"id": 1}]
        store.push("arr", 1, allow_dupes=True)
        assert store.get("arr") == [1, {"id": 1}, 1]

    def test_push_at_path(self, store):
        """Arrays inside objects can be appended to."""
        store.set("obj", {"tags": ["a"]})
        store.push("obj", "b", "tags")
        assert store.get("obj") == {"tags": ["a", "b"]}

    def test_push_errors(self, store):
        """push() needs an existing array."""
        with pytest.raises(PathError):
            store.push("nope", 1)
        store.set("obj", {"tags": "a"})
        with pytest.raises(KeyTypeError):
            store.push("obj", 1)
        with pytest.raises(PathError):
            store.push("obj", 1, "missing")
        with pytest.raises(KeyTypeError):
            store.push("obj", 1, "tags")

    def test_push_does_not_use_default(self):
        """The default isn't materialized by push()."""
        store = Store(default={})
        with pytest.raises(PathError):
            store.push("k", 1)
        store.get("k")
        with pytest.raises(KeyTypeError):
            store.push("k", 1)

    def test_push_after_array_default(self):
        """An array default can be pushed to once read."""
        store = Store(default=[])
        store.get("k")
        store.push("k", 1)
        assert store.get("k") == [1]
        assert store.get("other") == []


class TestRemove:
    """Tests for remove()."""

    def test_remove_value(self, store):
        """The first equal element is removed."""
        store.set("arr", [1, 2, 3, 2])
        store.remove("arr", 2)
        assert store.get("arr") == [1, 3, 2]

    def test_remove_object_by_equality(self, store):
        """Objects are compared by value."""
        store.set("arr", [{"id": 1}, {"id": 2}])
        store.remove("arr", {"id": 1})
        assert store.get("arr") == [{"id": 2}]

    def test_remove_predicate(self, store):
        """A function selects the element to remove."""
        store.set("arr", [{"id": 1}, {"id": 2}])
        store.remove("arr", lambda element: element["id"] == 2)
        assert store.get("arr") == [{"id": 1}]

    def test_remove_no_match(self, store):
        """Nothing happens when no element matches."""
        store.set("arr", [1, 2])
        store.remove("arr", 5)
        assert store.get("arr") == [1, 2]

    def test_remove_at_path(self, store):
        """Arrays inside objects can be removed from."""
        store.set("obj", {"tags": ["a", "b"], "n": 1})
        store.remove("obj", "a", "tags")
        assert store.get("obj") == {"tags": ["b"], "n": 1}

    def test_remove_errors(self, store):
        """remove() needs an existing array."""
        with pytest.raises(PathError):
            store.remove("nope", 1)
        store.set("num", 1)
        with pytest.raises(KeyTypeError):
            store.remove("num", 1)
        store.set("obj", {"n": 1})
        with pytest.raises(StoreTypeError):
            store.remove("obj", 1)
        with pytest.raises(StoreTypeError):
            store.remove("obj", 1, "n")


class TestIncludes:
    """Tests for includes()."""

    def test_includes(self, store):
        """Membership is tested by equality."""
        store.set("arr", [1, "two", {"id": 3}])
        assert store.includes("arr", "two")
        assert store.includes("arr", {"id": 3})
        assert not store.includes("arr", 4)

    def test_includes_at_path(self, store):
        """Arrays inside objects can be searched."""
        store.set("obj", {"tags": ["a"]})
        assert store.includes("obj", "a", "tags")
        assert not store.includes("obj", "b", "tags")

    def test_includes_errors(self, store):
        """includes() needs an array."""
        store.set("obj", {"n": 1})
        with pytest.raises(StoreTypeError):
            store.includes("obj", 1)
        with pytest.raises(StoreTypeError):
            store.includes("obj", 1, "n")
        store.set("num", 1)
        with pytest.raises(KeyTypeError):
            store.includes("num", 1)


class TestMath:
    """Tests for math(), inc() and dec()."""

    def test_scenario(self, store):
        """Arithmetic results are stored."""
        store.set("number", 42)
        store.math("number", "add", 5)
        assert store.get("number") == 47
        store.inc("number")
        assert store.get("number") == 48
        store.dec("number")
        assert store.get("number") == 47

    @pytest.mark.parametrize(
        "operation, operand, expected",
        [
            ("+", 8, 50), ("addition", 8, 50),
            ("-", 2, 40), ("sub", 2, 40), ("subtract", 2, 40),
            ("*", 2, 84), ("mult", 2, 84), ("multiply", 2, 84),
            ("/", 2, 21), ("div", 4, 10.5), ("divide", 2, 21),
            ("^", 2, 1764), ("exp", 2, 1764), ("exponent", 2, 1764),
            ("%", 5, 2), ("mod", 5, 2), ("modulo", 5, 2),
        ],
    )
    def test_operations(self, store, operation, operand, expected):
        """Every operation alias is supported."""
        store.set("number", 42)
        store.math("number", operation, operand)
        assert store.get("number") == expected

    def test_math_at_path(self, store):
        """Numbers inside objects can be changed."""
        store.set("obj", {"sub": {"anInt": 5}})
        store.math("obj", "+", 10, "sub.anInt")
        store.inc("obj", "sub.anInt")
        assert store.get("obj", "sub.anInt") == 16

    def test_division_by_zero(self, store):
        """Degenerate operations give IEEE-754 results."""
        store.set("n", {"pos": 1, "neg": -1, "zero": 0, "mod": 5})
        store.math("n", "/", 0, "pos")
        store.math("n", "/", 0, "neg")
        store.math("n", "/", 0, "zero")
        store.math("n", "%", 0, "mod")
        value = store.get("n")
        assert value["pos"] == math.inf
        assert value["neg"] == -math.inf
        assert math.isnan(value["zero"])
        assert math.isnan(value["mod"])

    def test_fractional_power_of_negative(self):
        """Results that would be complex are NaN."""
        assert math.isnan(apply_math(-8, "^", 1 / 3))

    def test_random(self, store):
        """rand gives an integer below the operand."""
        store.set("n", 0)
        for _ in range(20):
            store.math("n", "rand", 10)
            value = store.get("n")
            assert isinstance(value, int)
            assert 0 <= value < 10

    @pytest.mark.parametrize(
        "base, operation, operand, expected",
        [
            (-7, "%", 3, -1),
            (7, "%", -3, 1),
            (-7, "modulo", -3, -1),
            (-7.5, "mod", 2, -1.5),
            (7.5, "%", -2, 1.5),
            (-(2**60) - 1, "%", 2**60, -1),
        ],
    )
    def test_modulo_takes_sign_of_dividend(self, store, base, operation, operand, expected):
        """Remainders keep the dividend's sign."""
        store.set("n", base)
        store.math("n", operation, operand)
        assert store.get("n") == expected

    def test_modulo_keeps_integers_exact(self, store):
        """Integer remainders stay integers."""
        store.set("n", -(10**30) - 7)
        store.math("n", "%", 10)
        value = store.get("n")
        assert value == -7
        assert isinstance(value, int)

    def test_big_numbers(self, store):
        """Large integer results are kept exactly."""
        store.set("n", 2**40)
        store.math("n", "*", 2**40)
        assert store.get("n") == 2**80
        store.math("n", "+", 1)
        assert store.get("n") == 2**80 + 1

    def test_integers_beyond_float_range(self, store):
        """Overflowing float results on huge integers are signed infinities."""
        store.set("n", {"pos": 10**400, "neg": -(10**400), "exact": 10**400})
        store.math("n", "/", 3, "pos")
        store.math("n", "/", 3, "neg")
        store.math("n", "/", 10**399, "exact")
        value = store.get("n")
        assert value["pos"] == math.inf
        assert value["neg"] == -math.inf
        assert value["exact"] == 10.0

    def test_huge_integer_modulo_by_zero(self):
        """Degenerate modulo on a huge integer gives NaN."""
        assert math.isnan(apply_math(10**400, "%", 0))

    def test_math_errors(self, store):
        """Bad targets, operations and operands are rejected."""
        with pytest.raises(PathError):
            store.inc("nope")
        store.set("s", "text")
        with pytest.raises(KeyTypeError):
            store.inc("s")
        store.set("b", True)
        with pytest.raises(KeyTypeError):
            store.inc("b")
        store.set("n", 1)
        with pytest.raises(StoreTypeError):
            store.math("n", "pow", 2)
        with pytest.raises(StoreTypeError):
            store.math("n", "+", "2")
        with pytest.raises(StoreTypeError):
            store.math("n", "+", None)
        assert store.get("n") == 1

    def test_missing_property(self, store):
        """A missing property must be set first."""
        store.set("obj", {"a": None})
        with pytest.raises(PathError, match=r"Please set\(\) it"):
            store.inc("obj", "b")
        with pytest.raises(PathError):
            store.inc("obj", "a")


class TestUpdate:
    """Tests for update()."""

    def test_merge(self, store):
        """Dicts are merged recursively into the current value."""
        store.set("obj", {"a": 1, "b": {"c": 2, "l": [1, 2]}})
        result = store.update("obj", {"b": {"d": 3, "l": [9]}})
        expected = {"a": 1, "b": {"c": 2, "d": 3, "l": [9]}}
        assert result == expected
        assert store.get("obj") == expected

    def test_function(self, store):
        """A function computes the replacement from a copy."""
        store.set("obj", {"a": 1})

        def add_field(previous):
            previous["e"] = 4
            return previous

        assert store.update("obj", add_field) == {"a": 1, "e": 4}
        assert store.get("obj") == {"a": 1, "e": 4}

    def test_update_is_isolated(self, store):
        """Later changes to the merged dict don't reach the store."""
        store.set("obj", {"a": 1})
        patch = {"b": {"c": 1}}
        store.update("obj", patch)
        patch["b"]["c"] = 99
        assert store.get("obj", "b.c") == 1

    def test_update_errors(self, store):
        """update() needs an existing object."""
        with pytest.raises(KeyTypeError):
            store.update(None, {})
        with pytest.raises(PathError):
            store.update("nope", {})
        store.set("arr", [1])
        with pytest.raises(KeyTypeError):
            store.update("arr", {})
        store.set("obj", {})
        with pytest.raises(StoreTypeError):
            store.update("obj", [("a", 1)])

    def test_update_persists(self, db_store):
        """Merged values are written to the backend."""
        db_store.set("obj", {"a": 1})
        db_store.update("obj", {"b": 2})
        db_store.evict("obj")
        assert db_store.get("obj") == {"a": 1, "b": 2}
