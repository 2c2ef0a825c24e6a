import pytest

from assertcmd.predicates import (
    Case,
    DifferencePredicate,
    EqPredicate,
    InPredicate,
    Predicate,
    Utf8Predicate,
    diff,
    eq,
    from_utf8,
    function,
    in_iter,
)


def test_eq_eval():
    pred = eq(10)
    assert isinstance(pred, EqPredicate)
    assert pred.eval(10) is True
    assert pred.eval(11) is False


def test_eq_bytes_eval():
    pred = eq(b"Hello")
    assert pred.eval(b"Hello")
    assert not pred.eval(b"hello")


def test_eq_find_case_matches_expected():
    pred = eq(42)
    assert pred.find_case(True, 42).result is True
    assert pred.find_case(False, 42) is None
    case = pred.find_case(False, 43)
    assert case.result is False
    assert case.predicate is pred


def test_eq_display():
    assert str(eq(42)) == "var == 42"


def test_eq_tree_lists_actual_value():
    case = eq(42).find_case(False, 43)
    lines = case.tree().splitlines()
    assert lines[0] == str(eq(42))
    assert lines[1].endswith("var: 43")
    assert str(case) == case.tree()


def test_in_iter_from_list_and_generator():
    from_list = in_iter([3, 10])
    from_gen = in_iter(x for x in (3, 10))
    assert isinstance(from_list, InPredicate)
    assert from_list.eval(10) and from_gen.eval(10)
    assert not from_list.eval(4) and not from_gen.eval(4)
    assert from_gen.values == [3, 10]


def test_in_iter_find_case():
    pred = in_iter([2, 42])
    assert pred.find_case(False, 42) is None
    case = pred.find_case(False, 7)
    assert case.result is False
    assert "7" in case.tree()


def test_diff_eval():
    pred = diff("hello\n")
    assert isinstance(pred, DifferencePredicate)
    assert pred.eval("hello\n")
    assert not pred.eval("hello")


def test_diff_case_carries_diff():
    case = diff("hello\n").find_case(False, "world\n")
    assert case.result is False
    names = [name for name, _ in case.products]
    assert names == ["diff"]
    text = case.products[0][1]
    assert "-hello" in text
    assert "+world" in text
    assert "+world" in case.tree()


def test_diff_no_case_when_unexpected():
    assert diff("a").find_case(False, "a") is None
    assert diff("a").find_case(True, "b") is None


def test_from_utf8_eval():
    pred = from_utf8(diff("Hello"))
    assert isinstance(pred, Utf8Predicate)
    assert pred.eval(b"Hello")
    assert not pred.eval(b"Bye")
    assert not pred.eval(b"\xff\xfe")


def test_from_utf8_find_case_wraps_child():
    inner = diff("hello\n")
    pred = from_utf8(inner)
    case = pred.find_case(False, b"world\n")
    assert case.result is False
    assert len(case.children) == 1
    assert case.children[0].predicate is inner
    assert str(pred) == str(inner)


def test_from_utf8_invalid_bytes_case():
    pred = from_utf8(eq("x"))
    assert pred.find_case(True, b"\xff") is None
    case = pred.find_case(False, b"\xff")
    assert case.result is False
    assert case.products[0][0] == "invalid utf-8"


def test_from_utf8_success_case():
    case = from_utf8(eq("ok")).find_case(True, b"ok")
    assert case.result is True
    assert case.children[0].result is True


def test_function_predicate():
    pred = function(lambda n: n > 5, "big")
    assert pred.eval(6)
    assert not pred.eval(5)
    assert str(pred) == "big(var)"
    assert pred.find_case(False, 6) is None
    assert pred.find_case(False, 1).result is False


class _Even(Predicate):
    def eval(self, item):
        return item % 2 == 0


def test_custom_predicate_default_find_case():
    pred = _Even()
    matched = Predicate.find_case(pred, True, 4)
    assert matched.result is True
    assert matched.predicate is pred
    assert Predicate.find_case(pred, True, 3) is None
    assert Predicate.find_case(pred, False, 3).result is False


def test_predicate_is_abstract():
    with pytest.raises(TypeError):
        Predicate()


def test_case_tree_without_predicate_and_nesting():
    inner = Case(None, True, products=[("a", "x\ny")])
    outer = Case(None, False, products=[("b", "z")], children=[inner])
    lines = outer.tree().splitlines()
    assert lines[0] == "False"
    assert lines[1] == "├── b: z"
    assert lines[2] == "└── True"
    assert lines[3].endswith("a: x")
    assert lines[4].endswith("y")
    assert len(lines) == 5