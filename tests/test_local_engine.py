import numpy as np
import pytest

from matbridge import CommandSyntaxError, EngineConfig, EngineError, LocalEngine
from matbridge.engine import parse_command


def test_parse_command_splits_statements():
    tree = parse_command("clear a b; x = reshape(a + b * i, 2, 2);")

    assert [stmt.data for stmt in tree.children] == ["clear", "assign"]


def test_syntax_error_reports_location():
    with pytest.raises(CommandSyntaxError) as excinfo:
        parse_command("x = reshape(a, ;")

    err = excinfo.value
    assert err.line == 1
    assert err.column is not None
    assert "^" in str(err)
    assert isinstance(err, EngineError)


def test_set_variable_stores_row_vector(engine):
    engine.set_variable("v", [1.0, 2.0, 3.0])

    size = engine.returning_eval("size(v);", 1)[0]

    np.testing.assert_array_equal(size, [1.0, 3.0])
    assert size.dtype == np.float64


def test_reshape_uses_column_major_order(engine):
    engine.set_variable("v", [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    engine.eval("m = reshape(v, 2, 3);")

    real = engine.returning_eval("real(m);", 1)[0]

    np.testing.assert_array_equal(real, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    np.testing.assert_array_equal(engine.returning_eval("size(m);", 1)[0], [2.0, 3.0])


def test_reshape_drops_trailing_singleton_dimensions(engine):
    engine.set_variable("v", [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    engine.eval("m = reshape(v, 2, 3, 1, 1);")

    np.testing.assert_array_equal(engine.returning_eval("size(m);", 1)[0], [2.0, 3.0])


def test_reshape_rejects_element_count_change(engine):
    engine.set_variable("v", [1.0, 2.0, 3.0])

    with pytest.raises(EngineError, match="Number of elements must not change"):
        engine.eval("m = reshape(v, 2, 2);")
    assert "m" not in engine.variables()


def test_reshape_without_dimensions_keeps_shape(engine):
    engine.set_variable("v", [1.0, 2.0])
    engine.eval("m = reshape(v);")

    np.testing.assert_array_equal(engine.returning_eval("size(m);", 1)[0], [1.0, 2.0])


def test_complex_combination_and_introspection(engine):
    engine.set_variable("re", [1.0, 2.0])
    engine.set_variable("im", [3.0, -4.0])
    engine.eval("z = reshape(re + im * i, 2, 1);")

    assert engine.returning_eval("isreal(z);", 1)[0].tolist() == [False]
    np.testing.assert_array_equal(engine.returning_eval("imag(z);", 1)[0], [3.0, -4.0])
    assert engine.returning_eval("isreal(re);", 1)[0].tolist() == [True]


def test_bound_variable_shadows_imaginary_unit(engine):
    engine.set_variable("i", [2.0])
    engine.set_variable("a", [1.0])
    engine.eval("b = a + a * i;")

    assert engine.returning_eval("isreal(b);", 1)[0].tolist() == [True]
    np.testing.assert_array_equal(engine.get_variable("b"), [3.0])


def test_arithmetic_checks_dimensions(engine):
    engine.set_variable("a", [1.0, 2.0])
    engine.set_variable("b", [1.0, 2.0, 3.0])

    with pytest.raises(EngineError, match="dimensions must agree"):
        engine.eval("c = a + b;")
    engine.eval("c = (a - 1) * 2;")
    np.testing.assert_array_equal(engine.get_variable("c"), [0.0, 2.0])
    engine.eval("d = -a;")
    np.testing.assert_array_equal(engine.get_variable("d"), [-1.0, -2.0])


def test_genvarname_appends_smallest_free_suffix(engine):
    for name in ("foo_real", "foo_real1", "foo_real3"):
        engine.set_variable(name, [0.0])

    assert engine.returning_eval("genvarname('foo_real', who);", 1) == ["foo_real2"]
    assert engine.returning_eval("genvarname('fresh', who);", 1) == ["fresh"]


def test_generate_name_sanitizes_and_truncates():
    engine = LocalEngine(EngineConfig(name_length_max=6))

    assert engine.generate_name("1 bad-name", set()) == "x1_bad"
    assert engine.generate_name("abcdef", {"abcdef"}) == "abcde1"
    assert engine.generate_name("it's", set()) == "it_s"


def test_genvarname_accepts_quoted_quote(engine):
    assert engine.returning_eval("genvarname('a''b');", 1) == ["a_b"]


def test_clear_removes_only_named_variables(engine):
    for name in ("a", "b", "c"):
        engine.set_variable(name, [1.0])

    engine.eval("clear a b;")
    assert engine.variables() == ("c",)
    engine.eval("clear missing;")
    assert engine.variables() == ("c",)
    engine.eval("clear;")
    assert engine.variables() == ()


def test_expression_statement_binds_ans(engine):
    engine.set_variable("a", [1.0])
    engine.eval("a * 3;")

    np.testing.assert_array_equal(engine.get_variable("ans"), [3.0])


def test_who_lists_bound_names(engine):
    engine.set_variable("b", [1.0])
    engine.set_variable("a", [1.0])

    assert engine.returning_eval("who;", 1) == [["a", "b"]]


def test_returning_eval_rejects_assignments_and_extra_outputs(engine):
    engine.set_variable("a", [1.0])

    with pytest.raises(EngineError, match="single expression"):
        engine.returning_eval("b = a;", 1)
    with pytest.raises(EngineError, match="Too many output arguments"):
        engine.returning_eval("size(a);", 2)
    assert engine.returning_eval("size(a);", 0) == []


def test_unknown_functions_and_names(engine):
    with pytest.raises(EngineError, match="Undefined function 'magic'"):
        engine.returning_eval("magic(3);", 1)
    with pytest.raises(EngineError, match="Undefined variable 'nope'"):
        engine.get_variable("nope")
    with pytest.raises(EngineError, match="Invalid variable name"):
        engine.set_variable("not valid", [1.0])


def test_numeric_builtins_reject_strings(engine):
    with pytest.raises(EngineError, match="not numeric"):
        engine.returning_eval("real('abc');", 1)


def test_command_logging_level(caplog):
    engine = LocalEngine(EngineConfig(log_commands=True))
    engine.set_variable("a", [1.0])

    with caplog.at_level("INFO", logger="matbridge.engine.local"):
        engine.returning_eval("size(a);", 1)

    assert "eval: size(a);" in caplog.text


def test_repr_lists_variables(engine):
    engine.set_variable("a", [1.0])

    assert repr(engine) == "LocalEngine(variables=['a'])"
