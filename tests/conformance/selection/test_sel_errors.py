"""
Conformance: Test-set language - syntax, name and type errors
"""
import pytest


# Each test case is a tuple: (description, expression, expected_outcome)
# expected_outcome is "error: <description>"; the description must appear in
# one of the diagnostics

CASES = [
    ("empty", "", "error: empty expression"),
    ("blank", "   ", "error: empty expression"),
    ("dangling_operator", "all() |", "error: expected an expression"),
    ("leading_operator", "& all()", "error: expected an expression"),
    ("unclosed_parenthesis", "(all()", "error: unclosed parenthesis"),
    ("unclosed_call", "all(", "error: expected an expression"),
    ("trailing_token", "all() none()", "error: unexpected token"),
    ("stray_character", "all() $ none()", "error: unexpected character"),
    ("unterminated_string", "r:'abc", "error: unterminated string literal"),
    ("unknown_escape", "r:\"\\q\"", "error: unknown escape sequence"),
    ("unknown_function", "nope()", "error: unknown function 'nope'"),
    ("unbound_identifier", "nope", "error: unknown function 'nope'"),
    ("function_not_called", "all", "error: expected test set, found function"),
    ("number_operand", "all() & 3", "error: expected test set, found number"),
    ("string_result", "'text/bold'", "error: expected test set, found string"),
    ("string_complement", "!'x'", "error: expected test set, found string"),
    ("error_reports_column", "all() | 1", "error: at column 9"),
    ("too_deep", "(" * 150 + "all()" + ")" * 150, "error: nested deeper than"),
]


@pytest.mark.parametrize("description,expression,expected", CASES, ids=[c[0] for c in CASES])
def test_sel_errors(runner, description, expression, expected):
    """Malformed or ill-typed expressions are rejected with a diagnostic."""
    result = runner.select(expression)
    assert not result.valid, f"Expected error but selected {result.selected}"
    error_text = expected.removeprefix("error: ")
    assert any(error_text.lower() in d.lower() for d in result.diagnostics), \
        f"Expected '{error_text}' in diagnostics: {result.diagnostics}"
