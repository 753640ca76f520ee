import pytest

from easyaudit.utils import content, functions

SOURCE = """<?php
class Thing
{
    public function first($a)
    {
        if ($a) {
            return 1;
        }
        return 2;
    }

    private function inline() { return 3; }
}
"""


def test_get_line_number_first_match():
    assert content.get_line_number(SOURCE, "return") == 7
    assert content.get_line_number(SOURCE, "nowhere") is None


def test_remove_comments_strips_all_styles():
    code = "a(); // trailing\n/* block\n spans */b();\n# hash\nc();"

    stripped = content.remove_comments(code)

    assert "trailing" not in stripped
    assert "spans" not in stripped
    assert "hash" not in stripped
    assert "a();" in stripped and "b();" in stripped and "c();" in stripped


def test_find_approximate_line_searches_nearby():
    original = "\n".join(["x"] * 5 + ["  $foo   =  bar();"] + ["y"] * 5)

    assert content.find_approximate_line(original, "$foo = bar();", 3, normalize_whitespace=True) == 6
    assert content.find_approximate_line(original, "missing", 3) == 3


def test_line_at_offset():
    assert content.line_at_offset(SOURCE, SOURCE.index("inline")) == 12
    assert content.line_at_offset(SOURCE, 0) == 1


def test_function_content_stops_at_balanced_brace():
    block = functions.get_function_content(SOURCE, 1)

    assert block.content.splitlines()[0].strip() == "public function first($a)"
    assert block.end_line == 10


def test_function_inner_content_strips_declaration_and_braces():
    block = functions.get_function_content(SOURCE, 4)

    inner = functions.get_function_inner_content(block.content)

    assert "public function" not in inner
    assert "return 2;" in inner
    assert inner.strip().endswith("return 2;")


def test_single_line_function_body():
    block = functions.get_function_content(SOURCE, 11)

    assert block.end_line == 12
    assert functions.get_function_inner_content(block.content) == "return 3;"


def test_missing_function_raises():
    with pytest.raises(functions.FunctionNotFoundError):
        functions.get_function_content("<?php\n$a = 1;\n", 1)


def test_braces_in_strings_skew_the_balance():
    code = "function odd()\n{\n    $s = '{';\n    return $s;\n}\n$after = 1;\n}\n"

    block = functions.get_function_content(code, 1)

    assert block.end_line == 7


def test_occurring_line_and_brace_block():
    assert functions.get_occurring_line_in_function("a\nb\nc", "c") == 3
    assert functions.get_occurring_line_in_function("a", "z") is None
    assert functions.extract_brace_block("foreach ($x as $y) { if (1) { a(); } }", 0) == " if (1) { a(); } "
    assert functions.extract_brace_block("no braces", 0) is None
