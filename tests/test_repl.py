"""Tests for the evaluator loop: dispatch, output capture, exit and restart."""

import io
import os

import pytest

from live_shell.exceptions import ConfigurationError
from live_shell.executor import ExecutionResult, NamespaceExecutor
from live_shell.repl import (
    EXIT_CODE_NORMAL,
    EXIT_CODE_RESTART,
    REPL,
    STATEMENT_KEYWORDS,
    LineKind,
    as_return,
    classify_line,
    normalize_line,
)


class FakeReader:
    """Feeds queued lines, then reports end of input as 'exit'."""

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def read_line(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            return "exit"
        return self.lines.pop(0)


class RecordingExecutor:
    """Records the code it receives and returns canned results."""

    def __init__(self, result=None):
        self.codes = []
        self.result = result or ExecutionResult(output="", value=None)

    def execute(self, code):
        self.codes.append(code)
        return self.result


def make_repl(lines, namespace=None, quiet=False, executor=None):
    out = io.StringIO()
    reader = FakeReader(lines)
    repl = REPL(
        "py> ",
        executor or NamespaceExecutor(namespace if namespace is not None else {}),
        line_reader=reader,
        stdout=out,
        quiet=quiet,
    )
    return repl, reader, out


class TestClassification:
    @pytest.mark.parametrize("keyword", STATEMENT_KEYWORDS)
    def test_keyword_followed_by_space_is_statement(self, keyword):
        assert classify_line(f"{keyword} x;") is LineKind.STATEMENT

    @pytest.mark.parametrize("keyword", ["echo", "print", "if", "while"])
    def test_keyword_followed_by_paren_is_statement(self, keyword):
        assert classify_line(f"{keyword}(x);") is LineKind.STATEMENT

    @pytest.mark.parametrize(
        "line",
        [
            "get_name();",
            "x = 1;",
            "format(3);",
            "printer.flush();",
            "import_module('os');",
            "If x;",
            "return 1;",
        ],
    )
    def test_other_lines_are_expressions(self, line):
        assert classify_line(line) is LineKind.EXPRESSION

    def test_normalize_trims_semicolons_and_appends_one(self):
        assert normalize_line("x = 1;;;") == "x = 1;"
        assert normalize_line("x = 1") == "x = 1;"
        assert normalize_line("   ") == ";"

    def test_as_return_prefixes_once(self):
        assert as_return("get_name();") == "return get_name();"
        assert as_return("return get_name();") == "return get_name();"
        assert as_return("return(1);") == "return(1);"
        assert as_return("returned;") == "return returned;"


class TestLoop:
    def test_exit_returns_normal(self):
        repl, _, _ = make_repl(["  exit  "])

        assert repl.start() == EXIT_CODE_NORMAL

    def test_end_of_input_returns_normal(self):
        repl, _, _ = make_repl([])

        assert repl.start() == EXIT_CODE_NORMAL

    def test_restart_returns_restart_code(self):
        repl, _, out = make_repl(["x = 5", " restart "])

        assert repl.start() == EXIT_CODE_RESTART
        assert "Restarting shell..." in out.getvalue()

    def test_empty_lines_are_skipped(self):
        executor = RecordingExecutor()
        repl, reader, _ = make_repl(["", "", "exit"], executor=executor)

        assert repl.start() == EXIT_CODE_NORMAL
        assert executor.codes == []
        assert reader.prompts == ["py> ", "py> ", "py> "]

    def test_expression_value_is_dumped(self):
        namespace = {"get_name": lambda: "WP-CLI"}
        repl, _, out = make_repl(["get_name();"], namespace=namespace)

        repl.start()

        assert out.getvalue() == '=> str(6) "WP-CLI"\n'

    def test_expression_is_sent_with_return_prefix(self):
        executor = RecordingExecutor()
        repl, _, _ = make_repl(["get_name( 'name' );"], executor=executor)

        repl.start()

        assert executor.codes == ["return get_name( 'name' );"]

    def test_statement_is_sent_verbatim(self):
        executor = RecordingExecutor()
        repl, _, out = make_repl(["for i in range(2): pass;;"], executor=executor)

        repl.start()

        assert executor.codes == ["for i in range(2): pass;"]
        assert "=>" not in out.getvalue()

    def test_statement_output_trailing_newlines_normalized(self):
        repl, _, out = make_repl(["print('a\\n\\n')"])

        repl.start()

        assert out.getvalue() == "a\n"

    def test_expression_output_precedes_value(self):
        namespace = {}
        repl, _, out = make_repl(["def f(): print('side'); return 3", "f()"], namespace=namespace)

        repl.start()

        assert out.getvalue() == "side\n=> int(3)\n"

    def test_state_persists_between_lines(self):
        namespace = {}
        repl, _, out = make_repl(["x = 40", "x + 2"], namespace=namespace)

        repl.start()

        assert namespace["x"] == 40
        assert out.getvalue().endswith("=> int(42)\n")

    def test_quiet_suppresses_value_but_keeps_output(self):
        namespace = {"shout": lambda: print("hello") or 7}
        repl, _, out = make_repl(["shout()", "restart"], namespace=namespace, quiet=True)

        assert repl.start() == EXIT_CODE_RESTART
        assert out.getvalue() == "hello\n"

    def test_quiet_still_executes(self):
        namespace = {}
        repl, _, out = make_repl(["y = 9"], namespace=namespace, quiet=True)

        repl.start()

        assert namespace["y"] == 9
        assert out.getvalue() == ""

    def test_whitespace_only_line_does_not_crash(self):
        repl, _, out = make_repl(["   ", ";"])

        assert repl.start() == EXIT_CODE_NORMAL
        assert out.getvalue() == "=> None\n=> None\n"

    def test_module_value_is_dumped_on_one_line(self):
        repl, _, out = make_repl(["import os", "os"])

        assert repl.start() == EXIT_CODE_NORMAL
        assert out.getvalue().endswith("=> module(os)\n")

    def test_evaluated_errors_propagate(self):
        repl, _, _ = make_repl(["1 / 0"])

        with pytest.raises(ZeroDivisionError):
            repl.start()


class TestWatch:
    def test_change_in_watched_directory_restarts(self, tmp_path):
        nested = tmp_path / "pkg"
        nested.mkdir()
        target = nested / "module.py"
        target.write_text("A = 1\n")
        os.utime(target, (1_000_000, 1_000_000))
        os.utime(nested, (1_000_000, 1_000_000))
        os.utime(tmp_path, (1_000_000, 1_000_000))

        class TouchingReader(FakeReader):
            def read_line(self, prompt):
                target.write_text("A = 2\n")
                os.utime(target, (2_000_000, 2_000_000))
                return super().read_line(prompt)

        out = io.StringIO()
        repl = REPL("py> ", NamespaceExecutor({}), line_reader=TouchingReader(["1"]), stdout=out)
        repl.set_watch_path(tmp_path)

        assert repl.start() == EXIT_CODE_RESTART
        assert f"Detected changes in {tmp_path.resolve()}" in out.getvalue()

    def test_unchanged_watch_keeps_running(self, tmp_path):
        repl, _, _ = make_repl(["1"])
        repl.set_watch_path(tmp_path)

        assert repl.start() == EXIT_CODE_NORMAL

    def test_missing_watch_path_is_fatal(self, tmp_path):
        repl, reader, _ = make_repl(["1"])

        with pytest.raises(ConfigurationError):
            repl.set_watch_path(tmp_path / "missing")
        assert reader.prompts == []
