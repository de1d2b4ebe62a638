"""
Tests for the Engine façade: end-to-end runs of source programs.
"""

import io
import textwrap
import threading

import pytest

from numscript import (
    Engine, EngineConfig, ExecutionResult, tokenize, parse,
    LexerError, ParserError, UnboundVariableError, TypeMismatchError,
    UnknownCommandError, CommandFailedError, CommandError,
)
from numscript.runtime import unwrap_values


class Harness:
    """An engine wired to an in-memory console and a fake clock."""

    def __init__(self, config=None):
        self.output = io.StringIO()
        self.slept = []
        self.engine = Engine(config, output=self.output, sleep=self.slept.append)

    def run(self, source):
        return self.engine.run_source(textwrap.dedent(source))

    @property
    def lines(self):
        return self.output.getvalue().splitlines()


@pytest.fixture
def harness():
    return Harness()


class TestRun:
    """Engine.run on parsed statements."""

    def test_run_statements(self, harness):
        statements = parse(tokenize('print("hi");'))
        result = harness.engine.run(statements)
        assert isinstance(result, ExecutionResult)
        assert result.success
        assert result.error is None
        assert result.error_message is None
        assert harness.lines == ["hi"]

    def test_empty_program(self, harness):
        result = harness.engine.run([])
        assert result.success

    def test_store_persists_across_runs(self, harness):
        harness.run("var count = 1;")
        result = harness.run("count = 2; print(count);")
        assert result.success
        assert harness.lines == ["2"]

    def test_fault_keeps_earlier_effects(self, harness):
        result = harness.run("var a = 1; print(a); print(b); print(3);")
        assert not result.success
        assert harness.lines == ["1"]
        assert harness.engine.context.get_variable("a").data == 1

    def test_deterministic_runs(self):
        """Programs without calls or variables leave fresh engines in the same state."""
        source = "if (1 < 2 && 3 > 2) { } loop (5) { }"
        first, second = Harness(), Harness()
        assert first.run(source).success
        assert second.run(source).success
        assert first.engine.context.variables == second.engine.context.variables == {}
        assert first.output.getvalue() == second.output.getvalue() == ""


class TestProgramBehaviour:
    """The end-to-end properties the language promises."""

    def test_loop_prints_three_times(self, harness):
        result = harness.run("loop (3) { print(1); }")
        assert result.success
        assert harness.lines == ["1", "1", "1"]

    def test_if_else_takes_one_branch(self, harness):
        result = harness.run('var a = 5; if (a > 3) { print("big"); } else { print("small"); }')
        assert result.success
        assert harness.lines == ["big"]

    def test_unbound_variable_stops_run(self, harness):
        result = harness.run('print(z);\nprint("never");')
        assert not result.success
        assert isinstance(result.error, UnboundVariableError)
        assert harness.lines == []

    def test_assignment_inside_if(self, harness):
        result = harness.run("var x = 1; if (x == 1) { x = 2; } print(x);")
        assert result.success
        assert harness.lines == ["2"]

    def test_newline_terminated_program(self, harness):
        result = harness.run("""
            var clicks = 0
            var ready = 1 == 1
            loop (2) {
                if (ready && clicks < 5) {
                    print("click", clicks)
                    sleep(100)
                } else {
                    print("skip")
                }
            }
        """)
        assert result.success, result.error_message
        assert harness.lines == ["click 0", "click 0"]
        assert harness.slept == [0.1, 0.1]

    def test_print_booleans(self, harness):
        harness.run("print(1 == 1, 1 == 2);")
        assert harness.lines == ["true false"]


class TestErrors:
    """Every error comes back through ExecutionResult."""

    def test_lexer_error(self, harness):
        result = harness.run("var x = 1 + 2;")
        assert not result.success
        assert isinstance(result.error, LexerError)
        assert result.diagnostics[0].code == "E001"

    def test_parser_error(self, harness):
        result = harness.run("if ( 1 2 ) { print(1); }")
        assert not result.success
        assert isinstance(result.error, ParserError)
        assert harness.lines == []

    def test_parser_error_runs_nothing(self, harness):
        result = harness.run('print("first");\nprint(;')
        assert not result.success
        assert harness.lines == []

    def test_type_mismatch(self, harness):
        result = harness.run('if ("yes") { print(1); }')
        assert isinstance(result.error, TypeMismatchError)

    def test_unknown_command(self, harness):
        result = harness.run("explode();")
        assert isinstance(result.error, UnknownCommandError)
        assert "unknown command 'explode'" in result.error_message
        assert "available commands" in result.error_message

    def test_error_message_shows_source(self, harness):
        result = harness.run('var a = 1;\nprint(missing);')
        message = result.error_message
        assert "2:7" in message
        assert "print(missing);" in message
        assert "^^^^^^^" in message

    def test_filename_in_error(self, harness):
        result = harness.engine.run_source("print(q);", filename="macro.num")
        assert result.error_message.startswith("macro.num:1:7")

    def test_handler_warning_does_not_fail_run(self, harness):
        result = harness.run('sleep("soon");\nprint("still here");')
        assert result.success
        assert harness.lines == ["still here"]
        assert [d.code for d in result.warnings] == ["W401"]

    def test_warnings_are_per_run(self, harness):
        harness.run("sleep(-1);")
        result = harness.run("sleep(1);")
        assert result.warnings == []

    def test_fatal_result_includes_earlier_warnings(self, harness):
        result = harness.run("sleep();\nprint(nope);")
        assert [d.code for d in result.diagnostics] == ["W401", "E401"]

    def test_repeated_runs_do_not_accumulate_warnings(self, harness):
        for _ in range(1000):
            result = harness.run('sleep("x");')
            assert len(result.warnings) == 1
        assert harness.engine.context.diagnostics.warning_count == 1
        assert harness.run("sleep(1);").success
        assert not harness.engine.context.has_warnings

    def test_run_without_source_has_no_stale_lines(self, harness):
        harness.run('print("from the earlier program");')
        result = harness.engine.run(parse(tokenize("print(q);")))
        assert isinstance(result.error, UnboundVariableError)
        assert "earlier program" not in result.error_message

    def test_run_with_source_shows_line(self, harness):
        harness.run('print("from the earlier program");')
        source = "var a = 1;\nprint(q);"
        result = harness.engine.run(parse(tokenize(source), source=source), source=source)
        assert "2:7" in result.error_message
        assert "print(q);" in result.error_message
        assert "earlier program" not in result.error_message

    def test_deep_nesting_is_a_syntax_error(self, harness):
        result = harness.run("var x = " + "(" * 120 + "1" + ")" * 120 + "\nprint(x)")
        assert not result.success
        assert isinstance(result.error, ParserError)
        assert result.error.code == "E103"
        assert harness.lines == []

    def test_long_logical_chain_runs(self, harness):
        result = harness.run("var ok = " + " && ".join(["1 < 2"] * 2000) + "\nprint(ok)")
        assert result.success, result.error_message
        assert harness.lines == ["true"]

    def test_long_chain_still_checks_kinds(self, harness):
        result = harness.run("var ok = " + " && ".join(["1 < 2"] * 100) + " && 1\n")
        assert isinstance(result.error, TypeMismatchError)


class TestRegister:
    """Host-supplied commands."""

    def test_register_custom_command(self, harness):
        clicks = []
        harness.engine.register("click", lambda args, ctx: clicks.append(unwrap_values(args)))
        result = harness.run("click(10, 20);\nclick(30, 40);")
        assert result.success
        assert clicks == [[10, 20], [30, 40]]

    def test_register_overwrites_builtin(self, harness):
        seen = []
        harness.engine.register("print", lambda args, ctx: seen.append(len(args)))
        harness.run("print(1, 2, 3);")
        assert seen == [3]
        assert harness.lines == []

    def test_custom_command_error(self, harness):
        def strict(args, ctx):
            if len(args) != 1:
                raise CommandError("strict expects 1 argument")

        harness.engine.register("strict", strict)
        result = harness.run("strict(1, 2);")
        assert result.success
        assert result.warnings[0].message == "strict: strict expects 1 argument"

    def test_custom_command_crash(self, harness):
        def crash(args, ctx):
            raise RuntimeError("device unplugged")

        harness.engine.register("crash", crash)
        result = harness.run("crash();")
        assert isinstance(result.error, CommandFailedError)
        assert "device unplugged" in result.error_message

    def test_builtins_present(self, harness):
        for name in ("print", "sleep", "get_color", "color"):
            assert name in harness.engine.registry

    def test_concurrent_runs_are_serialized(self, harness):
        active = []
        overlaps = []
        lock = threading.Lock()

        def tick(args, ctx):
            with lock:
                active.append(1)
                if len(active) > 1:
                    overlaps.append(True)
            harness.slept.append(0)
            with lock:
                active.pop()

        harness.engine.register("tick", tick)
        threads = [
            threading.Thread(target=harness.run, args=("loop (50) { tick(); }",))
            for _ in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert overlaps == []
        assert len(harness.slept) == 200


class TestConfig:
    """Engine behaviour driven by EngineConfig."""

    def test_lenient_lexer(self):
        harness = Harness(EngineConfig(strict_lexer=False))
        result = harness.run("print(1 @ );")
        assert result.success
        assert harness.lines == ["1"]

    def test_lenient_control_flow(self):
        harness = Harness(EngineConfig(lenient_control_flow=True))
        result = harness.run('if (1) { print("no"); }\nprint("yes");')
        assert result.success
        assert harness.lines == ["yes"]

    def test_print_separator(self):
        harness = Harness(EngineConfig(print_separator="|"))
        harness.run("print(1, 2, 3);")
        assert harness.lines == ["1|2|3"]

    def test_sleep_scale(self):
        harness = Harness(EngineConfig(sleep_scale=0.0))
        harness.run("sleep(500);")
        assert harness.slept == [0.0]
