"""Tests for TestRunner and run_tests — whole suites through a StringIO reporter."""

from __future__ import annotations

import pytest

from minitest import (
    ExpectedPattern,
    InternalError,
    InterruptTest,
    PresentationMode,
    Registry,
    RunnerConfig,
    SuiteState,
    TestRunner,
    TestStatus,
    capture_chain,
    compare,
    render_verdict,
    run_tests,
)
from minitest.runner import collect_tests
from tests.minitest.conftest import Foreign, link


def names(outcomes):
    return [o.identity.name for o in outcomes]


@pytest.mark.unit
class TestCollectTests:
    def test_orders_by_line_not_registration(self, registry):
        def defined_first(t):
            pass

        def defined_second(t):
            pass

        registry.add(defined_second)
        registry.add(defined_first)
        ordered = collect_tests(registry.entries)
        assert [e.identity.name for e in ordered] == ["defined_first", "defined_second"]

    def test_empty_is_internal_error(self):
        with pytest.raises(InternalError, match="No tests to run."):
            collect_tests([])

    def test_duplicate_is_internal_error(self, registry):
        def same(t):
            pass

        registry.add(same)
        registry.add(same)
        with pytest.raises(InternalError, match="A duplicate test was registered"):
            collect_tests(registry.entries)

    def test_same_function_different_names_is_fine(self, registry):
        def shared(t):
            pass

        registry.add(shared, name="one")
        registry.add(shared, name="two")
        assert len(collect_tests(registry.entries)) == 2


@pytest.mark.integration
class TestRunTests:
    def test_all_pass(self, registry, reporter):
        @registry.test
        def first(t):
            t.check(lambda: True)

        @registry.test
        def second(t):
            pass

        @registry.test
        def third(t):
            t.must_raise(
                lambda: int("x"),
                ValueError("invalid literal for int() with base 10: 'x'"),
            )

        assert run_tests(registry, reporter=reporter) == 0
        assert reporter.lines[-2:] == ["", "All 3 tests passed"]

    def test_one_failure(self, registry, reporter):
        @registry.test
        def passes(t):
            pass

        @registry.test
        def fails(t):
            t.check(lambda: 2 + 2 == 5)

        assert run_tests(registry, reporter=reporter) == 1
        assert reporter.lines[-1] == "Ran 2 tests, 1 passed, 1 FAILED"
        assert any(line.startswith("    fails   at:  ") for line in reporter.lines)
        assert "        Expression:  2 + 2 == 5" in reporter.details()

    def test_runs_in_definition_order(self, registry, reporter):
        order = []

        def one(t):
            order.append("one")

        def two(t):
            order.append("two")

        registry.add(two)
        registry.add(one)
        run_tests(registry, reporter=reporter)
        assert order == ["one", "two"]

    def test_hard_check_stops_only_current_test(self, registry, reporter):
        reached = []

        @registry.test
        def stops(t):
            t.check(False)
            reached.append("stops")

        @registry.test
        def continues(t):
            reached.append("continues")

        assert run_tests(registry, reporter=reporter) == 1
        assert reached == ["continues"]

    def test_soft_failures_collect(self, registry, reporter):
        @registry.test
        def many(t):
            t.check_soft(False, expr="first")
            t.check_soft(False, expr="second")

        run_tests(registry, reporter=reporter)
        expressions = [d for d in reporter.details() if "Expression:" in d]
        assert expressions == ["        Expression:  first", "        Expression:  second"]

    def test_uncaught_error(self, registry, reporter):
        @registry.test
        def raises_chained(t):
            raise link(ValueError("while doing stuff:"), IndexError("more:"), RuntimeError("heh"))

        assert run_tests(registry, reporter=reporter) == 1
        assert reporter.details() == [
            "    Uncaught exception:",
            "        ValueError",
            "            while doing stuff:",
            "        IndexError",
            "            more:",
            "        RuntimeError",
            "            heh",
        ]

    def test_uncaught_foreign_error(self, registry, reporter):
        @registry.test
        def raises_foreign(t):
            raise Foreign()

        assert run_tests(registry, reporter=reporter) == 1
        assert reporter.details() == ["    Uncaught exception:", "        Unknown exception."]

    def test_bare_interrupt_does_not_fail(self, registry, reporter):
        @registry.test
        def stops_early(t):
            raise InterruptTest()

        assert run_tests(registry, reporter=reporter) == 0
        assert reporter.details() == []

    def test_failure_does_not_leak(self, registry, reporter):
        @registry.test
        def fails(t):
            t.check_soft(False)

        @registry.test
        def clean(t):
            assert not t.failed

        runner = TestRunner(registry, reporter=reporter)
        report = runner.run()
        assert [o.status for o in report.outcomes] == [TestStatus.FAILED, TestStatus.PASSED]
        assert names(report.failed) == ["fails"]

    def test_empty_registry(self, reporter):
        assert run_tests(Registry(), reporter=reporter) == 2
        assert reporter.lines == ["minitest: Internal error: No tests to run."]

    def test_duplicate_registration(self, registry, reporter):
        def twice(t):
            pass

        registry.add(twice)
        registry.add(twice)
        assert run_tests(registry, reporter=reporter) == 2
        assert reporter.lines[0].startswith("minitest: Internal error: A duplicate test")
        assert len(reporter.lines) == 1

    def test_chain_too_deep_aborts_run(self, registry, reporter):
        @registry.test
        def deep(t):
            raise link(*(ValueError(str(i)) for i in range(5)))

        @registry.test
        def never(t):
            pass

        config = RunnerConfig(max_chain_depth=4)
        assert run_tests(registry, config=config, reporter=reporter) == 2
        assert reporter.lines[-1] == (
            "minitest: Internal error: Error chain too deep: more than 4 nested errors."
        )
        assert not any("never" in line for line in reporter.lines)

    def test_keyboard_interrupt_stops_run(self, registry, reporter):
        @registry.test
        def interrupted(t):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            run_tests(registry, reporter=reporter)


@pytest.mark.unit
class TestRunnerState:
    def test_state_moves_forward(self, registry, reporter):
        @registry.test
        def ok(t):
            pass

        runner = TestRunner(registry, reporter=reporter)
        assert runner.state is SuiteState.NOT_STARTED
        report = runner.run()
        assert runner.state is SuiteState.COMPLETED
        assert report.exit_code == 0
        assert runner.outcomes[0].status is TestStatus.PASSED

    def test_runs_once(self, registry, reporter):
        @registry.test
        def ok(t):
            pass

        runner = TestRunner(registry, reporter=reporter)
        runner.run()
        with pytest.raises(InternalError):
            runner.run()

    def test_registry_not_modified(self, registry, reporter):
        @registry.test
        def ok(t):
            pass

        before = registry.entries
        TestRunner(registry, reporter=reporter).run()
        assert registry.entries == before

    def test_durations_recorded(self, registry, reporter):
        @registry.test
        def ok(t):
            pass

        report = TestRunner(registry, reporter=reporter).run()
        assert report.outcomes[0].duration >= 0.0


@pytest.mark.integration
class TestScenarios:
    def test_single_passing_test(self, registry, reporter):
        @registry.test
        def never_fails(t):
            pass

        assert run_tests(registry, reporter=reporter) == 0
        assert reporter.lines[-1] == "All 1 tests passed"

    def test_soft_then_hard_failure(self, registry, reporter):
        reached = []

        @registry.test
        def mixed(t):
            t.check_soft(False, expr="soft")
            reached.append("after soft")
            t.check(False, expr="hard")
            reached.append("after hard")

        assert run_tests(registry, reporter=reporter) == 1
        assert reached == ["after soft"]
        reports = [d for d in reporter.details() if d.startswith("    Assertion failed at:")]
        assert len(reports) == 2

    def test_empty_pattern_over_foreign_error(self, ctx, reporter):
        def body():
            raise Foreign()

        assert ctx.must_raise(body) is True
        assert not ctx.failed
        assert reporter.text == ""

        # The same raised value against a pattern shows what was captured.
        assert ctx.must_raise_soft(body, ValueError("x")) is False
        table = reporter.details()[3:]
        assert table[:2] == [
            "        Caught     | Expected",
            "        (unknown)  # ValueError",
        ]

    def test_missing_inner_error(self, resolver):
        actual = capture_chain(ValueError("logic"), resolver)
        pattern = ExpectedPattern.build(
            [ValueError("logic"), RuntimeError("runtime")], resolver
        )
        verdict = compare(actual, pattern)
        assert not verdict.matched
        assert (verdict.actual_count, verdict.expected_count) == (1, 2)
        rows = render_verdict(verdict)
        assert rows[-2] == "(none)       # RuntimeError"
        assert rows[-1].startswith("   .")

    def test_multiline_messages_differ_on_second_line(self, resolver):
        actual = capture_chain(ValueError("first\nsecond"), resolver)
        pattern = ExpectedPattern.build([ValueError("first\nother")], resolver)
        verdict = compare(actual, pattern)
        assert verdict.mode is PresentationMode.MESSAGE_ONLY
        assert render_verdict(verdict)[1:] == [
            "    first  |     first",
            "    second #     other",
        ]
