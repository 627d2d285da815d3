"""Step definitions driving a SelfTest harness."""

import time

from behave import given, then, when
from behave.runner import Context

from selftest.config import load_config
from selftest.constants import TestClass, WaitState
from selftest.harness import SelfTest


def run_guarded(context: Context, action, *args) -> None:
    """Run a harness call, recording the exit code if it terminates.

    Parameters
    ----------
    context : Context
        Behave context holding the harness
    action : callable
        Harness method to call
    *args
        Arguments for the method
    """
    try:
        context.result = action(*args)
    except SystemExit as e:
        context.exit_code = e.code


@given("a harness with default settings")
def step_default_harness(context: Context) -> None:
    context.harness = SelfTest(stream=context.output)


@given('a harness configured with "{overrides}"')
def step_configured_harness(context: Context, overrides: str) -> None:
    config = load_config([item.strip() for item in overrides.split(",")])
    context.harness = SelfTest(config, stream=context.output)


@when('I start the {test_class} group "{name}"')
def step_start_group(context: Context, test_class: str, name: str) -> None:
    run_guarded(context, context.harness.start_group, name, TestClass[test_class.upper()])


@when("I end the group")
def step_end_group(context: Context) -> None:
    run_guarded(context, context.harness.end_group)


@when('I announce the check "{title}"')
def step_announce(context: Context, title: str) -> None:
    run_guarded(context, context.harness.announce_check, title)


@when("the check succeeds")
def step_succeed(context: Context) -> None:
    run_guarded(context, context.harness.resolve_success)


@when('the check fails with "{detail}"')
def step_fail(context: Context, detail: str) -> None:
    run_guarded(context, context.harness.resolve_failure, detail)


@when("I finish the run")
def step_finish(context: Context) -> None:
    context.finish_code = context.harness.finish()


@when("the awaited event completes after {delay:d}ms")
def step_schedule_completion(context: Context, delay: int) -> None:
    context.harness.loop.timeout_add(delay, context.harness.request_loop_exit)


@when("I wait at most {timeout:d}ms")
def step_bounded_wait(context: Context, timeout: int) -> None:
    start = time.monotonic()
    context.wait_state = context.harness.bounded_wait(timeout)
    context.waited_ms = (time.monotonic() - start) * 1000.0


@when("I check the wait outcome")
def step_check_outcome(context: Context) -> None:
    run_guarded(context, context.harness.check_wait_outcome)


@then("the group is accepted")
def step_group_accepted(context: Context) -> None:
    assert context.result is True, f"Expected group to open, got {context.result}"


@then("the group is skipped")
def step_group_skipped(context: Context) -> None:
    assert context.result is False, f"Expected group to be skipped, got {context.result}"
    assert not context.harness.started


@then("the process exits with code {code:d}")
def step_exit_code(context: Context, code: int) -> None:
    assert context.exit_code == code, f"Expected exit {code}, got {context.exit_code}"


@then("the run finishes with code {code:d}")
def step_finish_code(context: Context, code: int) -> None:
    assert context.finish_code == code, f"Expected finish {code}, got {context.finish_code}"


@then("{succeeded:d} of {total:d} checks have passed")
def step_counts(context: Context, succeeded: int, total: int) -> None:
    assert context.harness.succeeded == succeeded
    assert context.harness.total == total


@then("the wait was {state}")
def step_wait_state(context: Context, state: str) -> None:
    expected = WaitState[state.upper().replace(" ", "_")]
    assert context.wait_state == expected, f"Expected {expected}, got {context.wait_state}"


@then("the wait lasted less than {limit:d}ms")
def step_wait_shorter(context: Context, limit: int) -> None:
    assert context.waited_ms < limit, f"Wait took {context.waited_ms:.1f}ms"


@then("the wait lasted at least {limit:d}ms")
def step_wait_longer(context: Context, limit: int) -> None:
    assert context.waited_ms >= limit, f"Wait took {context.waited_ms:.1f}ms"


@then("the report is")
def step_report_is(context: Context) -> None:
    expected = context.text.replace("\\t", "\t")
    actual = context.output.getvalue().rstrip("\n")
    assert actual == expected, f"Report was:\n{actual!r}"


@then('the report contains "{text}"')
def step_report_contains(context: Context, text: str) -> None:
    assert text in context.output.getvalue(), f"Report was:\n{context.output.getvalue()!r}"


@then('the diagnostics mention "{text}"')
def step_diagnostics_mention(context: Context, text: str) -> None:
    messages = [record.getMessage() for record in context.log_capture.records]
    assert any(text in message for message in messages), f"Log records: {messages}"
    assert text in context.diagnostics.getvalue()
