import logging

import pytest

from react_harness.registry import (
    ArgumentCountMismatch,
    ArgumentParseError,
    ContractViolation,
    DuplicateTool,
    InvalidTool,
    ToolRegistry,
)


def add(a: int, b: int) -> int:
    return a + b


def divide(a: float, b: float) -> float:
    return a / b


def describe(name: str, age: int, admin: bool) -> tuple[str, int, bool]:
    return name, age, admin


def nothing() -> str:
    return "   "


def shout(text) -> str:
    return text.upper()


def echo(text: str) -> str:
    return f"found {text}"


@pytest.fixture
def registry():
    reg = ToolRegistry()
    reg.add(add, "Add two integers.")
    reg.add(divide, "Divide a by b.")
    reg.add(describe, "Echo a user record.")
    return reg


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def test_descriptor_derived_at_registration(registry):
    tool = registry.get("add")
    assert tool.param_types == ("int", "int")
    assert tool.return_types == ("int",)
    assert tool.signature == "(int, int) (int)"
    assert registry.get("describe").signature == "(str, int, bool) (str, int, bool)"


def test_registration_order_is_preserved(registry):
    assert registry.names() == ["add", "divide", "describe"]
    assert [t.name for t in registry] == ["add", "divide", "describe"]
    assert len(registry) == 3
    assert "add" in registry and "missing" not in registry


def test_unannotated_parameter_is_string():
    tool = ToolRegistry().add(shout)
    assert tool.param_types == ("str",)


def test_explicit_name_overrides_derived_name():
    tool = ToolRegistry().add(lambda x: x, "identity", name="identity")
    assert tool.name == "identity"
    assert tool.return_types == ("any",)


def test_duplicate_tool_rejected(registry):
    with pytest.raises(DuplicateTool):
        registry.add(add, "again")


def test_non_callable_rejected():
    with pytest.raises(InvalidTool):
        ToolRegistry().add("not a function", "nope")


def test_class_rejected():
    with pytest.raises(InvalidTool):
        ToolRegistry().add(dict, "nope")


def test_variadic_rejected():
    def total(*numbers: int) -> int:
        return sum(numbers)

    with pytest.raises(InvalidTool, match="fixed arity"):
        ToolRegistry().add(total)


def test_non_scalar_parameter_rejected():
    def first(items: list) -> str:
        return items[0]

    with pytest.raises(InvalidTool, match="non-scalar"):
        ToolRegistry().add(first)


def test_none_return_rejected():
    def fire(a: int) -> None:
        pass

    with pytest.raises(InvalidTool, match="at least one value"):
        ToolRegistry().add(fire)


def test_frozen_registry_rejects_additions(registry):
    registry.freeze()
    assert registry.frozen
    with pytest.raises(RuntimeError):
        registry.add(shout)


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------


def test_add_with_two_arguments(registry):
    assert registry.get("add").call("3 4") == "7"


def test_argument_count_mismatch(registry):
    with pytest.raises(ArgumentCountMismatch):
        registry.get("add").call("3")
    with pytest.raises(ArgumentCountMismatch):
        registry.get("add").call("1 2 3")


def test_argument_parse_error(registry):
    with pytest.raises(ArgumentParseError, match="as int"):
        registry.get("add").call("3 four")


def test_unbalanced_quotes_are_a_parse_error(registry):
    with pytest.raises(ArgumentParseError, match="tokenize"):
        registry.get("describe").call('"Alice 28 true')


def test_quoted_string_argument_keeps_spaces(registry):
    assert registry.get("describe").call('"Alice Smith" 28 true') == "Alice Smith, 28, True"


@pytest.mark.parametrize("text", ["O'Brien", "it's", r"C:\temp", "a#b", "don't\\"])
def test_unquoted_input_splits_on_whitespace_only(text):
    reg = ToolRegistry()
    reg.add(echo)
    assert reg.get("echo").run(text) == f"found {text}"


def test_unquoted_tokens_match_plain_split(registry):
    assert registry.get("describe").call("O'Brien\u3000 7 \tt") == "O'Brien, 7, True"


def test_quoted_argument_keeps_backslashes_and_apostrophes(registry):
    assert registry.get("describe").call(r'"O\'Brien C:\temp" 1 0') == r"O\'Brien C:\temp, 1, False"


@pytest.mark.parametrize("token,expected", [("t", "True"), ("FALSE", "False"), ("1", "True"), ("0", "False")])
def test_bool_tokens(registry, token, expected):
    assert registry.get("describe").call(f"bob 30 {token}").endswith(expected)


def test_bad_bool_token(registry):
    with pytest.raises(ArgumentParseError):
        registry.get("describe").call("bob 30 yes")


def test_zero_argument_tool_accepts_empty_input():
    def ping() -> str:
        return "pong"

    assert ToolRegistry().add(ping).call("") == "pong"


def test_none_result_is_contract_violation():
    tool = ToolRegistry().add(lambda: None, name="void")
    with pytest.raises(ContractViolation, match="no value"):
        tool.call("")


def test_blank_observation_is_contract_violation():
    with pytest.raises(ContractViolation, match="empty"):
        ToolRegistry().add(nothing).call("")


# ---------------------------------------------------------------------------
# Fault containment
# ---------------------------------------------------------------------------


def test_run_never_raises_on_contract_errors(registry):
    result = registry.get("add").run("3")
    assert result.startswith("Error:")
    assert "expects 2" in result


def test_run_contains_tool_fault(registry, caplog):
    with caplog.at_level(logging.WARNING, logger="react_harness.registry"):
        result = registry.get("divide").run("1 0")
    assert result.startswith("Error:")
    assert "ZeroDivisionError" in result
    assert any("divide" in r.getMessage() for r in caplog.records)


def test_run_contains_blank_observation():
    assert ToolRegistry().add(nothing).run("").startswith("Error:")


def test_run_returns_observation_on_success(registry):
    assert registry.get("divide").run("7 2") == "3.5"


def test_success_logged_only_for_clean_runs(registry, caplog):
    with caplog.at_level(logging.INFO, logger="react_harness.registry"):
        registry.get("add").run("3")
        registry.get("divide").run("1 0")
    assert not any(r.getMessage().startswith("Executed tool") for r in caplog.records)

    caplog.clear()
    with caplog.at_level(logging.INFO, logger="react_harness.registry"):
        registry.get("add").run("3 4")
    assert [r.getMessage() for r in caplog.records] == ["Executed tool [add] with input [3 4]"]
