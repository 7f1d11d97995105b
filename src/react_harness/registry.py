# registry.py
# Tool registry and invoker.
#
# Each tool is described once, at registration time, by a closed scalar type
# descriptor (int / float / bool / str). Invocation parses the model's raw
# "Action Input" text against that descriptor, calls the function and turns
# the result into observation text. Tool.run() never raises: every failure
# becomes an "Error: ..." observation the model can read and correct.

import inspect
import logging
import shlex
import typing
from collections.abc import Callable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ToolError(Exception):
    """Base class for every tool registration or invocation failure."""


class InvalidTool(ToolError):
    """Raised when a value cannot be registered as a fixed-arity scalar tool."""


class DuplicateTool(ToolError):
    """Raised when a derived tool name is already registered."""


class ArgumentCountMismatch(ToolError):
    """Raised when the number of input tokens differs from the tool's arity."""


class ArgumentParseError(ToolError):
    """Raised when input cannot be tokenized or a token fails type conversion."""


class ContractViolation(ToolError):
    """Raised when a tool returns nothing or an empty observation."""


# ---------------------------------------------------------------------------
# Scalar conversion
# ---------------------------------------------------------------------------

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _parse_bool(token: str) -> bool:
    if token in _TRUE:
        return True
    if token in _FALSE:
        return False
    raise ValueError(f"invalid boolean {token!r}")


_PARSERS: dict[str, Callable[[str], Any]] = {
    "int": int,
    "float": float,
    "bool": _parse_bool,
    "str": str,
}

_SCALARS: dict[Any, str] = {int: "int", float: "float", bool: "bool", str: "str"}


def _tokenize(args_text: str) -> list[str]:
    """Split on whitespace; double quotes group one argument and nothing escapes."""
    if '"' not in args_text:
        return args_text.split()
    lex = shlex.shlex(args_text, posix=True)
    lex.whitespace_split = True
    lex.quotes = '"'
    lex.escape = ""
    lex.commenters = ""
    return list(lex)


def _type_name(annotation: Any) -> str:
    if annotation in _SCALARS:
        return _SCALARS[annotation]
    return getattr(annotation, "__name__", None) or str(annotation)


def _describe(func: Callable[..., Any], name: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Build the (param_types, return_types) descriptor for `func`."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as exc:
        raise InvalidTool(f"cannot read signature of {name!r}: {exc}") from exc

    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        # Unresolvable forward references; fall back to raw annotations.
        hints = {}

    params: list[str] = []
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise InvalidTool(f"tool {name!r} must have a fixed arity, got {param}")
        if param.kind is param.KEYWORD_ONLY:
            if param.default is param.empty:
                raise InvalidTool(f"tool {name!r} has required keyword-only parameter {param.name!r}")
            continue
        annotation = hints.get(param.name, param.annotation)
        if annotation is param.empty:
            params.append("str")
        elif annotation in _SCALARS:
            params.append(_SCALARS[annotation])
        else:
            raise InvalidTool(
                f"tool {name!r} parameter {param.name!r} has non-scalar type {_type_name(annotation)}"
            )

    ret = hints.get("return", signature.return_annotation)
    if ret is None or ret is type(None):
        raise InvalidTool(f"tool {name!r} must return at least one value")
    if ret is signature.empty:
        returns: tuple[str, ...] = ("any",)
    elif typing.get_origin(ret) is tuple:
        args = [a for a in typing.get_args(ret) if a is not Ellipsis]
        if not args:
            raise InvalidTool(f"tool {name!r} must return at least one value")
        returns = tuple(_type_name(a) for a in args)
    else:
        returns = (_type_name(ret),)

    return tuple(params), returns


# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------


class Tool(BaseModel):
    """A registered callable plus its explicit type descriptor."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str = ""
    param_types: tuple[str, ...]
    return_types: tuple[str, ...]
    func: Callable[..., Any]

    @property
    def signature(self) -> str:
        """Render as `(int, int) (int)`."""
        return f"({', '.join(self.param_types)}) ({', '.join(self.return_types)})"

    def parse_args(self, args_text: str) -> list[Any]:
        try:
            tokens = _tokenize(args_text)
        except ValueError as exc:
            raise ArgumentParseError(f"cannot tokenize input {args_text!r}: {exc}") from exc

        if len(tokens) != len(self.param_types):
            raise ArgumentCountMismatch(
                f"{self.name} expects {len(self.param_types)} argument(s), got {len(tokens)}"
            )

        values: list[Any] = []
        for index, (token, type_name) in enumerate(zip(tokens, self.param_types)):
            try:
                values.append(_PARSERS[type_name](token))
            except ValueError as exc:
                raise ArgumentParseError(
                    f"{self.name} argument {index + 1}: cannot parse {token!r} as {type_name}"
                ) from exc
        return values

    def call(self, args_text: str) -> str:
        """
        Parse, invoke and serialize. Raises ToolError subclasses on contract
        failures; the tool's own exceptions propagate unchanged.
        """
        values = self.parse_args(args_text)
        result = self.func(*values)

        if result is None:
            raise ContractViolation(f"{self.name} returned no value")
        results = result if isinstance(result, tuple) else (result,)
        if not results:
            raise ContractViolation(f"{self.name} returned no value")

        observation = ", ".join(str(r) for r in results)
        if not observation.strip():
            raise ContractViolation(f"{self.name} returned an empty observation")
        return observation

    def run(self, args_text: str) -> str:
        """Like call(), but every failure is rewritten as observation text."""
        try:
            observation = self.call(args_text)
        except ToolError as exc:
            logger.info("Tool [%s] rejected input [%s]: %s", self.name, args_text, exc)
            return f"Error: {exc}"
        except Exception as exc:
            logger.warning("Tool [%s] raised on input [%s]", self.name, args_text, exc_info=True)
            return f"Error: {self.name} failed: {type(exc).__name__}: {exc}"
        logger.info("Executed tool [%s] with input [%s]", self.name, args_text)
        return observation


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ToolRegistry:
    """
    Insertion-ordered mapping of tool name → Tool.

    Built once, then frozen. A frozen registry is read-only and may be shared
    between concurrent runs without locking.
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._frozen = False

    def add(self, func: Callable[..., Any], description: str = "", name: str | None = None) -> Tool:
        if self._frozen:
            raise RuntimeError("tool registry is frozen")
        if not callable(func) or inspect.isclass(func):
            raise InvalidTool(f"{func!r} is not a function")

        name = name or getattr(func, "__name__", None)
        if not name:
            raise InvalidTool(f"cannot derive a tool name from {func!r}; pass name=")
        if name in self._tools:
            raise DuplicateTool(f"tool {name!r} is already registered")

        params, returns = _describe(func, name)
        tool = Tool(
            name=name,
            description=description,
            param_types=params,
            return_types=returns,
            func=func,
        )
        self._tools[name] = tool
        return tool

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
