"""Tree-walking evaluator for parsed templates."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from src.templating.builtin import BUILTINS, LAZY_BUILTINS
from src.templating.exceptions import ExecutionError, TemplateError
from src.templating.functions import FUNCTIONS, FunctionSpec
from src.templating.lexer import column_of, line_of
from src.templating.nodes import (
    ActionNode,
    BoolNode,
    BreakNode,
    ChainNode,
    CommandNode,
    ContinueNode,
    DotNode,
    FieldNode,
    IdentifierNode,
    IfNode,
    ListNode,
    NilNode,
    Node,
    NumberNode,
    PipeNode,
    RangeNode,
    StringNode,
    TextNode,
    VariableNode,
    WithNode,
)
from src.templating.values import NO_VALUE, as_sequence, format_value, is_int, truth, type_name
from src.viewmodel.base import template_members

# Placeholder for "no value piped in from the previous command".
_MISSING = object()

_CONTEXT_LIMIT = 20


class _Break(Exception):
    pass


class _Continue(Exception):
    pass


def _arity(func: Callable[..., Any]) -> tuple[int, bool]:
    """Required positional parameters and whether more are accepted."""
    params = inspect.signature(func).parameters.values()
    required = sum(
        1
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )
    variadic = any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params)
    return required, variadic


_BUILTIN_ARITY: dict[str, tuple[int, bool]] = {name: _arity(func) for name, func in BUILTINS.items()}


class Executor:
    """Evaluates one parsed template against a data context.

    An executor holds per-call state (the variable stack and the output
    buffer) and is used for a single :meth:`execute` call.
    """

    def __init__(
        self,
        tree: ListNode,
        source: str,
        name: str,
        functions: Mapping[str, FunctionSpec] = FUNCTIONS,
    ) -> None:
        self._tree = tree
        self._src = source
        self._name = name
        self._functions = functions
        self._vars: list[tuple[str, Any]] = []
        self._out: list[str] = []
        self._node: Node | None = None

    def execute(self, data: Any) -> str:
        self._vars = [("$", data)]
        self._out = []
        self._walk(data, self._tree)
        return "".join(self._out)

    # ── Errors ──────────────────────────────────────────────────

    def _error(self, message: str) -> ExecutionError:
        node = self._node
        if node is None:
            return ExecutionError(message, name=self._name)
        context = str(node)
        if len(context) > _CONTEXT_LIMIT:
            context = context[:_CONTEXT_LIMIT] + "..."
        return ExecutionError(
            message,
            name=self._name,
            line=line_of(self._src, node.pos),
            column=column_of(self._src, node.pos),
            context=context,
        )

    def _at(self, node: Node) -> None:
        self._node = node

    # ── Variables ───────────────────────────────────────────────

    def _mark(self) -> int:
        return len(self._vars)

    def _pop(self, mark: int) -> None:
        del self._vars[mark:]

    def _push(self, name: str, value: Any) -> None:
        self._vars.append((name, value))

    def _set_var(self, name: str, value: Any) -> None:
        for i in range(len(self._vars) - 1, -1, -1):
            if self._vars[i][0] == name:
                self._vars[i] = (name, value)
                return
        raise self._error(f"undefined variable: {name}")

    def _set_top_var(self, depth: int, value: Any) -> None:
        name = self._vars[-depth][0]
        self._vars[-depth] = (name, value)

    def _var_value(self, name: str) -> Any:
        for var_name, value in reversed(self._vars):
            if var_name == name:
                return value
        raise self._error(f"undefined variable: {name}")

    # ── Walking ─────────────────────────────────────────────────

    def _walk(self, dot: Any, node: Node) -> None:
        self._at(node)
        if isinstance(node, ActionNode):
            value = self._eval_pipeline(dot, node.pipe)
            if not node.pipe.decl:
                self._out.append(format_value(value))
        elif isinstance(node, TextNode):
            self._out.append(node.text)
        elif isinstance(node, ListNode):
            for child in node.nodes:
                self._walk(dot, child)
        elif isinstance(node, (IfNode, WithNode)):
            self._walk_if_or_with(dot, node)
        elif isinstance(node, RangeNode):
            self._walk_range(dot, node)
        elif isinstance(node, BreakNode):
            raise _Break
        elif isinstance(node, ContinueNode):
            raise _Continue
        else:
            raise self._error(f"unknown node: {node}")

    def _walk_if_or_with(self, dot: Any, node: IfNode | WithNode) -> None:
        mark = self._mark()
        try:
            value = self._eval_pipeline(dot, node.pipe)
            if truth(value):
                self._walk(value if isinstance(node, WithNode) else dot, node.body)
            elif node.else_body is not None:
                self._walk(dot, node.else_body)
        finally:
            self._pop(mark)

    def _walk_range(self, dot: Any, node: RangeNode) -> None:
        self._at(node)
        mark = self._mark()
        try:
            value = self._eval_pipeline(dot, node.pipe)
            ran = False
            for index, elem in self._iterate(value, node):
                ran = True
                if not self._range_iteration(node, index, elem):
                    break
            if not ran and node.else_body is not None:
                self._walk(dot, node.else_body)
        finally:
            self._pop(mark)

    def _iterate(self, value: Any, node: RangeNode) -> list[tuple[Any, Any]]:
        if value is None or value is NO_VALUE:
            return []
        seq = as_sequence(value)
        if seq is not None:
            return list(enumerate(seq))
        if isinstance(value, Mapping):
            return [(key, value[key]) for key in sorted(value)]
        if is_int(value):
            if len(node.pipe.decl) > 1:
                raise self._error(f"can't use {value} to iterate over more than one variable")
            return [(i, i) for i in range(value)]
        raise self._error(f"range can't iterate over {format_value(value)}")

    def _range_iteration(self, node: RangeNode, index: Any, elem: Any) -> bool:
        """Run one loop body. Returns False when the loop should stop."""
        decl = node.pipe.decl
        if decl:
            if node.pipe.is_assign:
                self._set_var(decl[0].idents[0], index if len(decl) > 1 else elem)
            else:
                self._set_top_var(1, elem)
        if len(decl) > 1:
            if node.pipe.is_assign:
                self._set_var(decl[1].idents[0], elem)
            else:
                self._set_top_var(2, index)

        mark = self._mark()
        try:
            self._walk(elem, node.body)
        except _Break:
            return False
        except _Continue:
            pass
        finally:
            self._pop(mark)
        return True

    # ── Pipelines and commands ──────────────────────────────────

    def _eval_pipeline(self, dot: Any, pipe: PipeNode) -> Any:
        self._at(pipe)
        value: Any = _MISSING
        for cmd in pipe.cmds:
            value = self._eval_command(dot, cmd, value)
        for variable in pipe.decl:
            if pipe.is_assign:
                self._set_var(variable.idents[0], value)
            else:
                self._push(variable.idents[0], value)
        return value

    def _eval_command(self, dot: Any, cmd: CommandNode, final: Any) -> Any:
        first = cmd.args[0]
        self._at(first)
        if isinstance(first, FieldNode):
            return self._eval_field_chain(dot, dot, first, first.idents, cmd.args, final)
        if isinstance(first, ChainNode):
            return self._eval_chain(dot, first, cmd.args, final)
        if isinstance(first, IdentifierNode):
            return self._eval_function(dot, first, cmd.args, final)
        if isinstance(first, VariableNode):
            return self._eval_variable(dot, first, cmd.args, final)
        if isinstance(first, PipeNode):
            self._not_a_function(cmd.args, final)
            return self._eval_pipeline(dot, first)

        self._not_a_function(cmd.args, final)
        if isinstance(first, NilNode):
            raise self._error("nil is not a command")
        return self._eval_literal(dot, first)

    def _not_a_function(self, args: list[Node], final: Any) -> None:
        if len(args) > 1 or final is not _MISSING:
            raise self._error(f"can't give argument to non-function {args[0]}")

    def _eval_literal(self, dot: Any, node: Node) -> Any:
        if isinstance(node, DotNode):
            return dot
        if isinstance(node, BoolNode):
            return node.value
        if isinstance(node, NumberNode):
            return node.value
        if isinstance(node, StringNode):
            return node.value
        if isinstance(node, NilNode):
            return None
        raise self._error(f"can't handle {node} as a value")

    def _eval_arg(self, dot: Any, node: Node) -> Any:
        self._at(node)
        if isinstance(node, FieldNode):
            return self._eval_field_chain(dot, dot, node, node.idents, [node], _MISSING)
        if isinstance(node, VariableNode):
            return self._eval_variable(dot, node, [node], _MISSING)
        if isinstance(node, PipeNode):
            return self._eval_pipeline(dot, node)
        if isinstance(node, IdentifierNode):
            return self._eval_function(dot, node, [node], _MISSING)
        if isinstance(node, ChainNode):
            return self._eval_chain(dot, node, [node], _MISSING)
        return self._eval_literal(dot, node)

    def _eval_chain(self, dot: Any, chain: ChainNode, args: list[Node], final: Any) -> Any:
        if isinstance(chain.node, NilNode):
            raise self._error(f"indirection through explicit nil in {chain}")
        receiver = self._eval_arg(dot, chain.node)
        self._at(chain)
        return self._eval_field_chain(dot, receiver, chain, chain.fields, args, final)

    def _eval_variable(self, dot: Any, variable: VariableNode, args: list[Node], final: Any) -> Any:
        self._at(variable)
        value = self._var_value(variable.idents[0])
        if len(variable.idents) == 1:
            self._not_a_function(args, final)
            return value
        return self._eval_field_chain(dot, value, variable, variable.idents[1:], args, final)

    def _eval_field_chain(
        self,
        dot: Any,
        receiver: Any,
        node: Node,
        idents: list[str],
        args: list[Node],
        final: Any,
    ) -> Any:
        for ident in idents[:-1]:
            receiver = self._eval_field(dot, ident, node, [node], _MISSING, receiver)
        return self._eval_field(dot, idents[-1], node, args, final, receiver)

    # ── Member resolution ───────────────────────────────────────

    def _eval_field(
        self,
        dot: Any,
        name: str,
        node: Node,
        args: list[Node],
        final: Any,
        receiver: Any,
    ) -> Any:
        if receiver is NO_VALUE:
            return NO_VALUE
        if receiver is None:
            raise self._error(f"nil pointer evaluating {name}")

        has_args = len(args) > 1 or final is not _MISSING
        if isinstance(receiver, BaseModel):
            members = template_members(type(receiver))
            attr = members.fields.get(name)
            if attr is not None:
                if has_args:
                    raise self._error(f"{name} has arguments but cannot be invoked as function")
                return getattr(receiver, attr)
            acc = members.accessors.get(name)
            if acc is not None:
                method = getattr(receiver, acc.attr)
                return self._eval_call(dot, method, (acc.arity, acc.variadic), node, name, args, final)
        elif isinstance(receiver, Mapping):
            if has_args:
                raise self._error(f"{name} is not a method but has arguments")
            return receiver.get(name, NO_VALUE)

        raise self._error(f"can't evaluate field {name} in type {type_name(receiver)}")

    def _eval_call(
        self,
        dot: Any,
        func: Callable[..., Any],
        arity: tuple[int, bool],
        node: Node,
        name: str,
        args: list[Node],
        final: Any,
    ) -> Any:
        call_args = self._eval_call_args(dot, arity, name, args, final)
        self._at(node)
        return self._invoke(func, name, call_args)

    def _eval_call_args(
        self,
        dot: Any,
        arity: tuple[int, bool],
        name: str,
        args: list[Node],
        final: Any,
    ) -> list[Any]:
        required, variadic = arity
        given = len(args) - 1 + (0 if final is _MISSING else 1)
        if variadic and given < required:
            raise self._error(f"wrong number of args for {name}: want at least {required} got {given}")
        if not variadic and given != required:
            raise self._error(f"wrong number of args for {name}: want {required} got {given}")

        values = [self._eval_arg(dot, arg) for arg in args[1:]]
        if final is not _MISSING:
            values.append(final)
        return values

    def _invoke(self, func: Callable[..., Any], name: str, args: list[Any]) -> Any:
        args = [None if arg is NO_VALUE else arg for arg in args]
        try:
            return func(*args)
        except TemplateError:
            raise
        except Exception as exc:
            raise self._error(f"error calling {name}: {exc}") from exc

    def _eval_function(self, dot: Any, node: IdentifierNode, args: list[Node], final: Any) -> Any:
        name = node.name
        if name in LAZY_BUILTINS:
            return self._eval_and_or(dot, name, args, final)
        if name in BUILTINS:
            return self._eval_call(dot, BUILTINS[name], _BUILTIN_ARITY[name], node, name, args, final)

        spec = self._functions.get(name)
        if spec is None:
            raise self._error(f'function "{name}" not defined')
        call_args = self._eval_call_args(dot, (len(spec.params), False), name, args, final)
        self._at(node)
        try:
            spec.check_args(tuple(None if a is NO_VALUE else a for a in call_args))
        except TypeError as exc:
            raise self._error(str(exc)) from exc
        return self._invoke(spec.func, name, call_args)

    def _eval_and_or(self, dot: Any, name: str, args: list[Node], final: Any) -> Any:
        operands = args[1:]
        if not operands and final is _MISSING:
            raise self._error(f"wrong number of args for {name}: want at least 1 got 0")
        value: Any = None
        for arg in operands:
            value = self._eval_arg(dot, arg)
            if truth(value) == (name == "or"):
                return value
        if final is not _MISSING:
            value = final
        return value
