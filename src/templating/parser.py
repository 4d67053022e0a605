"""Recursive-descent parser building a node tree from template tokens."""

from __future__ import annotations

import re

from src.templating.exceptions import ParseError
from src.templating.lexer import Lexer, Token, TokenKind, line_of
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

_UNSUPPORTED_KEYWORDS = frozenset({"define", "template", "block"})

_LEGACY_OCTAL = re.compile(r"^[+-]?0[0-7_]+$")

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}
_HEX_ESCAPE_WIDTH = {"x": 2, "u": 4, "U": 8}


def unquote(quoted: str) -> str:
    """Decode a double- or single-quoted literal with its escapes."""
    body = quoted[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= len(body):
            raise ValueError("invalid syntax")
        esc = body[i + 1]
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
        elif esc in _HEX_ESCAPE_WIDTH:
            width = _HEX_ESCAPE_WIDTH[esc]
            digits = body[i + 2:i + 2 + width]
            if len(digits) != width:
                raise ValueError("invalid syntax")
            out.append(chr(int(digits, 16)))
            i += 2 + width
        elif esc in "01234567":
            digits = body[i + 1:i + 4]
            if len(digits) != 3:
                raise ValueError("invalid syntax")
            out.append(chr(int(digits, 8)))
            i += 4
        else:
            raise ValueError("invalid syntax")
    return "".join(out)


def parse_number(text: str) -> int | float:
    """Parse an integer or float literal; raises ValueError when malformed."""
    if _LEGACY_OCTAL.match(text):
        return int(text.replace("_", ""), 8)
    try:
        return int(text, 0)
    except ValueError:
        pass
    if text.lower().lstrip("+-").startswith("0x"):
        return float.fromhex(text.replace("_", ""))
    return float(text)


class Parser:
    """Parses one template's source into a :class:`ListNode` tree."""

    def __init__(self, source: str, name: str) -> None:
        self._src = source
        self._name = name
        self._tokens: list[Token] = []
        self._index = 0
        self._vars: list[str] = ["$"]
        self._range_depth = 0

    def parse(self) -> ListNode:
        self._tokens = Lexer(self._src, self._name).tokenize()
        root = ListNode(pos=0)
        while self._peek().kind is not TokenKind.EOF:
            node = self._text_or_action()
            if isinstance(node, _Terminator):
                raise self._error(f"unexpected {node}", node.pos)
            root.nodes.append(node)
        return root

    # ── Token stream ────────────────────────────────────────────

    def _next(self) -> Token:
        token = self._peek()
        self._index += 1
        return token

    def _backup(self) -> None:
        self._index -= 1

    def _peek(self) -> Token:
        # Reads past the end keep returning the trailing EOF token.
        return self._tokens[min(self._index, len(self._tokens) - 1)]

    def _next_non_space(self) -> Token:
        token = self._next()
        while token.kind is TokenKind.SPACE:
            token = self._next()
        return token

    def _peek_non_space(self) -> Token:
        token = self._next_non_space()
        self._backup()
        return token

    def _expect(self, kind: TokenKind, context: str) -> Token:
        token = self._next_non_space()
        if token.kind is not kind:
            raise self._unexpected(token, context)
        return token

    # ── Errors ──────────────────────────────────────────────────

    def _error(self, message: str, pos: int) -> ParseError:
        return ParseError(message, name=self._name, line=line_of(self._src, pos))

    def _unexpected(self, token: Token, context: str) -> ParseError:
        if token.kind is TokenKind.EOF:
            return self._error(f"unclosed action in {context}", token.pos)
        return self._error(f"unexpected {token} in {context}", token.pos)

    # ── Lists and actions ───────────────────────────────────────

    def _item_list(self) -> tuple[ListNode, _Terminator]:
        """Parse nodes up to the ``{{end}}`` or ``{{else}}`` that closes them."""
        items = ListNode(pos=self._peek_non_space().pos)
        while self._peek().kind is not TokenKind.EOF:
            node = self._text_or_action()
            if isinstance(node, _Terminator):
                return items, node
            items.nodes.append(node)
        raise self._error("unexpected EOF", self._peek().pos)

    def _text_or_action(self) -> Node:
        token = self._next_non_space()
        if token.kind is TokenKind.TEXT:
            return TextNode(pos=token.pos, text=token.value)
        if token.kind is TokenKind.LEFT_DELIM:
            return self._action(token)
        raise self._unexpected(token, "input")

    def _action(self, delim: Token) -> Node:
        token = self._next_non_space()
        if token.kind is TokenKind.KEYWORD:
            keyword = token.value
            if keyword in _UNSUPPORTED_KEYWORDS:
                raise self._error(f"{{{{{keyword}}}}} is not supported", token.pos)
            if keyword == "if":
                return self._control(IfNode, "if", token)
            if keyword == "range":
                return self._control(RangeNode, "range", token)
            if keyword == "with":
                return self._control(WithNode, "with", token)
            if keyword == "end":
                self._expect(TokenKind.RIGHT_DELIM, "end")
                return _Terminator(pos=token.pos, keyword="end")
            if keyword == "else":
                return self._else(token)
            if keyword in ("break", "continue"):
                return self._loop_control(keyword, token)
        self._backup()
        line = line_of(self._src, delim.pos)
        return ActionNode(pos=delim.pos, line=line, pipe=self._pipeline("command", TokenKind.RIGHT_DELIM))

    def _loop_control(self, keyword: str, token: Token) -> Node:
        closing = self._next_non_space()
        if closing.kind is not TokenKind.RIGHT_DELIM:
            raise self._error(f"unexpected {closing} in {{{{{keyword}}}}}", closing.pos)
        if not self._range_depth:
            raise self._error(f"{{{{{keyword}}}}} outside {{{{range}}}}", token.pos)
        line = line_of(self._src, token.pos)
        if keyword == "break":
            return BreakNode(pos=token.pos, line=line)
        return ContinueNode(pos=token.pos, line=line)

    def _else(self, token: Token) -> _Terminator:
        following = self._peek_non_space()
        if following.kind is TokenKind.KEYWORD and following.value in ("if", "with"):
            # "else if" / "else with": the chained keyword is consumed by the
            # enclosing control, which parses it as a nested block.
            return _Terminator(pos=token.pos, keyword="else", chained=following.value)
        self._expect(TokenKind.RIGHT_DELIM, "else")
        return _Terminator(pos=token.pos, keyword="else")

    def _control(self, node_cls: type, context: str, token: Token) -> Node:
        saved_vars = len(self._vars)
        try:
            pipe = self._pipeline(context, TokenKind.RIGHT_DELIM)
            if context == "range":
                self._range_depth += 1
            try:
                body, terminator = self._item_list()
            finally:
                if context == "range":
                    self._range_depth -= 1

            else_body: ListNode | None = None
            if terminator.keyword == "else":
                if terminator.chained and terminator.chained == context:
                    chained = self._next_non_space()
                    else_body = ListNode(pos=chained.pos)
                    else_body.nodes.append(self._control(node_cls, context, chained))
                elif terminator.chained:
                    raise self._error(
                        f"unexpected <{terminator.chained}> in else", terminator.pos
                    )
                else:
                    else_body, terminator = self._item_list()
                    if terminator.keyword != "end":
                        raise self._error(f"expected end; found {terminator}", terminator.pos)
            line = line_of(self._src, token.pos)
            return node_cls(pos=token.pos, line=line, pipe=pipe, body=body, else_body=else_body)
        finally:
            del self._vars[saved_vars:]

    # ── Pipelines ───────────────────────────────────────────────

    def _pipeline(self, context: str, end: TokenKind) -> PipeNode:
        start = self._peek_non_space()
        pipe = PipeNode(pos=start.pos, line=line_of(self._src, start.pos))
        self._declarations(pipe, context)

        while True:
            token = self._next_non_space()
            if token.kind is end:
                break
            if token.kind in (
                TokenKind.BOOL,
                TokenKind.CHAR,
                TokenKind.DOT,
                TokenKind.FIELD,
                TokenKind.IDENTIFIER,
                TokenKind.NUMBER,
                TokenKind.NIL,
                TokenKind.RAW_STRING,
                TokenKind.STRING,
                TokenKind.VARIABLE,
                TokenKind.LEFT_PAREN,
            ):
                self._backup()
                pipe.cmds.append(self._command(end))
            else:
                raise self._unexpected(token, context)

        if not pipe.cmds:
            raise self._error(f"missing value for {context}", start.pos)
        for stage, cmd in enumerate(pipe.cmds[1:], start=1):
            first = cmd.args[0]
            if isinstance(first, (BoolNode, DotNode, NilNode, NumberNode, StringNode)):
                raise self._error(f"non executable command in pipeline stage {stage + 1}", cmd.pos)
        return pipe

    def _declarations(self, pipe: PipeNode, context: str) -> None:
        start = self._index
        token = self._next_non_space()
        if token.kind is not TokenKind.VARIABLE:
            self._index = start
            return
        after = self._next_non_space()
        if after.kind in (TokenKind.DECLARE, TokenKind.ASSIGN):
            pipe.is_assign = after.kind is TokenKind.ASSIGN
            variable = VariableNode(pos=token.pos, idents=[token.value])
            if pipe.is_assign:
                self._use_var(variable)
            else:
                self._vars.append(token.value)
            pipe.decl.append(variable)
            return
        if after.kind is TokenKind.COMMA and context == "range":
            second = self._next_non_space()
            if second.kind is not TokenKind.VARIABLE:
                raise self._error(f"range can only initialize variables, found {second}", second.pos)
            declare = self._next_non_space()
            if declare.kind not in (TokenKind.DECLARE, TokenKind.ASSIGN):
                raise self._unexpected(declare, "range")
            pipe.is_assign = declare.kind is TokenKind.ASSIGN
            for var in (token, second):
                variable = VariableNode(pos=var.pos, idents=[var.value])
                if pipe.is_assign:
                    self._use_var(variable)
                else:
                    self._vars.append(var.value)
                pipe.decl.append(variable)
            return
        self._index = start

    def _command(self, end: TokenKind) -> CommandNode:
        cmd = CommandNode(pos=self._peek_non_space().pos)
        while True:
            self._peek_non_space()
            operand = self._operand()
            if operand is not None:
                cmd.args.append(operand)
            token = self._next()
            if token.kind is TokenKind.SPACE:
                continue
            if token.kind in (TokenKind.RIGHT_DELIM, TokenKind.RIGHT_PAREN):
                if token.kind is not end:
                    raise self._unexpected(token, "operand")
                self._backup()
            elif token.kind is TokenKind.PIPE:
                if self._peek_non_space().kind is end:
                    raise self._error("missing command after |", token.pos)
            else:
                raise self._unexpected(token, "operand")
            break
        if not cmd.args:
            raise self._error("empty command", cmd.pos)
        return cmd

    def _operand(self) -> Node | None:
        node = self._term()
        if node is None:
            return None
        if self._peek().kind is not TokenKind.FIELD:
            return node

        chain: list[str] = []
        while self._peek().kind is TokenKind.FIELD:
            chain.append(self._next().value[1:])
        if isinstance(node, FieldNode):
            return FieldNode(pos=node.pos, idents=node.idents + chain)
        if isinstance(node, VariableNode):
            return VariableNode(pos=node.pos, idents=node.idents + chain)
        if isinstance(node, (BoolNode, StringNode, NumberNode, NilNode, DotNode)):
            raise self._error(f"unexpected . after term {str(node)!r}", node.pos)
        return ChainNode(pos=node.pos, node=node, fields=chain)

    def _term(self) -> Node | None:
        token = self._next_non_space()
        kind = token.kind
        if kind is TokenKind.IDENTIFIER:
            return IdentifierNode(pos=token.pos, name=token.value)
        if kind is TokenKind.DOT:
            return DotNode(pos=token.pos)
        if kind is TokenKind.NIL:
            return NilNode(pos=token.pos)
        if kind is TokenKind.VARIABLE:
            variable = VariableNode(pos=token.pos, idents=[token.value])
            self._use_var(variable)
            return variable
        if kind is TokenKind.FIELD:
            return FieldNode(pos=token.pos, idents=[token.value[1:]])
        if kind is TokenKind.BOOL:
            return BoolNode(pos=token.pos, value=token.value == "true")
        if kind in (TokenKind.NUMBER, TokenKind.CHAR):
            return self._number(token)
        if kind is TokenKind.LEFT_PAREN:
            return self._pipeline("parenthesized pipeline", TokenKind.RIGHT_PAREN)
        if kind in (TokenKind.STRING, TokenKind.RAW_STRING):
            return self._string(token)
        self._backup()
        return None

    def _number(self, token: Token) -> NumberNode:
        try:
            if token.kind is TokenKind.CHAR:
                decoded = unquote(token.value)
                if len(decoded) != 1:
                    raise ValueError(token.value)
                value: int | float = ord(decoded)
            else:
                value = parse_number(token.value)
        except ValueError:
            raise self._error(f"illegal number syntax: {token.value!r}", token.pos) from None
        return NumberNode(pos=token.pos, value=value, text=token.value)

    def _string(self, token: Token) -> StringNode:
        if token.kind is TokenKind.RAW_STRING:
            return StringNode(pos=token.pos, value=token.value[1:-1].replace("\r", ""), quoted=token.value)
        try:
            value = unquote(token.value)
        except ValueError:
            raise self._error(f"invalid syntax in string {token.value}", token.pos) from None
        return StringNode(pos=token.pos, value=value, quoted=token.value)

    def _use_var(self, variable: VariableNode) -> None:
        name = variable.idents[0]
        if name not in self._vars:
            raise self._error(f'undefined variable "{name}"', variable.pos)


class _Terminator(Node):
    """Marks an ``{{end}}`` or ``{{else}}`` closing the current list."""

    def __init__(self, pos: int, keyword: str, chained: str = "") -> None:
        super().__init__(pos=pos)
        self.keyword = keyword
        self.chained = chained

    def __str__(self) -> str:
        return f"{{{{{self.keyword}}}}}"


def parse(source: str, name: str) -> ListNode:
    """Parse *source* into a node tree; raises :class:`ParseError`."""
    return Parser(source, name).parse()
