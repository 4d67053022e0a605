"""Tokenizer for template source text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from src.templating.exceptions import ParseError

LEFT_DELIM = "{{"
RIGHT_DELIM = "}}"
_TRIM_MARKER = "-"
_COMMENT_OPEN = "/*"
_COMMENT_CLOSE = "*/"
_SPACE = " \t\r\n"


class TokenKind(Enum):
    TEXT = auto()
    LEFT_DELIM = auto()
    RIGHT_DELIM = auto()
    SPACE = auto()
    FIELD = auto()  # .Name
    DOT = auto()  # .
    VARIABLE = auto()  # $ or $name
    IDENTIFIER = auto()  # function name
    KEYWORD = auto()  # if, else, end, range, with, ...
    STRING = auto()
    RAW_STRING = auto()
    CHAR = auto()
    NUMBER = auto()
    BOOL = auto()
    NIL = auto()
    PIPE = auto()
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    DECLARE = auto()  # :=
    ASSIGN = auto()  # =
    COMMA = auto()
    EOF = auto()


KEYWORDS = frozenset(
    {"if", "else", "end", "range", "with", "break", "continue", "define", "template", "block"}
)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    pos: int

    def __str__(self) -> str:
        if self.kind is TokenKind.EOF:
            return "EOF"
        if self.kind is TokenKind.KEYWORD:
            return f"<{self.value}>"
        return repr(self.value)


def line_of(source: str, pos: int) -> int:
    """1-based line number of offset *pos* in *source*."""
    return source.count("\n", 0, pos) + 1


def column_of(source: str, pos: int) -> int:
    """1-based column of offset *pos* within its line."""
    return pos - source.rfind("\n", 0, pos)


def _is_alnum(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


class Lexer:
    """Splits template source into text and action tokens."""

    def __init__(self, source: str, name: str) -> None:
        self._src = source
        self._name = name
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        src = self._src
        trim_next_text = False
        while self._pos < len(src):
            start = src.find(LEFT_DELIM, self._pos)
            end = len(src) if start == -1 else start
            text_pos = self._pos
            text = src[text_pos:end]
            if trim_next_text:
                stripped = text.lstrip(_SPACE)
                text_pos += len(text) - len(stripped)
                text = stripped
            if start != -1 and self._has_left_trim(start):
                text = text.rstrip(_SPACE)
            if text:
                self._emit(TokenKind.TEXT, text, text_pos)
            if start == -1:
                self._pos = len(src)
                break
            trim_next_text = self._lex_action(start)
        self._emit(TokenKind.EOF, "", len(src))
        return self._tokens

    # ── Helpers ─────────────────────────────────────────────────

    def _emit(self, kind: TokenKind, value: str, pos: int) -> None:
        self._tokens.append(Token(kind, value, pos))

    def _error(self, message: str, pos: int) -> ParseError:
        return ParseError(message, name=self._name, line=line_of(self._src, pos))

    def _has_left_trim(self, delim_pos: int) -> bool:
        marker = delim_pos + len(LEFT_DELIM)
        return (
            self._src.startswith(_TRIM_MARKER, marker)
            and marker + 1 < len(self._src)
            and self._src[marker + 1] in _SPACE
        )

    def _right_trim_at(self, pos: int) -> bool:
        """Whitespace at *pos* followed by ``-}}``."""
        src = self._src
        if pos >= len(src) or src[pos] not in _SPACE:
            return False
        rest = src[pos:].lstrip(_SPACE)
        return rest.startswith(_TRIM_MARKER + RIGHT_DELIM)

    # ── Actions ─────────────────────────────────────────────────

    def _lex_action(self, delim_pos: int) -> bool:
        """Lex one ``{{ ... }}`` action. Returns True if it trims the next text."""
        src = self._src
        pos = delim_pos + len(LEFT_DELIM)
        if self._has_left_trim(delim_pos):
            pos += len(_TRIM_MARKER)

        comment_start = pos
        if src.startswith(" ", comment_start) and self._has_left_trim(delim_pos):
            comment_start = pos + 1
        if src.startswith(_COMMENT_OPEN, comment_start):
            return self._lex_comment(delim_pos, comment_start)

        self._emit(TokenKind.LEFT_DELIM, LEFT_DELIM, delim_pos)
        while True:
            if pos >= len(src):
                raise self._error("unclosed action", delim_pos)
            if src.startswith(RIGHT_DELIM, pos):
                self._emit(TokenKind.RIGHT_DELIM, RIGHT_DELIM, pos)
                self._pos = pos + len(RIGHT_DELIM)
                return False
            ch = src[pos]
            if ch in _SPACE:
                if self._right_trim_at(pos):
                    close = src.index(_TRIM_MARKER + RIGHT_DELIM, pos)
                    self._emit(TokenKind.RIGHT_DELIM, RIGHT_DELIM, close)
                    self._pos = close + len(_TRIM_MARKER) + len(RIGHT_DELIM)
                    return True
                end = pos
                while end < len(src) and src[end] in _SPACE:
                    end += 1
                self._emit(TokenKind.SPACE, src[pos:end], pos)
                pos = end
            elif ch == "|":
                self._emit(TokenKind.PIPE, ch, pos)
                pos += 1
            elif ch == "(":
                self._emit(TokenKind.LEFT_PAREN, ch, pos)
                pos += 1
            elif ch == ")":
                self._emit(TokenKind.RIGHT_PAREN, ch, pos)
                pos += 1
            elif ch == ",":
                self._emit(TokenKind.COMMA, ch, pos)
                pos += 1
            elif ch == "=":
                self._emit(TokenKind.ASSIGN, ch, pos)
                pos += 1
            elif ch == ":":
                if not src.startswith(":=", pos):
                    raise self._error("expected :=", pos)
                self._emit(TokenKind.DECLARE, ":=", pos)
                pos += 2
            elif ch == '"':
                pos = self._lex_quote(pos)
            elif ch == "`":
                pos = self._lex_raw_quote(pos)
            elif ch == "'":
                pos = self._lex_char(pos)
            elif ch == "$":
                end = pos + 1
                while end < len(src) and _is_alnum(src[end]):
                    end += 1
                self._emit(TokenKind.VARIABLE, src[pos:end], pos)
                pos = end
            elif ch == ".":
                if pos + 1 < len(src) and src[pos + 1].isdigit():
                    pos = self._lex_number(pos)
                    continue
                end = pos + 1
                while end < len(src) and _is_alnum(src[end]):
                    end += 1
                kind = TokenKind.DOT if end == pos + 1 else TokenKind.FIELD
                self._emit(kind, src[pos:end], pos)
                pos = end
            elif ch.isdigit() or (ch in "+-" and pos + 1 < len(src) and src[pos + 1].isdigit()):
                pos = self._lex_number(pos)
            elif _is_alnum(ch):
                end = pos
                while end < len(src) and _is_alnum(src[end]):
                    end += 1
                word = src[pos:end]
                if word in KEYWORDS:
                    kind = TokenKind.KEYWORD
                elif word in ("true", "false"):
                    kind = TokenKind.BOOL
                elif word == "nil":
                    kind = TokenKind.NIL
                else:
                    kind = TokenKind.IDENTIFIER
                self._emit(kind, word, pos)
                pos = end
            else:
                raise self._error(f"unrecognized character in action: {ch!r}", pos)

    def _lex_comment(self, delim_pos: int, start: int) -> bool:
        src = self._src
        close = src.find(_COMMENT_CLOSE, start + len(_COMMENT_OPEN))
        if close == -1:
            raise self._error("unclosed comment", delim_pos)
        pos = close + len(_COMMENT_CLOSE)
        if src.startswith(RIGHT_DELIM, pos):
            self._pos = pos + len(RIGHT_DELIM)
            return False
        if src.startswith(" " + _TRIM_MARKER + RIGHT_DELIM, pos):
            self._pos = pos + 1 + len(_TRIM_MARKER) + len(RIGHT_DELIM)
            return True
        raise self._error("comment ends before closing delimiter", delim_pos)

    def _lex_quote(self, start: int) -> int:
        src = self._src
        pos = start + 1
        while True:
            if pos >= len(src) or src[pos] == "\n":
                raise self._error("unterminated quoted string", start)
            ch = src[pos]
            if ch == "\\":
                if pos + 1 >= len(src) or src[pos + 1] == "\n":
                    raise self._error("unterminated quoted string", start)
                pos += 2
                continue
            pos += 1
            if ch == '"':
                break
        self._emit(TokenKind.STRING, src[start:pos], start)
        return pos

    def _lex_raw_quote(self, start: int) -> int:
        close = self._src.find("`", start + 1)
        if close == -1:
            raise self._error("unterminated raw quoted string", start)
        self._emit(TokenKind.RAW_STRING, self._src[start:close + 1], start)
        return close + 1

    def _lex_char(self, start: int) -> int:
        src = self._src
        pos = start + 1
        while True:
            if pos >= len(src) or src[pos] == "\n":
                raise self._error("unterminated character constant", start)
            ch = src[pos]
            if ch == "\\":
                pos += 2
                continue
            pos += 1
            if ch == "'":
                break
        self._emit(TokenKind.CHAR, src[start:pos], start)
        return pos

    def _lex_number(self, start: int) -> int:
        src = self._src
        pos = start
        if src[pos] in "+-":
            pos += 1
        while pos < len(src):
            ch = src[pos]
            if _is_alnum(ch) or ch == ".":
                pos += 1
            elif ch in "+-" and src[pos - 1] in "eEpP":
                pos += 1
            else:
                break
        self._emit(TokenKind.NUMBER, src[start:pos], start)
        return pos
