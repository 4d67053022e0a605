"""Parse tree produced by the template parser.

``str()`` of a node reproduces its source form; execution errors use it to
show which action failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Node:
    pos: int


@dataclass
class TextNode(Node):
    text: str

    def __str__(self) -> str:
        return repr(self.text)


@dataclass
class DotNode(Node):
    def __str__(self) -> str:
        return "."


@dataclass
class NilNode(Node):
    def __str__(self) -> str:
        return "nil"


@dataclass
class BoolNode(Node):
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass
class NumberNode(Node):
    value: int | float
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass
class StringNode(Node):
    value: str
    quoted: str

    def __str__(self) -> str:
        return self.quoted


@dataclass
class IdentifierNode(Node):
    """A function name."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class FieldNode(Node):
    """A chain of member names on dot: ``.A.B``."""

    idents: list[str]

    def __str__(self) -> str:
        return "".join(f".{ident}" for ident in self.idents)


@dataclass
class VariableNode(Node):
    """A variable with an optional member chain: ``$x.A.B``."""

    idents: list[str]

    def __str__(self) -> str:
        return ".".join(self.idents)


@dataclass
class ChainNode(Node):
    """A member chain on a parenthesised pipeline: ``(pipe).A.B``."""

    node: Node
    fields: list[str]

    def __str__(self) -> str:
        base = f"({self.node})" if isinstance(self.node, PipeNode) else str(self.node)
        return base + "".join(f".{ident}" for ident in self.fields)


@dataclass
class CommandNode(Node):
    args: list[Node] = field(default_factory=list)

    def __str__(self) -> str:
        parts = []
        for arg in self.args:
            if isinstance(arg, PipeNode):
                parts.append(f"({arg})")
            else:
                parts.append(str(arg))
        return " ".join(parts)


@dataclass
class PipeNode(Node):
    line: int
    decl: list[VariableNode] = field(default_factory=list)
    is_assign: bool = False
    cmds: list[CommandNode] = field(default_factory=list)

    def __str__(self) -> str:
        text = ""
        if self.decl:
            names = ", ".join(str(v) for v in self.decl)
            text = f"{names} {'=' if self.is_assign else ':='} "
        return text + " | ".join(str(c) for c in self.cmds)


@dataclass
class ListNode(Node):
    nodes: list[Node] = field(default_factory=list)

    def __str__(self) -> str:
        return "".join(str(n) for n in self.nodes)


@dataclass
class ActionNode(Node):
    line: int
    pipe: PipeNode

    def __str__(self) -> str:
        return f"{{{{{self.pipe}}}}}"


@dataclass
class BranchNode(Node):
    """Common shape of ``if``, ``range`` and ``with``."""

    line: int
    pipe: PipeNode
    body: ListNode
    else_body: ListNode | None = None

    keyword = ""

    def __str__(self) -> str:
        text = f"{{{{{self.keyword} {self.pipe}}}}}{self.body}"
        if self.else_body is not None:
            text += f"{{{{else}}}}{self.else_body}"
        return text + "{{end}}"


@dataclass
class IfNode(BranchNode):
    keyword = "if"


@dataclass
class RangeNode(BranchNode):
    keyword = "range"


@dataclass
class WithNode(BranchNode):
    keyword = "with"


@dataclass
class BreakNode(Node):
    line: int

    def __str__(self) -> str:
        return "{{break}}"


@dataclass
class ContinueNode(Node):
    line: int

    def __str__(self) -> str:
        return "{{continue}}"
