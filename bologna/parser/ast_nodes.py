"""
Abstract Syntax Tree node definitions for Bologna.

The node set is closed: four expression kinds, prototypes, functions and
the Program container returned by a batch parse. Nodes are immutable
dataclasses compared by structure; the source location each node was parsed
from is carried along but ignored by equality.

Author: xwest
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, List, Optional, Tuple, Union

from ..lexer.tokens import SourceLocation


# Name given to the prototype wrapping a bare top-level expression. Can't
# clash with user code since identifiers never contain '_'.
ANONYMOUS_FUNCTION_NAME = "__anon_expr"


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    PROGRAM = "Program"

    # Declarations
    PROTOTYPE = "Prototype"
    FUNCTION = "Function"

    # Expressions
    NUMBER_LITERAL = "NumberLiteral"
    VARIABLE_REFERENCE = "VariableReference"
    BINARY_OP = "BinaryOp"
    CALL = "Call"


class ASTVisitor:
    """
    Visitor dispatching on node class name.

    Subclasses define visit_<ClassName> methods; nodes without one go to
    generic_visit, which visits the children and returns None.
    """

    def visit(self, node: 'ASTNode') -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: 'ASTNode') -> Any:
        for child in node.children():
            self.visit(child)
        return None


class ASTNode(ABC):
    """Base class for all AST nodes."""

    node_type: ClassVar[ASTNodeType]

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    def children(self) -> List['ASTNode']:
        """Get all child nodes, in source order."""
        return []

    def walk(self):
        """Yield this node and all its descendants, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __str__(self) -> str:
        return ASTPrinter().visit(self)


def _freeze(node: ASTNode, name: str):
    # Lists passed by callers become tuples so the tree stays immutable
    object.__setattr__(node, name, tuple(getattr(node, name)))


# ============================================================================
# Expressions
# ============================================================================

class Expression(ASTNode):
    """Base class for expressions."""
    pass


@dataclass(frozen=True)
class NumberLiteral(Expression):
    """Numeric literal like "1.0"."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.NUMBER_LITERAL

    value: float
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class VariableReference(Expression):
    """Reference to a variable by name, like "a". Not resolved here."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE_REFERENCE

    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryOp(Expression):
    """Binary operation; owns both operands."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BINARY_OP

    operator: str
    left: Expression
    right: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass(frozen=True)
class Call(Expression):
    """Function call expression."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CALL

    callee: str
    arguments: Tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        _freeze(self, "arguments")

    def children(self) -> List[ASTNode]:
        return list(self.arguments)


# ============================================================================
# Declarations
# ============================================================================

@dataclass(frozen=True)
class Prototype(ASTNode):
    """
    A function's name and parameter names, without a body.

    Parameter order defines positional binding at call sites. Duplicate
    names are accepted here.
    """
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROTOTYPE

    name: str
    parameter_names: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        _freeze(self, "parameter_names")

    @property
    def arity(self) -> int:
        return len(self.parameter_names)


@dataclass(frozen=True)
class Function(ASTNode):
    """Function definition: a prototype and a single body expression."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION

    prototype: Prototype
    body: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.prototype.name

    @property
    def is_anonymous(self) -> bool:
        """True for a bare top-level expression wrapped by the parser."""
        return self.prototype.name == ANONYMOUS_FUNCTION_NAME

    def children(self) -> List[ASTNode]:
        return [self.prototype, self.body]


TopLevelNode = Union[Function, Prototype]


@dataclass(frozen=True)
class Program(ASTNode):
    """Root node holding every top-level unit of a batch parse."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROGRAM

    items: Tuple[TopLevelNode, ...] = ()

    def __post_init__(self):
        _freeze(self, "items")

    def children(self) -> List[ASTNode]:
        return list(self.items)


# ============================================================================
# Printing
# ============================================================================

class ASTPrinter(ASTVisitor):
    """Renders a tree as an S-expression, one top-level unit per line."""

    def visit_NumberLiteral(self, node: NumberLiteral) -> str:
        return repr(node.value)

    def visit_VariableReference(self, node: VariableReference) -> str:
        return node.name

    def visit_BinaryOp(self, node: BinaryOp) -> str:
        return f"({node.operator} {self.visit(node.left)} {self.visit(node.right)})"

    def visit_Call(self, node: Call) -> str:
        parts = ["call", node.callee] + [self.visit(arg) for arg in node.arguments]
        return f"({' '.join(parts)})"

    def visit_Prototype(self, node: Prototype) -> str:
        return f"(extern {node.name} ({' '.join(node.parameter_names)}))"

    def visit_Function(self, node: Function) -> str:
        proto = node.prototype
        return f"(def {proto.name} ({' '.join(proto.parameter_names)}) {self.visit(node.body)})"

    def visit_Program(self, node: Program) -> str:
        return "\n".join(self.visit(item) for item in node.items)

    def generic_visit(self, node: ASTNode) -> str:
        raise TypeError(f"Cannot print node of type {type(node).__name__}")


def dump(node: ASTNode) -> str:
    """Render a node as an S-expression."""
    return ASTPrinter().visit(node)
