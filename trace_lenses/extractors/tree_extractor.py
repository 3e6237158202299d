"""
Test declaration discovery in JavaScript and TypeScript source files.

Test declarations are recognized by surface syntax only: a call with two
arguments, the first a string literal, whose callee matches one of the rules
in NAME_RULES. There is no scope or import analysis, so a local function
named `it` is treated as a test as well.
"""

import logging
import re
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..core.types import LensConfig, SourceParseError, TestNode

logger = logging.getLogger(__name__)

TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
TSX = Language(tree_sitter_typescript.language_tsx())

GRAMMARS_BY_SUFFIX = {
    '.ts': TYPESCRIPT,
    '.mts': TYPESCRIPT,
    '.cts': TYPESCRIPT,
    '.tsx': TSX,
    '.js': TSX,
    '.jsx': TSX,
    '.mjs': TSX,
    '.cjs': TSX,
}

_ESCAPE_PATTERN = re.compile(
    r'\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])'
)
_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
    '\n': '', '\r\n': '', '\r': '', '\u2028': '', '\u2029': '',
}


def _unescape(text: str) -> str:
    """Resolve JavaScript escape sequences in the body of a string literal."""
    def replace(match):
        escape = match.group(1)
        if escape.startswith('u{'):
            return chr(int(escape[2:-1], 16))
        if escape[0] in 'ux' and len(escape) > 1:
            return chr(int(escape[1:], 16))
        return _SIMPLE_ESCAPES.get(escape, escape)
    return _ESCAPE_PATTERN.sub(replace, text)


class NameRule(NamedTuple):
    """One row of the callee name decision table."""
    description: str
    resolve: Callable[[Node, LensConfig], Optional[str]]
    requires_known_name: bool


def _bare_identifier(callee: Node, config: LensConfig) -> Optional[str]:
    # describe('...', fn)
    if callee.type == 'identifier':
        return callee.text.decode('utf-8')
    return None


def _tagged_member(callee: Node, config: LensConfig) -> Optional[str]:
    # tags('slow').it('...', fn)
    if callee.type != 'member_expression':
        return None
    base = callee.child_by_field_name('object')
    prop = callee.child_by_field_name('property')
    if base is None or prop is None or base.type != 'call_expression':
        return None
    base_callee = base.child_by_field_name('function')
    if (base_callee is not None and base_callee.type == 'identifier'
            and base_callee.text.decode('utf-8') == config.tag_function_name):
        return prop.text.decode('utf-8')
    return None


def _only_modifier(callee: Node, config: LensConfig) -> Optional[str]:
    # it.only('...', fn)
    if callee.type != 'member_expression':
        return None
    base = callee.child_by_field_name('object')
    prop = callee.child_by_field_name('property')
    if (base is not None and prop is not None and base.type == 'identifier'
            and prop.text.decode('utf-8') == config.only_modifier):
        return base.text.decode('utf-8')
    return None


# Evaluated in order; the first rule whose shape matches decides.
NAME_RULES = (
    NameRule('bare identifier call', _bare_identifier, True),
    NameRule('property call on a tags(...) result', _tagged_member, False),
    NameRule('only-modifier call on an identifier', _only_modifier, True),
)


class TestTreeExtractor:
    """Builds a forest of test nodes from source text."""
    __test__ = False

    def __init__(self, config: Optional[LensConfig] = None, language: Language = TYPESCRIPT):
        """
        Initialize with lens configuration and grammar.

        Args:
            config: LensConfig with the recognized test function names
            language: tree-sitter grammar used to parse sources
        """
        self.config = config or LensConfig()
        self.parser = Parser(language)

    @classmethod
    def for_path(cls, path: str, config: Optional[LensConfig] = None) -> Optional['TestTreeExtractor']:
        """
        Create an extractor with the grammar matching a file's extension.

        Args:
            path: Document path
            config: LensConfig instance

        Returns:
            TestTreeExtractor, or None if the file type is not supported
        """
        language = GRAMMARS_BY_SUFFIX.get(Path(path).suffix.lower())
        if language is None:
            return None
        return cls(config, language)

    def extract(self, source: str) -> List[TestNode]:
        """
        Find test declarations and return the root nodes in document order.

        A source that fails to parse yields no nodes; the failure is logged.

        Args:
            source: Source text of the document

        Returns:
            List of root TestNode objects
        """
        try:
            return self.build_forest(source)
        except SourceParseError as e:
            logger.warning("No test lenses for source: %s", e)
            return []

    def build_forest(self, source: str) -> List[TestNode]:
        """
        Parse source text and link recognized test declarations into a forest.

        Args:
            source: Source text of the document

        Returns:
            List of root TestNode objects

        Raises:
            SourceParseError: If the source contains syntax errors
        """
        try:
            source_bytes = source.encode('utf-8')
        except UnicodeEncodeError as e:
            raise SourceParseError(f"source is not valid text: {e}") from e

        tree = self.parser.parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            raise SourceParseError(self._describe_error(root))

        roots: List[TestNode] = []
        # Children are pushed in reverse so nodes pop in document order
        stack = [(root, None)]
        while stack:
            node, parent_test = stack.pop()
            if node.type == 'call_expression':
                title = self.declaration_title(node)
                if title is not None:
                    test = TestNode(
                        title=title,
                        source_offset=node.start_byte,
                        line=node.start_point[0],
                        column=node.start_point[1],
                    )
                    if parent_test is not None:
                        parent_test.add_child(test)
                    else:
                        roots.append(test)
                    parent_test = test
            for child in reversed(node.children):
                stack.append((child, parent_test))

        logger.debug("Found %d root test declarations", len(roots))
        return roots

    def declaration_title(self, call: Node) -> Optional[str]:
        """
        Return the title of a test declaration, or None if call is not one.

        Args:
            call: A call_expression node

        Returns:
            Value of the first string argument, or None
        """
        callee = call.child_by_field_name('function')
        arguments = call.child_by_field_name('arguments')
        if callee is None or arguments is None or arguments.type != 'arguments':
            return None

        if self.resolve_test_name(callee) is None:
            return None

        args = [a for a in arguments.named_children if a.type != 'comment']
        if len(args) != 2:
            return None
        return self.string_literal_value(args[0])

    def resolve_test_name(self, callee: Node) -> Optional[str]:
        """
        Resolve the test function name of a callee using NAME_RULES.

        Args:
            callee: The 'function' child of a call_expression

        Returns:
            The resolved name if the callee is a recognized test function
        """
        for rule in NAME_RULES:
            name = rule.resolve(callee, self.config)
            if name is None:
                continue
            if rule.requires_known_name and name not in self.config.test_function_names:
                return None
            return name
        return None

    @staticmethod
    def string_literal_value(node: Node) -> Optional[str]:
        """
        Return the value of a string literal or a template without substitutions.

        Args:
            node: Argument node

        Returns:
            Unescaped string value, or None if node is not a plain string literal
        """
        if node.type == 'string':
            pass
        elif node.type == 'template_string':
            if any(c.type == 'template_substitution' for c in node.named_children):
                return None
        else:
            return None
        text = node.text.decode('utf-8')
        return _unescape(text[1:-1])

    @staticmethod
    def _describe_error(root: Node) -> str:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == 'ERROR' or node.is_missing:
                row, column = node.start_point
                return f"syntax error at line {row + 1}, column {column + 1}"
            stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
        return "syntax error"
