"""Exceptions raised by the article enforcement core.

Checker findings (malformed references, unknown evidence labels) are never
exceptions; only inputs the core cannot work with at all raise.
"""


class ArticleGuardError(Exception):
    """Base class for all article-guard errors."""

    pass


class InputError(ArticleGuardError, ValueError):
    """Raised when a value is not a traversable article document."""

    pass


class DocumentTooDeep(InputError):
    """Raised when a document nests deeper than the walker allows."""

    def __init__(self, path: str, max_depth: int):
        self.path = path
        self.max_depth = max_depth
        super().__init__(
            f"Document nesting exceeds {max_depth} levels at '{path or '<root>'}'"
        )


class RuleRegistryError(ArticleGuardError):
    """Raised when the rule registry violates its own invariants.

    Fatal at startup: a replacement that matches a rule pattern would make
    remediation non-idempotent.
    """

    pass


class ParseError(ArticleGuardError):
    """Raised by a document source that cannot decode its payload."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not parse '{source}': {reason}")
