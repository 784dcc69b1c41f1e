from __future__ import annotations


class BranchOwnersError(Exception):
    """Base exception for branchowners."""


class SetupError(BranchOwnersError):
    """Something needed before diffing could not be loaded."""


class ParseError(SetupError):
    """Failed to parse a CODEOWNERS file."""


class ConfigError(SetupError):
    """Configuration is missing or invalid."""


class RepositoryError(SetupError):
    """The repository could not be opened."""


class GitError(BranchOwnersError):
    """Git invocation failed."""


class RefResolutionError(BranchOwnersError):
    """A branch, ref or merge-base could not be resolved."""


class NotABranchError(RefResolutionError):
    """HEAD (or the requested ref) is not a local branch."""


class NoMainlineBranchError(RefResolutionError):
    """None of the mainline candidates exist."""


class UnresolvableRefError(RefResolutionError):
    """A ref does not point at a commit."""


class NoCommonAncestorError(RefResolutionError):
    """The current branch and mainline share no history."""


class DiffError(BranchOwnersError):
    """Computing the tree diff failed."""


class MatchError(BranchOwnersError):
    """A single path could not be matched against the ruleset."""


class NoMatchError(MatchError):
    """No rule matched the path."""


class UsageError(BranchOwnersError):
    """Invalid CLI usage (user error)."""
