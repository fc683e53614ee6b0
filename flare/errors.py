"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the template author
as clean messages (without stack traces) must inherit from FlareUserError.

Programming errors and bugs should NOT inherit from FlareUserError:
they propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class FlareUserError(Exception):
    """
    Base class for all user-facing errors in flare.

    These errors indicate problems that the template author can fix:
    unsafe fold usage, malformed @props/@aware declarations, unknown components, etc.
    """
    pass


class FoldSafetyError(FlareUserError):
    """
    A component marked as foldable reads state that only exists at render time.

    Raised at compile time, never swallowed by the folder.
    """

    def __init__(self, component_path: str, pattern: str, reason: str, mitigation: str = ""):
        self.component_path = component_path
        self.pattern = pattern
        self.reason = reason
        self.mitigation = mitigation
        message = f"Invalid @blaze fold usage in component '{component_path}': {reason}"
        if mitigation:
            message += f" {mitigation}"
        super().__init__(message)

    @classmethod
    def for_request(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "request",
            "Components that read request state cannot be folded.",
            "Pass the needed request values in as props, or wrap the block in @unblaze.",
        )

    @classmethod
    def for_session(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "session",
            "Components that read session state cannot be folded.",
            "Pass the session values in as props, or remove fold: true.",
        )

    @classmethod
    def for_auth(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "current_user",
            "Components that read the authenticated user cannot be folded.",
            "Pass user data in as props, or wrap the block in @unblaze.",
        )

    @classmethod
    def for_csrf(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "csrf_token(",
            "Components that render CSRF tokens cannot be folded.",
            "Render the token in the calling template instead.",
        )

    @classmethod
    def for_old(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "old(",
            "Components that echo previous form input cannot be folded.",
            "Pass the previous value in as a prop.",
        )

    @classmethod
    def for_errors(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "errors",
            "Components that read validation errors cannot be folded.",
            "Pass the error message in as a prop.",
        )

    @classmethod
    def for_once(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "@once",
            "Components that use @once cannot be folded.",
            "Move the one-shot block into the calling template.",
        )

    @classmethod
    def for_aware(cls, component_path: str) -> "FoldSafetyError":
        return cls(
            component_path, "@aware",
            "Components that consume ancestor data with @aware cannot be folded.",
            "Add aware: true to @blaze to resolve aware values at compile time.",
        )


class DeclarationParseError(FlareUserError):
    """Malformed literal in a @props / @aware / @blaze argument."""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Cannot parse '{expression}': {reason}")


class InvalidPropsDefinitionError(FlareUserError):
    """@props declaration of a component could not be parsed."""

    def __init__(self, component_path: str, error: DeclarationParseError):
        self.component_path = component_path
        self.error = error
        super().__init__(f"Invalid @props definition in component '{component_path}': {error}")


class InvalidAwareDefinitionError(FlareUserError):
    """@aware declaration of a component could not be parsed."""

    def __init__(self, component_path: str, error: DeclarationParseError):
        self.component_path = component_path
        self.error = error
        super().__init__(f"Invalid @aware definition in component '{component_path}': {error}")


class UnsupportedDirectiveError(FlareUserError):
    """Conditional attribute directive used directly on a component tag."""

    def __init__(self, directive: str, component: Optional[str] = None):
        self.directive = directive
        self.component = component
        super().__init__(
            f"The @{directive} directive is not supported on component tags. "
            f"Use :{directive}=\"...\" instead."
        )


class ComponentNotFoundError(FlareUserError):
    """Component name could not be resolved to a source file."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unable to locate component [{name}]")


__all__ = [
    "FlareUserError",
    "FoldSafetyError",
    "DeclarationParseError",
    "InvalidPropsDefinitionError",
    "InvalidAwareDefinitionError",
    "UnsupportedDirectiveError",
    "ComponentNotFoundError",
]
