"""Custom exceptions for DocReel.

This module defines all custom exceptions used throughout the application.
All exceptions inherit from DocReelError for easy catching.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.

Taxonomy:
- ValidationError: illegal state transition or request (surfaced, never retried)
- ResolutionError: no playable media source for a segment
- StalenessError: a response no longer matches the current request
- CodecError: malformed stored payload
- ProviderError: network/service failure of an external collaborator
"""

from typing import Any


class DocReelError(Exception):
    """Base exception for all DocReel errors.

    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise DocReelError("Something went wrong", context={"segment_id": "s1"})
        ... except DocReelError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize DocReelError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "DocReelError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


# ============================================
# Validation Errors
# ============================================


class ValidationError(DocReelError):
    """Raised when an operation is not allowed in the current state.

    Validation errors are surfaced to the user immediately and never retried.
    """

    def __init__(
        self,
        message: str,
        segment_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Error message
            segment_id: Segment the operation targeted (optional)
            context: Additional context
        """
        ctx = context or {}
        if segment_id:
            ctx["segment_id"] = segment_id
        self.segment_id = segment_id
        super().__init__(message, context=ctx)


class UnresolvedMediaError(ValidationError):
    """Raised when approving a channel whose media cannot be resolved.

    Attributes:
        channel: Channel name ("visual", "audio" or "background_score")
    """

    def __init__(
        self,
        segment_id: str | None,
        channel: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize UnresolvedMediaError.

        Args:
            segment_id: Segment ID (None for the background score)
            channel: Channel that could not be resolved
            context: Additional context
        """
        ctx = context or {}
        ctx["channel"] = channel
        self.channel = channel
        target = f"segment {segment_id}" if segment_id else "script"
        super().__init__(
            f"Cannot approve {channel} of {target}: no playable media source",
            segment_id=segment_id,
            context=ctx,
        )


class ExportNotAllowedError(ValidationError):
    """Raised when exporting an artifact that is not approved or not durable.

    Attributes:
        reason: Short machine-readable reason
    """

    def __init__(self, reason: str, context: dict[str, Any] | None = None) -> None:
        """Initialize ExportNotAllowedError.

        Args:
            reason: Why export was refused (e.g., "not_approved", "not_durable")
            context: Additional context
        """
        ctx = context or {}
        ctx["reason"] = reason
        self.reason = reason
        super().__init__(f"Export not allowed: {reason}", context=ctx)


# ============================================
# Resolution / Assembly Errors
# ============================================


class ResolutionError(DocReelError):
    """Raised when no media source can be resolved for a segment.

    Attributes:
        segment_id: Segment that could not be resolved
        reason: Resolution failure reason
    """

    def __init__(
        self,
        segment_id: str | None,
        reason: str = "missing_source",
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ResolutionError.

        Args:
            segment_id: Segment ID
            reason: Resolution failure reason
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"segment_id": segment_id, "reason": reason})
        self.segment_id = segment_id
        self.reason = reason
        super().__init__(f"No media source for segment {segment_id}: {reason}", context=ctx)


class AssemblyIntegrityError(DocReelError):
    """Raised when a built request does not cover every eligible segment.

    Attributes:
        expected: Number of eligible segments
        actual: Number of segment descriptors produced
        missing: Segment IDs that were dropped
    """

    def __init__(
        self,
        expected: int,
        actual: int,
        missing: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize AssemblyIntegrityError.

        Args:
            expected: Eligible segment count
            actual: Produced descriptor count
            missing: IDs of segments that could not be described
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"expected": expected, "actual": actual, "missing": missing or []})
        self.expected = expected
        self.actual = actual
        self.missing = missing or []
        super().__init__(
            f"Assembly request covers {actual} of {expected} eligible segments",
            context=ctx,
        )


class StalenessError(DocReelError):
    """Raised when a response no longer corresponds to the current state.

    Always handled internally; never shown to the user.
    """

    def __init__(
        self,
        request_version: int,
        current_version: int,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize StalenessError.

        Args:
            request_version: Version of the request that produced the response
            current_version: Latest issued request version
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"request_version": request_version, "current_version": current_version})
        self.request_version = request_version
        self.current_version = current_version
        super().__init__(
            f"Stale response for request v{request_version} (current v{current_version})",
            context=ctx,
        )


# ============================================
# Codec Errors
# ============================================


class CodecError(DocReelError):
    """Raised when a stored document or payload cannot be decoded.

    Attributes:
        field: Field path that failed (if applicable)
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize CodecError.

        Args:
            message: Error message
            field: Field path that failed
            context: Additional context
        """
        ctx = context or {}
        if field:
            ctx["field"] = field
        self.field = field
        super().__init__(message, context=ctx)


# ============================================
# Provider Errors
# ============================================


class ProviderError(DocReelError):
    """Base exception for external provider failures.

    Attributes:
        service: Name of the provider
        fallback_hint: Suggested manual fallback path, if one exists
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        fallback_hint: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ProviderError.

        Args:
            message: Error message
            service: Name of the provider
            fallback_hint: Suggested manual fallback (e.g., "upload instead")
            context: Additional context
        """
        ctx = context or {}
        if service:
            ctx["service"] = service
        if fallback_hint:
            ctx["fallback_hint"] = fallback_hint
        self.service = service
        self.fallback_hint = fallback_hint
        super().__init__(message, context=ctx)


class ExternalAPIError(ProviderError):
    """Raised when an external API call fails.

    Attributes:
        status_code: HTTP status code (if applicable)
        endpoint: API endpoint that was called
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        endpoint: str | None = None,
        response_body: str | None = None,
        fallback_hint: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ExternalAPIError.

        Args:
            service: Name of the external service
            message: Error message
            status_code: HTTP status code (optional)
            endpoint: API endpoint (optional)
            response_body: Response body for debugging (optional)
            fallback_hint: Suggested manual fallback (optional)
            context: Additional context
        """
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        if endpoint:
            ctx["endpoint"] = endpoint
        if response_body:
            ctx["response_body"] = response_body[:500]  # Truncate long responses

        self.status_code = status_code
        self.endpoint = endpoint

        prefix = f"[{status_code}] " if status_code is not None else ""
        super().__init__(
            f"{service} API error: {prefix}{message}",
            service=service,
            fallback_hint=fallback_hint,
            context=ctx,
        )


class RateLimitError(ProviderError):
    """Raised when a provider rate limit is exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying
    """

    def __init__(
        self,
        service: str,
        retry_after: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize RateLimitError.

        Args:
            service: Service that rate limited
            retry_after: Seconds to wait before retrying
            context: Additional context
        """
        ctx = context or {}
        if retry_after is not None:
            ctx["retry_after"] = retry_after
        self.retry_after = retry_after

        message = f"Rate limit exceeded for {service}"
        if retry_after:
            message += f" (retry after {retry_after}s)"

        super().__init__(message, service=service, context=ctx)


# ============================================
# Configuration Errors
# ============================================


class ConfigError(DocReelError):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if config_path:
            ctx["config_path"] = config_path
        super().__init__(message, context=ctx)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails.

    Attributes:
        errors: Validation error details
    """

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        errors: list[Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error message
            config_path: Path to the config file
            errors: Validation error details
            context: Additional context
        """
        ctx = context or {}
        if errors:
            ctx["errors"] = errors
        self.errors = errors or []
        super().__init__(message, config_path=config_path, context=ctx)


class ConfigNotFoundError(ConfigError):
    """Raised when a configuration file is missing."""

    def __init__(self, config_path: str, context: dict[str, Any] | None = None) -> None:
        """Initialize ConfigNotFoundError.

        Args:
            config_path: Path that was not found
            context: Additional context
        """
        super().__init__(
            f"Configuration not found: {config_path}",
            config_path=config_path,
            context=context,
        )


__all__ = [
    "DocReelError",
    "ValidationError",
    "UnresolvedMediaError",
    "ExportNotAllowedError",
    "ResolutionError",
    "AssemblyIntegrityError",
    "StalenessError",
    "CodecError",
    "ProviderError",
    "ExternalAPIError",
    "RateLimitError",
    "ConfigError",
    "ConfigValidationError",
    "ConfigNotFoundError",
]
