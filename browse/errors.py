"""Error taxonomy of the browse core."""
from __future__ import annotations


class BrowseError(Exception):
    """Base class for errors the browse core raises.

    ``code`` and ``status`` let the HTTP glue translate an error into a response
    without inspecting the concrete class.
    """

    code = "error"
    status = 500

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.code)


class NotFoundError(BrowseError):
    """Path is missing, escapes the media root, or is filtered out of a listing."""

    code = "not_found"
    status = 404


class ForbiddenError(BrowseError):
    """The access policy denies visibility or direct access."""

    code = "forbidden"
    status = 403


class ConfigParseError(BrowseError):
    """A configuration document could not be read or decoded.

    Never escapes the config stores; they downgrade it to the defaults.
    """

    code = "config_parse_error"


class DerivativeGenerationError(BrowseError):
    """A thumbnail derivative could not be produced for one source file."""

    code = "derivative_failed"

    def __init__(self, source: str, detail: str | None = None) -> None:
        self.source = source
        super().__init__(detail or f"cannot create derivative for {source}")
