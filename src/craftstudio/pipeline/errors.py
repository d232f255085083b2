"""Pipeline error taxonomy.

Every terminal failure is a :class:`PipelineError` naming the stage that
failed and whether the caller (``client``) or the remote side (``server``)
is responsible. Remote failures are classified once, at the stage that
observed them, so callers never re-parse provider messages.
"""

from __future__ import annotations

from enum import StrEnum

from craftstudio.providers.image import ImageInvalidInputError

# Substrings that mark a remote failure as caused by the caller's input
_CLIENT_ERROR_MARKERS = ("invalid_argument", "not valid", "unsupported")


class ErrorKind(StrEnum):
    """Who has to act to fix a failure."""

    CLIENT = "client"
    SERVER = "server"


class PipelineError(Exception):
    """Base class for terminal pipeline failures.

    Attributes:
        stage: Pipeline state in which the failure happened.
        kind: Client or server responsibility.
    """

    def __init__(self, stage: str, kind: ErrorKind, message: str) -> None:
        self.stage = stage
        self.kind = kind
        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        return self.kind is ErrorKind.CLIENT


class MissingTemplateError(PipelineError):
    """No template of any kind was supplied for the requested angles."""

    def __init__(self, angles: tuple[str, ...]) -> None:
        self.angles = angles
        super().__init__(
            "resolving_angles",
            ErrorKind.CLIENT,
            f"No template image supplied for any of the requested angles: {', '.join(angles)}",
        )


class SynthesisError(Exception):
    """A classified image synthesis failure.

    Raised by the synthesizer; the orchestrator wraps it into the
    stage-specific :class:`PipelineError`.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class CanonicalGenerationFailed(PipelineError):
    """The canonical design could not be generated; nothing else was attempted."""

    def __init__(self, angle: str, cause: Exception) -> None:
        self.angle = angle
        self.cause = cause
        super().__init__(
            "generating_canonical",
            classify_failure(cause),
            f"Failed to establish canonical design for angle '{angle}': {cause}",
        )


class AngleGenerationFailed(PipelineError):
    """A non-canonical angle failed; the remaining angles were not attempted.

    Attributes:
        angle_index: 1-based position of the failed angle in the request.
        angle_name: Identifier of the failed angle.
        total: Number of requested angles.
        completed: Angles that finished before the failure, in order.
        cause: Underlying failure.
    """

    def __init__(
        self,
        angle_index: int,
        angle_name: str,
        total: int,
        completed: list[str],
        cause: Exception,
    ) -> None:
        self.angle_index = angle_index
        self.angle_name = angle_name
        self.total = total
        self.completed = list(completed)
        self.cause = cause
        super().__init__(
            "generating_remaining_angles",
            classify_failure(cause),
            f"Failed to generate angle {angle_index}/{total} ('{angle_name}') "
            f"after {len(completed)} completed: {cause}",
        )


class VariantRunError(PipelineError):
    """A variant run raised instead of returning an outcome.

    Attributes:
        variant: 1-based variant number.
        cause: Underlying exception.
    """

    def __init__(self, variant: int, cause: Exception) -> None:
        self.variant = variant
        self.cause = cause
        super().__init__(
            "running_variant",
            classify_failure(cause),
            f"Variant {variant} stopped unexpectedly: {cause}",
        )


class IncompleteGenerationError(PipelineError):
    """The assembled result did not cover exactly the requested angles."""

    def __init__(self, missing: list[str], extra: list[str]) -> None:
        self.missing = missing
        self.extra = extra
        super().__init__(
            "complete",
            ErrorKind.SERVER,
            f"Generation incomplete: missing={missing} extra={extra}",
        )


def classify_failure(exc: BaseException) -> ErrorKind:
    """Classify a failure as client or server responsibility.

    Already-classified errors keep their kind. Provider input rejections
    and messages mentioning invalid or unsupported input are client
    errors; everything else (quota, network, timeouts, safety stops,
    missing image data) is a server error.
    """
    if isinstance(exc, (SynthesisError, PipelineError)):
        return exc.kind
    if isinstance(exc, ImageInvalidInputError):
        return ErrorKind.CLIENT
    message = str(exc).lower()
    if any(marker in message for marker in _CLIENT_ERROR_MARKERS):
        return ErrorKind.CLIENT
    return ErrorKind.SERVER
