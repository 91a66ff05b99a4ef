from __future__ import annotations


class PipelineError(RuntimeError):
    code = "pipeline_error"
    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(PipelineError):
    """Missing or malformed client input, raised before any file or network I/O."""

    code = "validation_error"
    status_code = 400


class UploadTooLargeError(ValidationError):
    code = "upload_too_large"
    status_code = 413


class ParsingError(PipelineError):
    code = "parsing_error"


class InferenceFormatError(PipelineError):
    """Model output was not a non-empty JSON array of non-empty strings."""

    code = "inference_format_error"

    def __init__(self, message: str, *, kind: str):
        super().__init__(message)
        self.kind = kind


class UpstreamError(PipelineError):
    code = "upstream_error"


class UpstreamTimeoutError(PipelineError):
    code = "upstream_timeout"


class UnexpectedError(PipelineError):
    code = "unexpected_error"
