from __future__ import annotations


class RagError(RuntimeError):
    code = "internal_error"
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class TransportError(RagError):
    code = "transport_error"
    status_code = 405
    default_message = "Method not allowed"


class MissingInputError(RagError):
    code = "missing_input"
    status_code = 400
    default_message = "No input provided"


class ExtractionError(RagError):
    code = "extraction_failed"
    status_code = 422
    default_message = "Could not extract text from file"


class EmptyContentError(RagError):
    code = "no_text_found"
    status_code = 400
    default_message = "No text found in file"


class EmptyIndexError(RagError):
    code = "empty_index"
    status_code = 409
    default_message = "No documents indexed yet. Upload a document first."


class InternalError(RagError):
    pass


class InvalidRequestError(RagError):
    code = "invalid_request"
    status_code = 422
    default_message = "Invalid request"
