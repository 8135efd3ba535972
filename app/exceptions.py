"""Custom exception classes"""

from typing import Optional


class DocQAException(Exception):
    """Base exception for the document Q&A backend

    ``user_message`` is safe to show to end users; ``details`` carries the
    technical cause and is only exposed to operators.
    """

    code = "InternalError"
    status_code = 500
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.user_message
        self.details = details
        super().__init__(self.message)


class ValidationException(DocQAException):
    """Malformed request input"""
    code = "ValidationError"
    status_code = 400
    user_message = "The request is missing required information."


class ExtractionError(DocQAException):
    """Text could not be extracted from the submitted source"""
    code = "ExtractionError"
    status_code = 400
    user_message = "Could not read text from this document."


class UnsupportedType(ExtractionError):
    """File type (extension or MIME) is not supported"""
    code = "UnsupportedType"
    user_message = "This file type is not supported."


class UnreadableContent(ExtractionError):
    """Source decoded but produced no usable text"""
    code = "UnreadableContent"
    user_message = "Could not read text from this document."


class PayloadTooLarge(ExtractionError):
    """Input exceeds a collaborator size limit"""
    code = "PayloadTooLarge"
    status_code = 413
    user_message = "This file is too large to process."


class FetchFailed(ExtractionError):
    """Remote page could not be fetched"""
    code = "FetchFailed"
    status_code = 502
    user_message = "Could not fetch the page at this link."


class NoContent(DocQAException):
    """Extraction succeeded but nothing was left to index"""
    code = "NoContent"
    status_code = 400
    user_message = "No text content was found."


class TooLarge(DocQAException):
    """Document would produce more chunks than allowed"""
    code = "TooLarge"
    status_code = 400
    user_message = "This document is too large. Try a shorter document or split it into multiple files."


class DocumentLimitReached(DocQAException):
    """User already owns the maximum number of documents"""
    code = "DocumentLimitReached"
    status_code = 403
    user_message = "Document limit reached. Delete a document before adding another."


class EmbeddingUnavailable(DocQAException):
    """Embedding model failed for every batch"""
    code = "EmbeddingUnavailable"
    status_code = 503
    user_message = "The embedding service is unavailable. Please try again later."


class SynthesisUnavailable(DocQAException):
    """Chat-completion model failed or returned an unusable response"""
    code = "SynthesisUnavailable"
    status_code = 503
    user_message = "The answer service is unavailable. Please try again later."


class NotFound(DocQAException):
    """Missing document or user"""
    code = "NotFound"
    status_code = 404
    user_message = "Not found."


class StorageFailure(DocQAException):
    """Blob store or relational store error"""
    code = "StorageFailure"
    status_code = 500
    user_message = "Could not save your data. Please try again."
