from .document import (
    Allocation,
    Document,
    DocumentStatus,
    DocumentType,
    Installment,
    Signatory,
    SignatoryStatus,
)
from .results import EngineError, ErrorCode, ErrorKind, Result

__all__ = [
    "Allocation",
    "Document",
    "DocumentStatus",
    "DocumentType",
    "Installment",
    "Signatory",
    "SignatoryStatus",
    "EngineError",
    "ErrorCode",
    "ErrorKind",
    "Result",
]
