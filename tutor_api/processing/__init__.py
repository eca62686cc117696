from .base import ProcessingError, Processor
from .documents import DocumentProcessor

__all__ = ["DocumentProcessor", "ProcessingError", "Processor"]
