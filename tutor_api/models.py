from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class GreetingResponse(BaseModel):
	message: str
	timestamp: str
	method: Optional[str] = None
	platform: Optional[str] = None
	version: Optional[str] = None


class HealthResponse(BaseModel):
	status: Literal["healthy"] = "healthy"
	timestamp: str
	platform: str
	version: str


class ErrorResponse(BaseModel):
	error: str
	details: Optional[str] = None


class TextStatistics(BaseModel):
	words: int = 0
	characters: int = 0
	sentences: int = 0
	paragraphs: int = 0


class DocumentPage(BaseModel):
	page_number: int
	content: str = ""
	confidence: float = 0.0
	original_filename: Optional[str] = None
	content_type: Optional[str] = None
	size: Optional[int] = None


class DocumentMetadata(BaseModel):
	source: Literal["text", "images"]
	total_pages: int
	confidence: float = 0.0
	ai_processed: bool = False
	statistics: TextStatistics = Field(default_factory=TextStatistics)


class Document(BaseModel):
	pages: list[DocumentPage]
	metadata: DocumentMetadata


class ProcessingResult(BaseModel):
	document: Document
	message: str
	extra: dict[str, Any] = Field(default_factory=dict)


class ProcessingResponse(BaseModel):
	success: bool = True
	result: ProcessingResult
	message: str
	timestamp: str
	processing_time_ms: int
