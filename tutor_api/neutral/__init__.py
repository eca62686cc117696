from .files import ExtractedFile
from .platform import PlatformKind
from .request import CancellationToken, NeutralRequest
from .response import FileBody, JsonBody, NeutralResponse, RawBody

__all__ = [
	"CancellationToken",
	"ExtractedFile",
	"FileBody",
	"JsonBody",
	"NeutralRequest",
	"NeutralResponse",
	"PlatformKind",
	"RawBody",
]
