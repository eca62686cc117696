import logging
import time
from http import HTTPMethod

from ..errors import ApiError, MethodNotAllowed, MissingFields, ProcessingFailure
from ..models import ProcessingResponse
from ..neutral import NeutralRequest, NeutralResponse
from ..processing import Processor
from .common import utc_timestamp

logger = logging.getLogger(__name__)

FILES_FIELD = "files"
TEXT_FIELD = "text"


def _has_text(req: NeutralRequest) -> bool:
	text = req.body_field(TEXT_FIELD)
	return isinstance(text, str) and bool(text.strip())


async def handle_unified_processing(req: NeutralRequest, res: NeutralResponse, processor: Processor) -> None:
	if req.method is not HTTPMethod.POST:
		raise MethodNotAllowed(req.method.value, [HTTPMethod.POST.value])
	uploads = req.files_for(FILES_FIELD)
	if not _has_text(req) and not uploads:
		raise MissingFields("No files uploaded", [FILES_FIELD, TEXT_FIELD])
	if await req.cancellation.poll():
		logger.info(f"Request {req.request_id} cancelled before processing; skipping")
		return

	started = time.monotonic()
	try:
		result = await processor.process(req.body, uploads)
	except ApiError:
		raise
	except Exception as e:
		raise ProcessingFailure(e) from e
	elapsed_ms = int((time.monotonic() - started) * 1000)

	res.set_status(200).send_json(
		ProcessingResponse(
			result=result,
			message=result.message,
			timestamp=utc_timestamp(),
			processing_time_ms=elapsed_ms,
		)
	)
