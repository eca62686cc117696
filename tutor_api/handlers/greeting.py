from ..config.config import VERSION
from ..models import GreetingResponse
from ..neutral import NeutralRequest, NeutralResponse
from .common import utc_timestamp


async def handle_greeting(req: NeutralRequest, res: NeutralResponse) -> None:
	name = (req.query.get("name") or "").strip() or "World"
	res.set_status(200).send_json(
		GreetingResponse(
			message=f"Hello {name}! Essay Tutor API is running.",
			timestamp=utc_timestamp(),
			method=req.method.value,
			platform=req.platform.label,
			version=VERSION,
		)
	)
