from ..config.config import VERSION
from ..models import HealthResponse
from ..neutral import NeutralRequest, NeutralResponse
from .common import utc_timestamp


async def handle_health(req: NeutralRequest, res: NeutralResponse) -> None:
	res.set_header("cache-control", "no-store")
	res.send_json(HealthResponse(timestamp=utc_timestamp(), platform=req.platform.label, version=VERSION))
