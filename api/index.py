from mangum import Mangum

from tutor_api.config import configure_logging
from tutor_api.neutral import PlatformKind
from tutor_api.server import ExecutionContext

configure_logging()

# One execution context per function instance; the wired app is built on the
# first invocation and reused while the instance stays warm.
app = ExecutionContext(PlatformKind.SERVERLESS_FUNCTION)

# AWS Lambda / API Gateway proxy events.
handler = Mangum(app, lifespan="off")
