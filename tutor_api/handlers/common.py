from datetime import datetime, timezone


def utc_timestamp() -> str:
	return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
