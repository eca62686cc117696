from pathlib import Path

from ..neutral import NeutralRequest, NeutralResponse

ENTRY_DOCUMENT = "index.html"

FALLBACK_SHELL = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Essay Tutor</title>
  </head>
  <body>
    <div id="root"></div>
  </body>
</html>
"""


class StaticAssets:
	"""Resolves request paths against a built single-page application."""

	def __init__(self, root: str | Path) -> None:
		self.root = Path(root).resolve()

	def resolve(self, request_path: str) -> Path | None:
		relative = request_path.lstrip("/")
		if not relative:
			return None
		candidate = (self.root / relative).resolve()
		if not candidate.is_relative_to(self.root) or not candidate.is_file():
			return None
		return candidate

	def entry(self) -> Path | None:
		candidate = self.root / ENTRY_DOCUMENT
		return candidate if candidate.is_file() else None


async def handle_spa_fallback(req: NeutralRequest, res: NeutralResponse, assets: StaticAssets) -> None:
	asset = assets.resolve(req.path)
	if asset is not None:
		res.stream_file(asset)
		return
	entry = assets.entry()
	res.set_header("cache-control", "no-cache")
	if entry is None:
		res.send_raw(FALLBACK_SHELL, media_type="text/html; charset=utf-8")
		return
	res.stream_file(entry, media_type="text/html; charset=utf-8")
