from .greeting import handle_greeting
from .health import handle_health
from .processing import handle_unified_processing
from .spa import StaticAssets, handle_spa_fallback

__all__ = [
	"StaticAssets",
	"handle_greeting",
	"handle_health",
	"handle_spa_fallback",
	"handle_unified_processing",
]
