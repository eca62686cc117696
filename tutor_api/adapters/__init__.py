from ..config.config import AppConfig
from ..neutral import PlatformKind
from .base import PlatformAdapter
from .framework import FrameworkAdapter
from .serverless import ServerlessAdapter

_ADAPTERS: dict[PlatformKind, type[PlatformAdapter]] = {
	PlatformKind.FRAMEWORK_NATIVE: FrameworkAdapter,
	PlatformKind.SERVERLESS_FUNCTION: ServerlessAdapter,
}


def build_adapter(config: AppConfig) -> PlatformAdapter:
	return _ADAPTERS[config.platform](config)


__all__ = ["FrameworkAdapter", "PlatformAdapter", "ServerlessAdapter", "build_adapter"]
