from .config import VERSION, AppConfig, UploadLimits, detect_platform, read_env
from .logging_config import configure_logging

__all__ = ["VERSION", "AppConfig", "UploadLimits", "configure_logging", "detect_platform", "read_env"]
