from .extractor import UploadExtractor
from .storage import MemoryStorage, ScratchDirStorage, UploadStorage

__all__ = ["MemoryStorage", "ScratchDirStorage", "UploadExtractor", "UploadStorage"]
