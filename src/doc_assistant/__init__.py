"""Document summarization and question answering package."""

from .config import ChunkingConfig, EndpointConfig
from .errors import CompletionError, ErrorKind

__all__ = ["ChunkingConfig", "CompletionError", "EndpointConfig", "ErrorKind"]
