from nexus_engine.core.exceptions import (
    DataSourceException,
    ExternalServiceException,
    NexusException,
    StageOrderException,
    StageTimeoutException,
    TextGenerationException,
)

__all__ = [
    "NexusException",
    "ExternalServiceException",
    "DataSourceException",
    "TextGenerationException",
    "StageOrderException",
    "StageTimeoutException",
]
