"""
Custom Exceptions - Nexus Intelligence Engine
nexus_engine/core/exceptions.py

Typed failures surfaced to callers. Input defects and partial data-source
failures are recovered locally and never appear here.
"""

from typing import Optional


class NexusException(Exception):
    """Base exception for the intelligence engine."""

    pass


class ExternalServiceException(NexusException):
    """An external collaborator rejected, failed or returned garbage."""

    def __init__(self, service: str, message: str):
        self.service = service
        self.message = message
        super().__init__(f"{service}: {message}")


class DataSourceException(ExternalServiceException):
    """Economic/regional data source failure."""

    def __init__(self, message: str = "Economic data source failed"):
        super().__init__("economic_data", message)


class TextGenerationException(ExternalServiceException):
    """Text-generation service failure or unparseable response."""

    def __init__(self, message: str = "Text generation failed"):
        super().__init__("text_generation", message)


class StageOrderException(NexusException):
    """Pipeline stage invoked without its required predecessor."""

    def __init__(self, stage: str, expected: str, actual: str):
        self.stage = stage
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Stage '{stage}' requires a {expected} pipeline state, got {actual}"
        )


class StageTimeoutException(NexusException):
    """Pipeline stage exceeded its deadline."""

    def __init__(self, stage: str, timeout: Optional[float]):
        self.stage = stage
        self.timeout = timeout
        super().__init__(f"Stage '{stage}' timed out after {timeout}s")
