# terraai/core/exceptions.py
"""
Custom exceptions for the agricultural data service
"""


class TerraAIError(Exception):
    """Base exception for the TerraAI backend"""
    pass


class AgentError(TerraAIError):
    """Agent-related errors"""
    pass


class AgentConfigError(TerraAIError):
    """Agent configuration errors"""
    pass


class ProviderError(TerraAIError):
    """External data provider errors, recovered with simulated readings"""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class NetworkError(ProviderError):
    """Provider unreachable, timed out or answered with a non-2xx status"""

    def __init__(self, message: str, provider: str = "unknown", status: int = None):
        super().__init__(message, provider)
        self.status = status


class MalformedResponseError(ProviderError):
    """Provider answered with a payload of unexpected shape"""
    pass


class InvalidRequestError(TerraAIError, ValueError):
    """Caller input errors; these are surfaced instead of degraded"""
    pass


class InvalidCoordinateError(InvalidRequestError):
    """Longitude/latitude missing, non-finite or out of range"""

    def __init__(self, longitude, latitude, reason: str = "out of range"):
        super().__init__(f"Invalid coordinates (lon={longitude}, lat={latitude}): {reason}")
        self.longitude = longitude
        self.latitude = latitude
