"""
Error kinds raised by the service layer. Routers translate them into
HTTP responses.
"""


class AnalyticsError(Exception):
    """Base class for service-level errors"""


class NotAuthenticatedError(AnalyticsError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class SessionNotFoundError(AnalyticsError):
    def __init__(self, message: str = "Session not found or unauthorized"):
        super().__init__(message)


class RecommendationNotFoundError(AnalyticsError):
    def __init__(self, message: str = "Recommendation not found or unauthorized"):
        super().__init__(message)


class InvalidArgumentError(AnalyticsError, ValueError):
    pass
