"""Risk engine exceptions.

Input problems never raise; only collaborator failures do.
"""


class RiskEngineError(Exception):
    """Base exception for risk engine errors."""
    pass


class HealthDataUnavailableError(RiskEngineError):
    """Step history or app-usage counts could not be fetched."""
    pass


class MoodHistoryUnavailableError(RiskEngineError):
    """Mood history could not be fetched.

    Mental-health scoring drives alerting, so no assessment is produced
    from missing mood data.
    """
    pass
