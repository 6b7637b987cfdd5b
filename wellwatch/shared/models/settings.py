"""Per-user notification preferences read by the alert service."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class NotificationSettings:
    """Defaults apply to users who never opened the settings screen."""
    user_id: str
    notifications_enabled: bool = True
    risk_alerts_enabled: bool = True
    step_target: Optional[int] = None

    @property
    def allows_risk_alerts(self) -> bool:
        return self.notifications_enabled and self.risk_alerts_enabled
