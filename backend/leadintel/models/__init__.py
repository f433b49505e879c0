from leadintel.models.user import User
from leadintel.models.lead import Lead
from leadintel.models.status_history import LeadStatusHistory
from leadintel.models.interaction import LeadInteraction
from leadintel.models.enums import LeadStatus, LeadTemperature, InteractionType, TERMINAL_STATUSES

__all__ = [
    "User", "Lead", "LeadStatusHistory", "LeadInteraction",
    "LeadStatus", "LeadTemperature", "InteractionType", "TERMINAL_STATUSES",
]
