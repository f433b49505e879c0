"""Domain errors raised by the lead pipeline and its collaborators."""


class LeadPipelineError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(LeadPipelineError):
    """A referenced lead, user or related entity does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")


class InvalidStatusError(LeadPipelineError):
    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid lead status: {status!r}")


class TerminalStateError(LeadPipelineError):
    def __init__(self, lead_id, status: str):
        self.lead_id = lead_id
        self.status = status
        super().__init__(f"Lead {lead_id} is {status}; closed leads cannot change status")


class ValidationError(LeadPipelineError):
    """Invalid input to a mutating operation."""
