"""Exception hierarchy for synergi."""


class SynergiError(Exception):
    """Base class for all synergi errors."""


class InvalidRequestError(SynergiError):
    """Malformed request payload (empty message, bad pagination, ...)."""


class ConversationNotFoundError(SynergiError):
    """The conversation does not exist or belongs to another user."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id


class LocationNotFoundError(SynergiError):
    """A location could not be extracted or resolved."""


class ToolError(SynergiError):
    """A tool failed to run; surfaced to the model as an unsuccessful result."""
