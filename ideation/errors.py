"""Domain errors raised below the router layer."""


class MalformedRecordError(Exception):
    """A stored row could not be converted into its typed record."""

    def __init__(self, entity: str, entity_id: str, detail: str):
        self.entity = entity
        self.entity_id = entity_id
        self.detail = detail
        super().__init__(f"Malformed {entity} record {entity_id!r}: {detail}")


class NavigationError(Exception):
    """A view transition is not allowed for the current session."""
