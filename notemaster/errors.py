"""Exception hierarchy shared by the NoteMaster modules."""


class NoteMasterError(Exception):
    """Base class for all NoteMaster errors."""


class InvalidChallengeShape(NoteMasterError, ValueError):
    """A challenge does not carry the fields its variant requires."""


class MalformedNoteIdentifier(NoteMasterError, ValueError):
    """A device or adapter supplied a note identifier that cannot be parsed."""


class StaleAdvance(NoteMasterError):
    """A delayed advance fired for a challenge that has since been replaced."""

    def __init__(self, advance_generation: int, current_generation: int) -> None:
        super().__init__(
            f"Advance for challenge #{advance_generation} is stale "
            f"(current challenge is #{current_generation})."
        )
        self.advance_generation = advance_generation
        self.current_generation = current_generation
