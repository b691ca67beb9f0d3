"""Error taxonomy for the rules core.

Every error is synchronous and scoped to the single action that raised it.
Callers decide how to surface the message; the core never retries.
"""


class GameLogicError(Exception):
    """Base exception for all rules-core errors."""
    pass


class InvalidInputError(GameLogicError):
    """Raised for malformed input: negative damage, stats, levels or effects."""
    pass


class InvalidStateTransitionError(GameLogicError):
    """Raised when an action is not allowed from the current state."""
    pass


class RequirementNotMetError(InvalidStateTransitionError):
    """Raised when a level or class requirement blocks an action."""

    def __init__(self, requirement: str, required: object, actual: object):
        super().__init__(f"Requirement not met: {requirement} needs {required}, has {actual}")
        self.requirement = requirement
        self.required = required
        self.actual = actual


class InsufficientGoldError(InvalidStateTransitionError):
    """Raised when a purchase costs more gold than the character holds."""

    def __init__(self, cost: int, available: int):
        super().__init__(f"Not enough gold: costs {cost}, have {available}")
        self.cost = cost
        self.available = available


class NotFoundError(GameLogicError):
    """Raised when an id (skill, objective, item, slot, quest) is unknown."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"Unknown {kind}: {identifier}")
        self.kind = kind
        self.identifier = identifier
