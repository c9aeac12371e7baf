"""Exception types shared across the package."""


class TermspeedError(Exception):
    """Base class for termspeed errors"""


class AcquisitionError(TermspeedError):
    """A collaborator (locator, ping) could not produce a value.

    Raised only inside the collaborator layer; callers see the fallback value.
    """


class OrchestratorFault(TermspeedError):
    """An event or value violated a state machine invariant.

    The orchestrator moves to the ERROR phase when one of these is raised
    by a transition.
    """
