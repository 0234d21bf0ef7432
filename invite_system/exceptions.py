"""
Exceptions raised at the boundary between the tracker and its collaborators.
"""


class InviteSystemError(Exception):
    """Base class for invite tracker errors."""
    pass


class TrackingUnavailable(InviteSystemError):
    """Invite usage snapshot could not be fetched (missing permission)."""

    def __init__(self, community_id: str, message: str = "invite tracking unavailable"):
        self.community_id = community_id
        super().__init__(f"{message} (community={community_id})")


class InviteUnavailable(InviteSystemError):
    """A personal invite could not be created."""

    def __init__(self, user_id: str, cause: Exception = None):
        self.user_id = user_id
        self.cause = cause
        super().__init__(f"could not create personal invite for user {user_id}: {cause}")
