class EntityNotFoundError(RuntimeError):
    """Raised when a workspace, member, expense or user cannot be located."""


class EntityConflictError(RuntimeError):
    """Raised when a unique constraint is violated."""


class OrphanedMemberError(RuntimeError):
    """Raised when a member's workspace reference does not resolve."""

    def __init__(self, member_id, workspace_id):
        super().__init__(f"Member {member_id} references missing workspace {workspace_id}")
        self.member_id = member_id
        self.workspace_id = workspace_id


class InvalidResetTokenError(RuntimeError):
    """Raised for an unknown or expired password reset token."""
