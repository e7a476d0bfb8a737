"""rbgs: revision history and update gating for RoleBasedGroup controllers."""

__version__ = "0.1.0"
