"""
todosync - versioned storage for a terminal todo list

Every task and project mutation becomes a git or jj commit, optionally
pulled before and pushed after.
"""

__version__ = "0.4.0"

# Re-export core models for convenience
from todosync.core.config.models import TodosyncConfig
from todosync.core.vcs import ChangeSet, CommitOrchestrator, Done, Failed

__all__ = ["ChangeSet", "CommitOrchestrator", "Done", "Failed", "TodosyncConfig", "__version__"]
