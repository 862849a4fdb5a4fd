from .task import Task, TaskCompletion
from .user import User

# Export all models for easy importing
__all__ = ["Task", "TaskCompletion", "User"]
