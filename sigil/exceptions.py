"""
Custom exceptions for the sigil tracker.
Provides specific exception types so the HTTP layer can map them to status codes.
"""


class SigilException(Exception):
    """Base exception for the sigil tracker"""
    pass


class TaskNotFoundException(SigilException):
    """Raised when a task definition is not found"""
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class RecordNotFoundException(SigilException):
    """Raised when a record is not found"""
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record with ID {record_id} not found")


class HighGoalNotFoundException(SigilException):
    """Raised when a high goal is not found"""
    def __init__(self, goal_id: str):
        self.goal_id = goal_id
        super().__init__(f"High goal with ID {goal_id} not found")


class BreachNotFoundException(SigilException):
    """Raised when a breach is not found"""
    def __init__(self, breach_id: str):
        self.breach_id = breach_id
        super().__init__(f"Breach with ID {breach_id} not found")


class TodoNotFoundException(SigilException):
    """Raised when a pact is not found"""
    def __init__(self, todo_id: str):
        self.todo_id = todo_id
        super().__init__(f"Pact with ID {todo_id} not found")


class SkillNotFoundException(SigilException):
    """Raised when a constellation node is not found"""
    def __init__(self, skill_id: str):
        self.skill_id = skill_id
        super().__init__(f"Skill with ID {skill_id} not found")


class FriendNotFoundException(SigilException):
    """Raised when comparing with a user that is not a friend"""
    def __init__(self, friend_id: str):
        self.friend_id = friend_id
        super().__init__(f"User {friend_id} is not in the friends list")


class InvalidTimeFormatException(SigilException):
    """Raised when time format is invalid"""
    def __init__(self, time_str: str):
        self.time_str = time_str
        super().__init__(f"Invalid time format: {time_str}. Expected HH:MM")


class ValidationException(SigilException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
