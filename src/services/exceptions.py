"""Shared exceptions for service layer operations."""


class EmailAlreadyExistsError(Exception):
    """Raised when registering an email that already belongs to a user."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A user with email '{email}' already exists")
