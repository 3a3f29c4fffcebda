"""User registration use case."""

import logging
from typing import Optional

from ...exceptions import InvalidRequestError
from ..domain.entities import User
from ..state import RegistryState

logger = logging.getLogger(__name__)


class AddUserUseCase:
    """Register a new user with an empty device list."""

    def __init__(self, state: RegistryState):
        self.state = state

    async def execute(
        self,
        name: Optional[str],
        login: Optional[str],
        surname: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """
        Raises:
            InvalidRequestError: If name or login is missing
            DuplicateLoginError: If the login is taken
        """
        if not name:
            raise InvalidRequestError("Name is required", field="name")
        if not login:
            raise InvalidRequestError("Login is required", field="login")

        user = User(name=name, surname=surname, login=login, password=password)
        async with self.state.transaction() as doc:
            doc.add_user(user)

        logger.info(f"Added user {name} (login {login})")
        return user
