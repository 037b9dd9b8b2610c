import functools

from sqlalchemy.exc import SQLAlchemyError

from src.app.repositories.errors import PersistenceError


def translate_errors(func):
    """Wrap an async repository method so driver failures surface as PersistenceError"""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            raise PersistenceError(func.__qualname__, type(exc).__name__) from exc

    return wrapper
