"""Exceptions raised by the favorites package."""


class FavoritesError(Exception):
    """Base exception for favorites operations."""

    pass


class UnauthenticatedError(FavoritesError):
    """Raised when a favorites operation needs a signed-in user and there is none."""

    pass


class FavoriteStoreError(FavoritesError):
    """Raised when the favorites document cannot be read or written."""

    pass
