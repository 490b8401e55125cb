"""
Import all models to ensure they are registered with SQLAlchemy
"""
from app.models.movie import Movie

__all__ = [
    "Movie",
]
