# Fichier: app/db/base_class.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base shared by every content studio model.
    Its metadata is what the startup hook creates.
    """
