from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """
    The base class for all of our SQLAlchemy (database) models.

    Tables declared in models.py inherit from this class, and
    init_models() creates them from its metadata at startup.
    """
    pass
