# app/db/base.py
from sqlalchemy import Enum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def str_enum(enum_cls, name: str) -> Enum:
    """Enum column storing the member values ("draft"), not the member names."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda cls: [member.value for member in cls],
        validate_strings=True,
    )
