# (c) Copyright Datacraft, 2026
"""Declarative base for taskhub ORM models."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
	pass
