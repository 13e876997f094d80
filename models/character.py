from sqlalchemy import Column, String, Index

from models.base_model import BaseModel, Base


class Character(BaseModel, Base):
    __tablename__ = "characters"

    name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)

    __table_args__ = (
        Index("ix_characters_name", "name"),
    )
