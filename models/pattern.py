from sqlalchemy import Column, String, Integer, JSON

from database.connection import Base


class Pattern(Base):
    """
    Pattern model - a named winning shape on the 5x5 card
    cells use printed-card numbering 1..25; 13 is the FREE center and is ignored
    """
    __tablename__ = "patterns"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    cells = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<Pattern(id={self.id}, name={self.name})>"
