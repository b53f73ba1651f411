from sqlalchemy import Column, Integer, Numeric, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="active")
    min_rate = Column(Numeric(10, 2), nullable=False, default=0)
    min_expedite_rate = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(Text, nullable=False)

    jobs = relationship("Job", back_populates="category")
