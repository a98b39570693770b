# company.py
from sqlalchemy import Column, Integer, String
from jobfinder.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), index=True, nullable=False)
    location = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)
