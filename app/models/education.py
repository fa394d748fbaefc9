"""Education record model."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class UserEducation(Base):
    """One education entry of a user (read-only to the application pipeline)."""

    __tablename__ = "user_education"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    school = Column(String(255))
    degree = Column(String(255))  # free text: "B.Tech", "MBA", "12th"...
    field = Column(String(255))
    start_date = Column(Date)
    end_date = Column(Date)

    user = relationship("User", back_populates="education")

    def __repr__(self):
        return f"<UserEducation {self.user_id}: {self.degree}>"
