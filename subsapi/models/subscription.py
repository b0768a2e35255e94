from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, Integer, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column

from subsapi.models.base import Base


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="window"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # stored in UTC
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    subscription_type: Mapped[str] = mapped_column(String(255), nullable=False)

    user = relationship("User", back_populates="subscriptions")

    def __repr__(self) -> str:
        return (
            f"<Subscription id={self.id} user_id={self.user_id} "
            f"type={self.subscription_type} end_date={self.end_date}>"
        )
