from sqlalchemy import Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from calllog.database import Base


class CallLog(Base):
    __tablename__ = "call_logs"
    # Identity of a call event is (phone_number, date_time); this also indexes the dedup lookup
    __table_args__ = (
        UniqueConstraint("phone_number", "date_time", name="uq_call_logs_phone_number_date_time"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date_time: Mapped[str] = mapped_column(String(64), nullable=False)
    duration: Mapped[float] = mapped_column(Float, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown")
    phone_number: Mapped[str] = mapped_column(String(64), nullable=False)
    call_type: Mapped[str] = mapped_column("type", String(32), nullable=False)

    @property
    def dedup_key(self) -> str:
        return f"{self.phone_number}|{self.date_time}"
