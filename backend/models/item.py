"""Item model - one linked institution connection and its Plaid access token."""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import utc_now


class Item(Base):
    """A Plaid Item representing a linked financial institution.

    The primary key is Plaid's own ``item_id``. ``cursor`` is the position
    in the incremental transaction feed; ``None`` means the item has never
    been synced. Only the transaction sync service writes it.
    """

    __tablename__ = "items"

    id = Column(String(255), primary_key=True)
    access_token = Column(Text, nullable=False)
    institution_id = Column(String(255), nullable=True)
    institution_name = Column(String(255), nullable=True)
    cursor = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now)

    # Relationships
    accounts = relationship(
        "Account",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="Account.name",
    )

    def __repr__(self) -> str:
        # Never include the access token
        return f"<Item id={self.id!r} institution={self.institution_name!r}>"
