from sqlalchemy import Integer, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base
from app.models.common import IdMixin, TimestampMixin
from app.models.product import Product
from app.models.user import User

class Review(Base, IdMixin, TimestampMixin):
    __tablename__ = "reviews"
    review: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    product: Mapped[Product] = relationship(Product)
    user: Mapped[User] = relationship(User)
