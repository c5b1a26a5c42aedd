# storefront/repositories/discount_repo.py
from sqlmodel import Session, select

from storefront.models.discount import Discount


class DiscountRepository:

    def get_by_code(self, session: Session, code: str) -> Discount | None:
        stmt = select(Discount).where(Discount.code == code)
        return session.exec(stmt).first()

    def create(self, session: Session, discount: Discount) -> Discount:
        session.add(discount)
        session.commit()
        session.refresh(discount)
        return discount
