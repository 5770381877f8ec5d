# app/domains/models/__init__.py

"""
모든 도메인의 SQLModel 테이블 모델을 한 곳에서 임포트합니다.
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다. (create_all, Alembic autogenerate)
"""

# usr (User, UserRole)
from app.domains.usr.models import User, UserRole

# inv (ProductGroup, Warehouse, Customer, Item, Transaction)
from app.domains.inv.models import ProductGroup, Warehouse, Customer, Item, Transaction, TransactionType

# ipm (IpRange, IpDetail)
from app.domains.ipm.models import IpRange, IpDetail

# rnt (Rental)
from app.domains.rnt.models import Rental


#  `from app.domains.models import *` 구문으로 임포트될 모델 목록 정의
__all__ = [
    # usr
    "User", "UserRole",
    # inv
    "ProductGroup", "Warehouse", "Customer", "Item", "Transaction", "TransactionType",
    # ipm
    "IpRange", "IpDetail",
    # rnt
    "Rental",
]
