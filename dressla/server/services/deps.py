"""
Request dependencies shared by the API routers.
"""

from typing import Annotated, Optional

from fastapi import Depends

from dressla.core.database.entities.users import User
from dressla.core.database.repositories import SqlRepoBundle, get_repos

from .payment_gateway import BogPaymentGateway, get_payment_gateway
from .security import get_current_user, get_optional_user, require_admin, require_admin_or_support

ReposDep = Annotated[SqlRepoBundle, Depends(get_repos)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]
AdminDep = Annotated[User, Depends(require_admin)]
StaffDep = Annotated[User, Depends(require_admin_or_support)]
PaymentGatewayDep = Annotated[BogPaymentGateway, Depends(get_payment_gateway)]
