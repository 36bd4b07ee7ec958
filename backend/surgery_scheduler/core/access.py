"""
Role registry: one admin, plus monotonically growing surgeon and patient sets.
"""

import logging
from typing import Set

from .errors import AuthorizationError
from .principal import Principal


class AccessRegistry:
    """
    Holds who may act as admin, surgeon and patient.

    There is no revocation; authorizing an existing member is a no-op on
    the sets.
    """

    def __init__(self, admin: Principal):
        self._admin = admin
        self._surgeons: Set[Principal] = {admin}
        self._patients: Set[Principal] = {admin}
        self.logger = logging.getLogger("service.AccessRegistry")

    @property
    def admin(self) -> Principal:
        return self._admin

    def is_admin(self, principal: Principal) -> bool:
        return principal == self._admin

    def is_surgeon(self, principal: Principal) -> bool:
        return principal in self._surgeons

    def is_patient(self, principal: Principal) -> bool:
        return principal in self._patients

    def require_admin(self, caller: Principal) -> None:
        if not self.is_admin(caller):
            raise AuthorizationError("Not authorized hospital admin")

    def require_surgeon(self, caller: Principal) -> None:
        if not self.is_surgeon(caller):
            raise AuthorizationError("Not authorized surgeon")

    def require_patient(self, caller: Principal) -> None:
        if not self.is_patient(caller):
            raise AuthorizationError("Not authorized patient")

    def authorize_surgeon(self, caller: Principal, target: Principal) -> None:
        self.require_admin(caller)
        self._surgeons.add(target)
        self.logger.info(f"Surgeon authorized: {target}")

    def authorize_patient(self, caller: Principal, target: Principal) -> None:
        self.require_admin(caller)
        self._patients.add(target)
        self.logger.info(f"Patient authorized: {target}")
