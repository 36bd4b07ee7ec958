"""
Sealed values and their provider.

A SealedValue is an opaque capability: only principals holding a read
grant may reveal the plaintext behind it. The in-memory provider keeps
plaintext in a private vault and binds each handle to an HMAC commitment;
a real deployment swaps in a provider backed by an encryption service
without touching the callers.
"""

import hashlib
import hmac
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Set

from .errors import AuthorizationError, NotFound, ValidationError
from .principal import Principal, CORE_PRINCIPAL


SUPPORTED_WIDTHS = (8, 16, 32)


@dataclass(frozen=True)
class SealedValue:
    """Opaque handle to a sealed unsigned integer."""

    handle: str
    width: int
    tag: str

    def __repr__(self) -> str:
        return f"SealedValue(handle={self.handle[:8]}..., width={self.width})"


class SealedValueProvider(ABC):
    """Creates sealed values and gates who may read them."""

    @abstractmethod
    def seal(self, plaintext: int, width: int = 8) -> SealedValue:
        pass

    @abstractmethod
    def grant_read(self, sealed: SealedValue, principal: Principal) -> None:
        pass

    @abstractmethod
    def can_read(self, sealed: SealedValue, principal: Principal) -> bool:
        pass

    @abstractmethod
    def reveal(self, sealed: SealedValue, principal: Principal) -> int:
        """Return the plaintext, raising AuthorizationError without a grant."""
        pass


class InMemorySealedValueProvider(SealedValueProvider):
    """
    Process-local provider.

    Usage:
        provider = InMemorySealedValueProvider(key="...")
        sealed = provider.seal(7)
        provider.grant_read(sealed, patient)
        provider.reveal(sealed, patient)  # -> 7
    """

    def __init__(self, key: str):
        self._key = key.encode("utf-8")
        self._vault: Dict[str, int] = {}
        self._grants: Dict[str, Set[Principal]] = {}
        self.logger = logging.getLogger("service.SealedValueProvider")

    def seal(self, plaintext: int, width: int = 8) -> SealedValue:
        if width not in SUPPORTED_WIDTHS:
            raise ValidationError(f"Unsupported width: {width}")
        if isinstance(plaintext, bool) or not isinstance(plaintext, int):
            raise ValidationError("Sealed plaintext must be an integer")
        if plaintext < 0 or plaintext >= (1 << width):
            raise ValidationError(f"Value does not fit in uint{width}")

        handle = uuid.uuid4().hex
        sealed = SealedValue(handle=handle, width=width, tag=self._commit(handle, plaintext))
        self._vault[handle] = plaintext
        self._grants[handle] = set()
        return sealed

    def grant_read(self, sealed: SealedValue, principal: Principal) -> None:
        self._grants_for(sealed).add(principal)

    def can_read(self, sealed: SealedValue, principal: Principal) -> bool:
        return principal in self._grants_for(sealed)

    def reveal(self, sealed: SealedValue, principal: Principal) -> int:
        if not self.can_read(sealed, principal):
            self.logger.warning(f"Reveal denied for {principal} on {sealed!r}")
            raise AuthorizationError("Principal holds no read grant for this value")

        plaintext = self._vault[sealed.handle]
        if not hmac.compare_digest(sealed.tag, self._commit(sealed.handle, plaintext)):
            raise AuthorizationError("Sealed value commitment mismatch")
        return plaintext

    def _grants_for(self, sealed: SealedValue) -> Set[Principal]:
        grants = self._grants.get(sealed.handle)
        if grants is None:
            raise NotFound("Unknown sealed value")
        return grants

    def _commit(self, handle: str, plaintext: int) -> str:
        message = f"{handle}:{plaintext}".encode("utf-8")
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()


class UrgencyComparator(ABC):
    """
    Comparison hook used by assignment selection.

    Implementations may compare homomorphically; the selector only asks
    "is a strictly greater than b" and, for the winner, what to disclose.
    """

    @abstractmethod
    def greater(self, a: SealedValue, b: SealedValue) -> bool:
        pass

    @abstractmethod
    def disclose(self, value: SealedValue) -> int:
        pass


class RevealingComparator(UrgencyComparator):
    """Reveals both operands as the core principal and compares in the clear."""

    def __init__(self, provider: SealedValueProvider, principal: Principal = CORE_PRINCIPAL):
        self.provider = provider
        self.principal = principal

    def greater(self, a: SealedValue, b: SealedValue) -> bool:
        return self.provider.reveal(a, self.principal) > self.provider.reveal(b, self.principal)

    def disclose(self, value: SealedValue) -> int:
        return self.provider.reveal(value, self.principal)
