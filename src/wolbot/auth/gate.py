"""Allow-list authorization for inbound chat commands."""

import logging
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """
    Membership check against a fixed set of caller ids.

    Denied callers get no reply at all; the denial is only logged for the
    operator.
    """

    def __init__(self, allowed: Iterable[int]) -> None:
        self._allowed: frozenset[int] = frozenset(allowed)

    @classmethod
    def from_config(cls, values: Any) -> "AuthorizationGate":
        """
        Build a gate from the raw ``allowed_users`` config value.

        Raises:
            ValueError: If the value is not a list of integer ids
        """
        if not isinstance(values, list):
            raise ValueError("'allowed_users' must be a list of user ids")
        ids: list[int] = []
        for value in values:
            # bool is an int subclass; `true` in YAML is not a user id
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"'allowed_users' entries must be integers, got {value!r}")
            ids.append(value)
        return cls(ids)

    @property
    def allowed(self) -> frozenset[int]:
        return self._allowed

    def check(self, caller_id: int) -> bool:
        """Return True if the caller may issue commands."""
        if caller_id in self._allowed:
            return True
        logger.warning("Access denied for user ID: %s", caller_id)
        return False

    def __len__(self) -> int:
        return len(self._allowed)
