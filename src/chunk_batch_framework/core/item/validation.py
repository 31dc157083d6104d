"""Item validation: outcomes, the validator contract, and common validators."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating a single item.

    Consumed immediately by the item processor and never persisted.
    """

    accepted: bool
    reason: str | None = None

    def __post_init__(self) -> None:
        if not self.accepted and not self.reason:
            raise ValueError("A rejected outcome requires a reason")

    @classmethod
    def accept(cls) -> ValidationOutcome:
        return _ACCEPTED

    @classmethod
    def reject(cls, reason: str) -> ValidationOutcome:
        return cls(accepted=False, reason=reason)


_ACCEPTED = ValidationOutcome(accepted=True)


class Validator(ABC, Generic[T]):
    """Pure, side-effect free check over a single item.

    Validators are total: they must return an outcome for every well-typed
    input and never raise. Malformed records are the source's concern.
    """

    @abstractmethod
    def validate(self, item: T) -> ValidationOutcome:
        """Return whether *item* is accepted, with a reason when it is not."""
        ...


class PredicateValidator(Validator[T]):
    """Validator backed by a boolean predicate.

    An exception raised by the predicate is logged and treated as a
    rejection so the validator stays total.

    Args:
        predicate: Returns ``True`` for acceptable items.
        reason: Rejection reason, or a callable building one from the item.
    """

    def __init__(
        self,
        predicate: Callable[[T], bool],
        reason: str | Callable[[T], str] = "validation failed",
    ) -> None:
        self._predicate = predicate
        self._reason = reason

    def _reason_for(self, item: T) -> str:
        if callable(self._reason):
            return self._reason(item)
        return self._reason

    def validate(self, item: T) -> ValidationOutcome:
        try:
            ok = bool(self._predicate(item))
        except Exception as exc:
            logger.debug("Validation predicate raised for %r", item, exc_info=True)
            return ValidationOutcome.reject(f"{self._reason_for(item)} ({type(exc).__name__}: {exc})")
        if ok:
            return ValidationOutcome.accept()
        return ValidationOutcome.reject(self._reason_for(item))


class CompositeValidator(Validator[T]):
    """Runs validators in order and returns the first rejection."""

    def __init__(self, *validators: Validator[T]) -> None:
        self._validators: tuple[Validator[T], ...] = validators

    def validate(self, item: T) -> ValidationOutcome:
        for validator in self._validators:
            outcome = validator.validate(item)
            if not outcome.accepted:
                return outcome
        return ValidationOutcome.accept()
