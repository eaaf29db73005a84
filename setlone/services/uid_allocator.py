from __future__ import annotations

import logging
import random
from typing import Callable, Optional, Protocol

from setlone.config.settings import settings
from setlone.errors import AllocationExhausted
from setlone.utils.validators import UID_MAX, UID_MIN

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


class UIDAllocator:
    """Draws random 7-digit UIDs until one is not taken.

    The existence check is advisory only: nothing is reserved, so the unique
    index on users.uid still decides who wins a concurrent insert.
    """

    def __init__(
        self,
        exists: Callable[[str], bool],
        rng: Optional[RandomSource] = None,
        max_attempts: Optional[int] = None,
    ):
        self.exists = exists
        self.rng = rng or random.SystemRandom()
        self.max_attempts = settings.uid_max_attempts if max_attempts is None else max_attempts

    def candidate(self) -> str:
        return str(self.rng.randint(UID_MIN, UID_MAX))

    def allocate(self) -> str:
        for attempt in range(1, self.max_attempts + 1):
            uid = self.candidate()
            if not self.exists(uid):
                if attempt > 1:
                    logger.debug("uid_allocated_after_collisions", extra={"attempts": attempt})
                return uid

        logger.error("uid_allocation_exhausted", extra={"attempts": self.max_attempts})
        raise AllocationExhausted(attempts=self.max_attempts)
