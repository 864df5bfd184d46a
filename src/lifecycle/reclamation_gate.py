import threading
from typing import Optional

from models.enums import ReclamationOrigin


class ReclamationGate:
    """
    Admits exactly one reclamation pass, graceful or emergency.

    The winner's origin is recorded under the same lock that decides the
    race, so a refused caller always sees a holder. The gate never reopens.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._holder: Optional[ReclamationOrigin] = None

    def try_enter(self, origin: ReclamationOrigin) -> bool:
        with self._lock:
            if self._holder is not None:
                return False
            self._holder = origin
            return True

    @property
    def holder(self) -> Optional[ReclamationOrigin]:
        return self._holder

    @property
    def is_closed(self) -> bool:
        return self._holder is not None
