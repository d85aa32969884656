from abc import ABC, abstractmethod
from typing import Any


class BaseAgent(ABC):
    """One single-shot piece of tutor logic: keyword dict in, result out. Holds no per-learner state."""

    @abstractmethod
    async def run(self, input_data: dict[str, Any]) -> Any:
        raise NotImplementedError
