from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class Workflow(ABC):
    @abstractmethod
    def run(self, input: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        pass
