"""
Expression engine abstraction. The table core only ever talks to an engine through
`BaseExpressionEngine.parse`, so the symbolic backend can be swapped per deployment.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass
class Statement:
    """Resolved, engine-validated form of a parsed expression."""
    kind: str
    text: str
    name: Optional[str] = None
    expression: Optional[str] = None
    units: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'kind': self.kind,
            'text': self.text,
            'name': self.name,
            'expression': self.expression,
            'units': self.units,
        }


ParseResult = Tuple[Optional[Statement], Optional[str]]


class BaseExpressionEngine(ABC):
    name = 'base'

    @abstractmethod
    async def parse(self, text: str, kind: str) -> ParseResult:
        """
        Parse `text` as a field of the given kind.

        Returns:
            (statement, None) on success (statement may be None for blank input)
            (None, error_message) on failure
        """
        ...


_ENGINES: Dict[str, type] = {}


def register_engine(cls):
    _ENGINES[cls.name] = cls
    return cls


def get_engine(name: str) -> BaseExpressionEngine:
    name = name.lower()
    if name not in _ENGINES:
        raise ValueError(f"Unsupported expression engine '{name}'. Supported: {list(_ENGINES)}")
    return _ENGINES[name]()


def list_engines() -> list:
    return sorted(_ENGINES)
