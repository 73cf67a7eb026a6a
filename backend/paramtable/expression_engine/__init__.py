from .engine import BaseExpressionEngine, Statement, ParseResult, get_engine, list_engines, register_engine
from .basic_engine import BasicExpressionEngine

__all__ = [
    'BaseExpressionEngine', 'Statement', 'ParseResult',
    'get_engine', 'list_engines', 'register_engine',
    'BasicExpressionEngine',
]
