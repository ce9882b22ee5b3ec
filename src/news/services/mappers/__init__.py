"""
Source mappers
Each mapper normalizes raw entries of one provider into candidates
"""

from .base_mapper import BaseMapper
from .devto_mapper import DevToMapper, resolve_link
from .newsapi_mapper import NewsApiMapper

__all__ = [
    'BaseMapper',
    'DevToMapper',
    'NewsApiMapper',
    'resolve_link'
]
