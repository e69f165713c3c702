"""
Template variable resolution.
Resolves {{dotted.path}} references against a flow's data object.
"""

from .accessor import SpecialVariables, access
from .resolver import expand_variable, normalize_quotes, resolve_variables
from .result import ResolutionResult, Status
from .tokenizer import extract_references, scan, tokenize

__all__ = [
    'SpecialVariables',
    'ResolutionResult',
    'Status',
    'access',
    'expand_variable',
    'extract_references',
    'normalize_quotes',
    'resolve_variables',
    'scan',
    'tokenize',
]
