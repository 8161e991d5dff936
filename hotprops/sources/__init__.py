from .expander import VariablesExpander, system_variables
from .resolver import SourceResolver

__all__ = [
    'VariablesExpander',
    'system_variables',
    'SourceResolver'
]
