"""
Router block specialization: prompt synthesis and destination selection.
"""

from .prompt import build_prompt
from .candidates import candidates_from_workflow
from .selector import DestinationSelector, RoutingSession

__all__ = [
    'build_prompt',
    'candidates_from_workflow',
    'DestinationSelector',
    'RoutingSession',
]
