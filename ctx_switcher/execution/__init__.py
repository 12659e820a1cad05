"""
Variable resolution, environment assembly and process launching.
"""

from .launcher import capture_output, env_list_to_dict, environ_entries, launch
from .resolver import resolve
from .environment import assemble

__all__ = ['assemble', 'capture_output', 'env_list_to_dict', 'environ_entries', 'launch', 'resolve']
