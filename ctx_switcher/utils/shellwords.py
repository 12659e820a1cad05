"""
Shell-word tokenizing with leading variable assignments.
Path: ctx_switcher/utils/shellwords.py
"""

import re
import shlex
from typing import List, Tuple

_ASSIGNMENT = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*=')


def is_assignment(token: str) -> bool:
    return bool(_ASSIGNMENT.match(token))


def parse_with_envs(line: str) -> Tuple[List[str], List[str]]:
    """
    Split a command line into leading NAME=value assignments and an argv.

    `FOO=1 BAR="a b" cmd x=1` gives (["FOO=1", "BAR=a b"], ["cmd", "x=1"]).
    Only assignments before the first non-assignment word are extracted.

    Raises:
        ValueError: If the line cannot be tokenized (e.g. unbalanced quotes)
    """
    words = shlex.split(line, posix=True)
    envs: List[str] = []
    for index, word in enumerate(words):
        if not is_assignment(word):
            return envs, words[index:]
        envs.append(word)
    return envs, []
