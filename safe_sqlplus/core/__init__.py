"""
Core module for safe-sqlplus.

This module contains the building blocks shared by every stage of a
session: command tokenizing, scrubbable secret buffers and connection
template expansion.
"""

from safe_sqlplus.core.secret import SECRET_MAX, SecretBuffer
from safe_sqlplus.core.template import (
    PASSWORD_PLACEHOLDER,
    USERNAME_PLACEHOLDER,
    expand_template,
)
from safe_sqlplus.core.tokenizer import ArgumentVector, split_arguments, tokenize

__all__ = [
    "ArgumentVector",
    "SECRET_MAX",
    "SecretBuffer",
    "PASSWORD_PLACEHOLDER",
    "USERNAME_PLACEHOLDER",
    "expand_template",
    "split_arguments",
    "tokenize",
]
