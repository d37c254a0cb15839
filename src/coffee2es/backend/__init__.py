"""Backend package - prints the ESTree program as JavaScript source."""

from .printer import print_expression, print_program

__all__ = ["print_expression", "print_program"]
