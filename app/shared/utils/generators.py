"""Identifier generation for workflows, tasks and ledger entries."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """New CUID2 string; primary key of every stored row."""
    return str(_cuid())
