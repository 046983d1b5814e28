"""Identifier generation for ledger entities."""

from uuid import uuid4


def new_id() -> str:
    """
    Issue a new entity identifier.

    UUID4 draws from os.urandom, so ids are unique across all
    collections without any shared counter.
    """
    return str(uuid4())
