"""Data models."""

from .card import Card, Deck, CandidateFields, COMPARABLE_FIELDS, TEXT_FIELDS

__all__ = ['Card', 'Deck', 'CandidateFields', 'COMPARABLE_FIELDS', 'TEXT_FIELDS']
