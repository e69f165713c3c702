"""CLI command handlers."""

from .resolve import resolve_template
from .refs import list_references

__all__ = ['resolve_template', 'list_references']
