"""Utility functions and classes for sqlrepo."""

from sqlrepo.utils import logging, serializers, type_guards

__all__ = ("logging", "serializers", "type_guards")
