"""Shared schema exports."""

from .account import AccountForm, AccountSummary

__all__ = [
    "AccountForm",
    "AccountSummary",
]
