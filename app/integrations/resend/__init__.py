"""Resend email gateway."""

from .client import ResendClient

__all__ = ["ResendClient"]
