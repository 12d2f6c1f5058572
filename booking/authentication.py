"""
Token authentication for the booking API.

Token issuance lives outside this service; requests carry an
``Authorization: Token <key>`` header resolved against DRF's authtoken
table, and the authenticated user is the patient every ledger operation
is scoped to.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication under a stable project import path."""

    keyword = 'Token'
