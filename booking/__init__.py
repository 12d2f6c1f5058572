"""Appointment booking app.

Holds the slot store, the per-patient appointment ledger, the expiration
sweeper and the prescription generator, plus the REST routes that expose
them.
"""
