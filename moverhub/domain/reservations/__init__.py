"""
Reservations Domain

Creates a reservation for a provider slot:
resolve the weekday rule, confirm capacity from live counts, confirm the
quote, insert the scheduled job, then mirror the customer booking and
notify the provider.

Structure:
- schemas.py        Request body
- errors.py         Failure taxonomy mapped to HTTP responses
- state_machine.py  Workflow states and transitions
- service.py        ReservationOrchestrator
- router.py         POST /reservations
"""
