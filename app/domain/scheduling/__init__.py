"""
Scheduling domain: booking appointments without double-booking.

The conflict rules live in ``intervals`` and ``conflicts`` as pure functions;
``service.SchedulingService`` wires them to storage inside one transaction
per write, and ``router`` exposes them under /appointments.
"""
