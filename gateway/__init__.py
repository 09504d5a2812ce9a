"""
The Fresh Bonds API gateway.

Forwards ``/api/users`` to the user service and ``/api/products`` to the
product service. The gateway makes no authorization decisions; each service
verifies the bearer token itself.
"""
