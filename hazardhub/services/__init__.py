"""
Services layer - business logic of the hazard subsystem.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Stores do storage only; engines apply rules; HazardService wires them
- Expected business failures are returned as CommandResult, never raised
"""
