"""Domain services: the match update cycle and viewer notifications.

HTTP routes and socket handlers import from here, keeping transport
concerns separate from scoring rules.
"""
