"""
Domain services - abstract interfaces.

Contains the token provider contract shared by the identity backends.
"""
