"""social/ -- Profiles and posts for DevConnector.

Layer rule: social/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or auth/. Ownership is expressed as plain user
id strings; the auth checks live in auth/ownership.py and run in api/.
"""
