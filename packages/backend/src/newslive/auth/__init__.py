"""Authentication.

Learn: Users log in with email/password and get an opaque bearer
token. The token is just a Redis key (session:{token} → user id)
with a 24h TTL — no JWT, so logout really revokes it.
"""
