"""Redis-backed storage primitives.

Learn: All persistent state lives in Redis — JSON documents under
per-entity keys, plus sorted-set / set indexes and TTL'd session keys.
Services get a client injected; nothing here holds a global connection.
"""
