"""
Remote side.

- gateway.py: httpx-based gateway with retry policy and replay cache for reads
"""
