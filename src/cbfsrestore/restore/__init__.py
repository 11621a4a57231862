"""
The restore pipeline: filtering, transport, worker pool and supervisor.
"""
