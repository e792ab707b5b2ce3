"""
Page controllers for the admin console.

Each service takes the per-request :class:`~cafe_console.context.ConsoleContext`
and returns a ``(payload, HTTPStatus)`` tuple.
"""
