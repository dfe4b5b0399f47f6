"""Code execution relay package.

This package relays code snippets posted as chat commands to remote
sandboxed execution services and turns their answers into a single chat
reply.  Pesto is tried first for the languages it supports; Piston is the
fallback for everything else and for Pesto's expected failures.

The top‑level modules include:

* ``config`` – configuration handling for environment variables.
* ``models`` – Pydantic models for the HTTP API and backend wire formats.
* ``outcome`` – request, reply and outcome value types.
* ``resolver`` – language tag resolution per backend.
* ``backends`` – HTTP clients for Pesto and Piston.
* ``normalizer`` – backend response to outcome reduction.
* ``formatter`` – outcome to Telegram HTML reply rendering.
* ``dispatcher`` – the primary/fallback attempt sequence.
* ``commands`` – Telegram command message parsing.
* ``telegram`` – Bot API sender and identity cache.
* ``api`` – FastAPI application exposing HTTP endpoints.
"""
