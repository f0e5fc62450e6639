"""Guardrail proxy that screens chat prompts, model replies and uploads against keyword rules."""

__version__ = "0.1.0"