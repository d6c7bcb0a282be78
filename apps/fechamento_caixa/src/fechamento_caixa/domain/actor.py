"""Audit identity checks shared by the mutating services."""

from __future__ import annotations

from fechamento_caixa.domain.errors import ValidationError, compose_error_message


def require_actor(actor_id: str, *, action: str) -> str:
    """Return the trimmed actor id, or reject a blank one."""

    trimmed = actor_id.strip()
    if not trimmed:
        raise ValidationError(
            message=compose_error_message(
                cause="actor_id is required.",
                action=f"Identify who is {action}.",
            ),
            details={"field": "actor_id"},
        )
    return trimmed
