"""Request identity.

Authentication happens upstream; the gateway forwards the caller as
``X-User-Id`` and ``X-User-Role`` headers.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from storefront.order.order import ActorRole


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str = ActorRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN.value


async def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.USER.value),
) -> Actor:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthenticated")
    if x_user_role not in {role.value for role in ActorRole}:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_user_role}'")
    return Actor(user_id=x_user_id, role=x_user_role)


async def require_admin(actor: Actor = Depends(current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="Only administrators can access this resource")
    return actor
