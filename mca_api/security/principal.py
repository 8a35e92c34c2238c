"""Authenticated principal, as carried by a verified access token."""

from __future__ import annotations

from dataclasses import dataclass

from mca_api.constants import EntityKind, PortalType


@dataclass(frozen=True)
class Principal:
    """
    Small, immutable description of who is calling.

    The `*_list` fields are the ownership lists computed at login by the
    membership services. `None` means "not granted for this kind", which is
    different from an empty tuple ("granted, but owns nothing").
    """

    id: str
    portal: PortalType
    role: str

    funder_list: tuple[str, ...] | None = None
    lender_list: tuple[str, ...] | None = None
    iso_list: tuple[str, ...] | None = None
    merchant_list: tuple[str, ...] | None = None
    syndicator_list: tuple[str, ...] | None = None

    permission_list: tuple[str, ...] = ()
    """Extra permissions granted on top of the role (funder users only)."""

    @property
    def is_admin(self) -> bool:
        return self.portal is PortalType.ADMIN

    def owned(self, kind: EntityKind) -> tuple[str, ...] | None:
        return getattr(self, f"{kind.value}_list")

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        data: dict[str, object] = {
            "id": self.id,
            "portal": self.portal.value,
            "role": self.role,
            "permission_list": list(self.permission_list),
        }
        for kind in EntityKind:
            owned = self.owned(kind)
            data[f"{kind.value}_list"] = list(owned) if owned is not None else None
        return data
