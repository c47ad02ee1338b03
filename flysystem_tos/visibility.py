"""Visibility <-> TOS ACL conversion."""
from typing import Any, Iterable, Optional, Union

from tos.enum import ACLType, CannedType, PermissionType

from .models import Visibility

PUBLIC_ACL = ACLType.ACL_Public_Read
PRIVATE_ACL = ACLType.ACL_Private

_PUBLIC_GRANTEES = (
    CannedType.Canned_All_Users.value,
    CannedType.Canned_Authenticated_Users.value,
)


def _enum_value(value: Any) -> Any:
    # The SDK hands back enum members or raw strings depending on the response
    return getattr(value, "value", value)


class PortableVisibilityConverter:
    """Two-valued converter: public-read or private, nothing in between."""

    def __init__(
        self,
        default: Union[Visibility, str] = Visibility.PUBLIC,
        default_for_directories: Union[Visibility, str] = Visibility.PUBLIC,
    ):
        self._default = Visibility(default)
        self._default_for_directories = Visibility(default_for_directories)

    def visibility_to_acl(self, visibility: Union[Visibility, str, None]) -> ACLType:
        # Anything that is not exactly "public" maps to private
        if _enum_value(visibility) == Visibility.PUBLIC.value:
            return PUBLIC_ACL
        return PRIVATE_ACL

    def acl_to_visibility(self, grants: Optional[Iterable[Any]]) -> Visibility:
        for grant in grants or []:
            grantee = getattr(grant, "grantee", None)
            if grantee is None:
                continue
            if _enum_value(getattr(grantee, "canned", None)) not in _PUBLIC_GRANTEES:
                continue
            if _enum_value(getattr(grant, "permission", None)) != PermissionType.Permission_Read.value:
                continue
            return Visibility.PUBLIC

        return Visibility.PRIVATE

    def default_for_directories(self) -> Visibility:
        return self._default_for_directories

    def default_visibility(self) -> Visibility:
        return self._default
