from .user import Principal, Role, Permission, LoginResult, SUB_ADMIN_PERMISSIONS
from .responses import Page, Pagination, ResourceEnvelope, record_id
from .property import Property, PropertyImage, Price, Location, Specifications
from .review import Review
from .blog import Blog
from .contact import Contact
from .visit_request import VisitRequest
from .admin import (
    SubAdmin,
    SubAdminPermissions,
    CreateSubAdminRequest,
    ResetPasswordRequest,
)

__all__ = [
    "Principal",
    "Role",
    "Permission",
    "LoginResult",
    "SUB_ADMIN_PERMISSIONS",
    "Page",
    "Pagination",
    "ResourceEnvelope",
    "record_id",
    "Property",
    "PropertyImage",
    "Price",
    "Location",
    "Specifications",
    "Review",
    "Blog",
    "Contact",
    "VisitRequest",
    "SubAdmin",
    "SubAdminPermissions",
    "CreateSubAdminRequest",
    "ResetPasswordRequest",
]
