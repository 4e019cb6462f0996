from .backend import BackendClient
from .fallback import RetryPolicy, should_fall_back
from .resources import (
    ADMIN_REVIEWS,
    BLOGS,
    CONTACTS,
    PROPERTIES,
    REVIEWS,
    VISIT_REQUESTS,
    PropertyClient,
    ResourceClient,
    ResourceSpec,
    merge_local_records,
    synthesize_record,
)
from .sub_admins import SubAdminClient

__all__ = [
    "BackendClient",
    "RetryPolicy",
    "should_fall_back",
    "ResourceSpec",
    "ResourceClient",
    "PropertyClient",
    "PROPERTIES",
    "REVIEWS",
    "ADMIN_REVIEWS",
    "BLOGS",
    "CONTACTS",
    "VISIT_REQUESTS",
    "merge_local_records",
    "synthesize_record",
    "SubAdminClient",
]
