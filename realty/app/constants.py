"""Storage keys, identifier prefixes, and paging defaults.

Storage keys are stable: renaming one orphans whatever a browser profile or
storage file already holds under the old name.
"""

# Session
TOKEN_KEY = "token"
USER_KEY = "user"

# One serialized list of locally-created records per resource type.
PROPERTIES_KEY = "promise_realty_mock_properties"
REVIEWS_KEY = "promise_realty_mock_reviews"
BLOGS_KEY = "promise_realty_mock_blogs"
CONTACTS_KEY = "promise_realty_mock_contacts"
VISIT_REQUESTS_KEY = "promise_realty_mock_visit_requests"
SUB_ADMINS_KEY = "promise_realty_mock_admins"

# Tokens issued by the local fallback login all start with this prefix.
FALLBACK_TOKEN_PREFIX = "mock_"
FALLBACK_ADMIN_TOKEN_PREFIX = "mock_admin_token_"

# Backend ids are Mongo ObjectIds and never carry this prefix.
LOCAL_ID_PREFIX = "local_"

DEFAULT_PAGE_SIZE = 10
DEFAULT_FEATURED_LIMIT = 6

LOGIN_PATH = "/login"
