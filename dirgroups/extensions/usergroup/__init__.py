from .defaults import (
    ATTRIBUTE_FIELDS,
    GROUP_FIELDS,
    USER_FIELDS,
    AttributeDefaults,
    DirectoryFlavor,
    defaults_for,
)
from .resolver import (
    FILTER_MESSAGE,
    NONE_USER_BACKEND,
    FieldDisablePolicy,
    FieldOptions,
    Resolution,
    compatible_user_backend_names,
    is_valid_filter,
    ldap_resource_names,
    resolve,
    resolve_defaults,
)
from .store import UserGroupBackendStore
