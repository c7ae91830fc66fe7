from .ezldap import (
    LDAP_RESOURCE_TYPES,
    ENCRYPTION_TYPES,
    LdapConnection,
    LdapResource,
    NoLdapResourcesError,
    ResourceNotFoundError,
    ResourceRegistry,
    is_ldap_type,
)
