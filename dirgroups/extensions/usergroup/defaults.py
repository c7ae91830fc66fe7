"""Built-in attribute mappings for the supported directory flavors"""

from enum import Enum

GROUP_FIELDS = ('group_class', 'group_filter', 'group_name_attribute', 'base_dn')
USER_FIELDS = ('user_class', 'user_filter', 'user_name_attribute', 'user_base_dn')
ATTRIBUTE_FIELDS = GROUP_FIELDS + USER_FIELDS


class DirectoryFlavor(Enum):
    OPEN_LDAP = 'ldap'
    ACTIVE_DIRECTORY = 'msldap'

    @classmethod
    def from_type(cls, value) -> "DirectoryFlavor":
        """Map a backend type tag, case-insensitive, to a flavor"""
        try:
            return cls(str(value or '').lower())
        except ValueError:
            raise ValueError(f"Unknown directory type {value!r}, expected ldap or msldap")


class AttributeDefaults(dict):
    """Field name to default value, always holding every attribute field"""
    def __init__(self, values=None, **kwargs):
        super().__init__({field: '' for field in ATTRIBUTE_FIELDS})
        for key, value in dict(values or {}, **kwargs).items():
            self[key] = '' if value is None else str(value)

    def merge(self, values:dict) -> "AttributeDefaults":
        """Return a copy with values laid over this mapping"""
        return AttributeDefaults(self, **values)

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)


OPEN_LDAP_DEFAULTS = {
    'group_class': 'groupOfUniqueNames',
    'group_name_attribute': 'cn',
    'user_class': 'inetOrgPerson',
    'user_name_attribute': 'uid',
}

ACTIVE_DIRECTORY_DEFAULTS = {
    'group_class': 'group',
    'group_name_attribute': 'sAMAccountName',
    'user_class': 'user',
    'user_name_attribute': 'sAMAccountName',
}


def get_open_ldap_defaults() -> AttributeDefaults:
    return AttributeDefaults(OPEN_LDAP_DEFAULTS)


def get_active_directory_defaults() -> AttributeDefaults:
    return AttributeDefaults(ACTIVE_DIRECTORY_DEFAULTS)


def defaults_for(flavor:DirectoryFlavor, resource=None) -> AttributeDefaults:
    """
    Baseline attribute mapping for a flavor.
    Base DNs are left empty so lookups start at the resource's root DN.
    """
    if flavor is DirectoryFlavor.ACTIVE_DIRECTORY:
        return get_active_directory_defaults()
    return get_open_ldap_defaults()
