"""Configured user (authentication) backends"""

from dataclasses import dataclass

from .config_store import ConfigFile
from .ezldap import ResourceRegistry, is_ldap_type

# Attribute mapping used when a backend section leaves these keys out
USER_BACKEND_DEFAULTS = {
    'ldap': {
        'user_class': 'inetOrgPerson',
        'user_name_attribute': 'uid',
    },
    'msldap': {
        'user_class': 'user',
        'user_name_attribute': 'sAMAccountName',
    },
}


class UserBackendNotFoundError(LookupError):
    """Raised when a user backend name is not configured"""


@dataclass(frozen=True)
class LdapUserBackend:
    name: str
    backend: str
    resource: str
    base_dn: str
    user_class: str
    user_name_attribute: str
    filter: str


class AuthenticationConfig:
    """Store for the configured user backends"""
    def __init__(self, file, resources:ResourceRegistry):
        self.config = ConfigFile(file)
        self.resources = resources

    def list_backend_configs(self) -> dict[str, dict]:
        return self.config.sections()

    def create_user_backend(self, name:str) -> LdapUserBackend:
        config = self.config.get_section(name)
        if config is None:
            raise UserBackendNotFoundError(f"User backend {name!r} is not configured")
        backend = str(config.get('backend', '')).lower()
        if not is_ldap_type(backend):
            raise UserBackendNotFoundError(f"User backend {name!r} is not an LDAP backend")
        defaults = USER_BACKEND_DEFAULTS[backend]
        return LdapUserBackend(
            name=name,
            backend=backend,
            resource=config.get('resource') or '',
            base_dn=config.get('base_dn') or '',
            user_class=config.get('user_class') or defaults['user_class'],
            user_name_attribute=(
                config.get('user_name_attribute') or defaults['user_name_attribute']
            ),
            filter=config.get('filter') or '',
        )
