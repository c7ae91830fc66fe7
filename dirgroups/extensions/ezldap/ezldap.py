import ldap
import logging
from dataclasses import dataclass
from functools import wraps
from ldap import LDAPError

from ..common import parse_port
from ..config_store import ConfigFile

LDAP_RESOURCE_TYPES = ('ldap', 'msldap')
ENCRYPTION_NONE = 'none'
ENCRYPTION_STARTTLS = 'starttls'
ENCRYPTION_LDAPS = 'ldaps'
ENCRYPTION_TYPES = (ENCRYPTION_NONE, ENCRYPTION_STARTTLS, ENCRYPTION_LDAPS)


class ResourceNotFoundError(LookupError):
    """Raised when a resource name is not configured"""


class NoLdapResourcesError(Exception):
    """Raised when no LDAP capable resource is configured"""


def is_ldap_type(value) -> bool:
    return str(value or '').lower() in LDAP_RESOURCE_TYPES


def ldap_error_handler():
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                with self:
                    return func(self, *args, **kwargs)
            except ldap.INVALID_CREDENTIALS as e:
                raise self._log_exc(e, f"Invalid credentials in {func.__name__}")
            except ldap.NO_SUCH_OBJECT as e:
                raise self._log_exc(e, f"Object not found in {func.__name__}")
            except (ldap.SERVER_DOWN, ldap.CONNECT_ERROR, ldap.TIMEOUT) as e:
                raise self._log_exc(e, f"Server unreachable in {func.__name__}")
            except LDAPError as e:
                raise self._log_exc(e, f"LDAP error in {func.__name__}")
        return wrapper
    return decorator


@dataclass(frozen=True)
class LdapResource:
    """A named LDAP connection definition"""
    name: str
    type: str
    hostname: str
    port: int
    root_dn: str = ''
    bind_dn: str = ''
    bind_pw: str = ''
    encryption: str = ENCRYPTION_NONE

    @property
    def uri(self) -> str:
        scheme = 'ldaps' if self.encryption == ENCRYPTION_LDAPS else 'ldap'
        return f"{scheme}://{self.hostname}:{self.port}"

    @property
    def address(self) -> tuple[str, int]:
        return (self.hostname, self.port)

    @classmethod
    def from_config(cls, name:str, config:dict) -> "LdapResource":
        encryption = str(config.get('encryption') or ENCRYPTION_NONE).lower()
        if encryption not in ENCRYPTION_TYPES:
            raise ValueError(f"Unknown encryption {encryption!r} for resource {name}")
        default_port = 636 if encryption == ENCRYPTION_LDAPS else 389
        return cls(
            name=name,
            type=str(config.get('type', 'ldap')).lower(),
            hostname=str(config.get('hostname') or 'localhost'),
            port=parse_port(config.get('port'), default_port),
            root_dn=config.get('root_dn') or '',
            bind_dn=config.get('bind_dn') or '',
            bind_pw=config.get('bind_pw') or '',
            encryption=encryption,
        )

    def to_config(self) -> dict:
        return {
            'type': self.type,
            'hostname': self.hostname,
            'port': self.port,
            'root_dn': self.root_dn,
            'bind_dn': self.bind_dn,
            'bind_pw': self.bind_pw,
            'encryption': self.encryption,
        }


class ResourceRegistry:
    """Named resources shared across features, stored in a YAML file"""
    def __init__(self, file):
        self.config = ConfigFile(file)

    def list_resource_configs(self) -> dict[str, dict]:
        return self.config.sections()

    def create_resource(self, name:str) -> LdapResource:
        config = self.config.get_section(name)
        if config is None:
            raise ResourceNotFoundError(f"Resource {name!r} is not configured")
        if not is_ldap_type(config.get('type')):
            raise ResourceNotFoundError(f"Resource {name!r} is not an LDAP resource")
        return LdapResource.from_config(name, config)

    def save_resource(self, resource:LdapResource) -> None:
        self.config.set_section(resource.name, resource.to_config())

    def remove_resource(self, name:str) -> bool:
        return self.config.remove_section(name)


class LdapConnection:
    """Short lived bind against a configured LDAP resource"""
    def __init__(self, resource:LdapResource, timeout:int=5):
        self.resource = resource
        self.timeout = timeout
        self.connection = None
        self.logger = logging.getLogger(__name__ + f'.LdapConnection.{resource.name}')

    def __enter__(self):
        if not self.connection:
            self._connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._disconnect()

    def _log_exc(self, e:Exception, msg:str) -> Exception:
        self.logger.error(msg + f" - {e}")
        return e

    def _connect(self) -> None:
        self.logger.info("Connecting with " + self.resource.uri)
        self.connection = ldap.initialize(self.resource.uri)
        self.connection.set_option(ldap.OPT_PROTOCOL_VERSION, ldap.VERSION3)
        self.connection.set_option(ldap.OPT_NETWORK_TIMEOUT, self.timeout)
        self.connection.set_option(ldap.OPT_REFERRALS, 0)
        if self.resource.encryption == ENCRYPTION_STARTTLS:
            self.connection.start_tls_s()
        self.connection.simple_bind_s(self.resource.bind_dn, self.resource.bind_pw)
        self.logger.info(f"Successfully bound to LDAP server at {self.resource.uri}")

    def _disconnect(self) -> None:
        if self.connection:
            self.connection.unbind_s()
            self.connection = None
            self.logger.info("Disconnected from LDAP server")

    @ldap_error_handler()
    def get_connection_status(self) -> dict:
        if self.resource.root_dn:
            self.connection.search_s(
                self.resource.root_dn, ldap.SCOPE_BASE, '(objectClass=*)', ['dn']
            )
        return {
            'status': 'Connected',
            'server': self.resource.uri,
            'base_dn': self.resource.root_dn,
            'bind_dn': self.resource.bind_dn
        }
