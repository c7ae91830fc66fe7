import pytest

from dirgroups.extensions.authentication import AuthenticationConfig, LdapUserBackend
from dirgroups.extensions.ezldap import (
    LdapResource,
    NoLdapResourcesError,
    ResourceNotFoundError,
    ResourceRegistry,
)
from dirgroups.extensions.usergroup import (
    ATTRIBUTE_FIELDS,
    AttributeDefaults,
    DirectoryFlavor,
    FieldDisablePolicy,
    compatible_user_backend_names,
    defaults_for,
    is_valid_filter,
    ldap_resource_names,
    resolve,
    resolve_defaults,
)

CORP_LDAP = LdapUserBackend(
    name="corp-ldap",
    backend="ldap",
    resource="dc1",
    base_dn="ou=staff,dc=corp,dc=com",
    user_class="posixAccount",
    user_name_attribute="cn",
    filter="employeeType=staff",
)


@pytest.fixture
def registry(config_dir):
    return ResourceRegistry(config_dir / "resources.yml")


@pytest.fixture
def authentication(config_dir, registry):
    return AuthenticationConfig(config_dir / "authentication.yml", registry)


def make_resource(name, hostname="host", port=389):
    return LdapResource(name=name, type="ldap", hostname=hostname, port=port)


# Resource enumeration

def test_resource_names_keeps_ldap_types_in_order():
    configs = {
        "b": {"type": "ldap"},
        "sql": {"type": "db"},
        "a": {"type": "MSLDAP"},
        "c": {"type": "Ldap"},
    }
    assert ldap_resource_names(configs) == ["b", "a", "c"]


@pytest.mark.parametrize("configs", [
    {},
    {"sql": {"type": "db"}, "files": {"type": "file"}},
    {"broken": {}},
])
def test_resource_names_without_ldap_resources(configs):
    with pytest.raises(NoLdapResourcesError, match="No LDAP resources available"):
        ldap_resource_names(configs)


# Compatible user backends

def test_compatible_backends_match_by_host_and_port():
    resources = {
        "dc1": make_resource("dc1"),
        "dc1-copy": make_resource("dc1-copy"),
        "dc2": make_resource("dc2", hostname="other"),
        "dc1-ssl": make_resource("dc1-ssl", port=636),
    }
    backends = {
        "one": {"backend": "ldap", "resource": "dc1"},
        "copy": {"backend": "LDAP", "resource": "dc1-copy"},
        "other-host": {"backend": "ldap", "resource": "dc2"},
        "other-port": {"backend": "msldap", "resource": "dc1-ssl"},
        "db": {"backend": "db", "resource": "dc1"},
    }
    names = compatible_user_backend_names(resources["dc1"], backends, resources.__getitem__)
    assert names == ["one", "copy"]


def test_compatible_backends_skip_non_ldap_without_resolving():
    calls = []

    def create_resource(name):
        calls.append(name)
        return make_resource(name)

    backends = {
        "external": {"backend": "external"},
        "a": {"backend": "ldap", "resource": "dc1"},
        "b": {"backend": "ldap", "resource": "dc1"},
    }
    names = compatible_user_backend_names(make_resource("dc1"), backends, create_resource)
    assert names == ["a", "b"]
    assert calls == ["dc1"]


def test_compatible_backends_propagate_lookup_failures(registry):
    backends = {"broken": {"backend": "ldap", "resource": "missing"}}
    with pytest.raises(ResourceNotFoundError):
        compatible_user_backend_names(make_resource("dc1"), backends, registry.create_resource)


# Default resolution

def test_open_ldap_defaults_are_editable():
    defaults, policy = resolve_defaults(DirectoryFlavor.OPEN_LDAP)
    assert policy is FieldDisablePolicy.UNSET
    assert policy.disabled is False
    assert defaults == defaults_for(DirectoryFlavor.OPEN_LDAP)
    assert defaults.user_class == "inetOrgPerson"
    assert defaults.user_name_attribute == "uid"
    assert defaults.group_class == "groupOfUniqueNames"
    assert defaults.group_name_attribute == "cn"


def test_active_directory_defaults_are_forced():
    defaults, policy = resolve_defaults(DirectoryFlavor.ACTIVE_DIRECTORY)
    assert policy is FieldDisablePolicy.FORCE_DISABLED
    assert defaults.user_class == "user"
    assert defaults.group_class == "group"
    assert defaults.user_name_attribute == "sAMAccountName"
    assert defaults.group_name_attribute == "sAMAccountName"


@pytest.mark.parametrize("flavor", list(DirectoryFlavor))
def test_linked_backend_overrides_user_fields_and_policy(flavor):
    baseline = defaults_for(flavor)
    defaults, policy = resolve_defaults(flavor, CORP_LDAP)

    assert policy is FieldDisablePolicy.LINKED_DISABLED
    assert defaults.user_base_dn == "ou=staff,dc=corp,dc=com"
    assert defaults.user_class == "posixAccount"
    assert defaults.user_name_attribute == "cn"
    assert defaults.user_filter == "employeeType=staff"
    for key in ("group_class", "group_filter", "group_name_attribute", "base_dn"):
        assert defaults[key] == baseline[key]


def test_resolve_defaults_is_idempotent():
    first = resolve_defaults(DirectoryFlavor.ACTIVE_DIRECTORY, CORP_LDAP)
    second = resolve_defaults(DirectoryFlavor.ACTIVE_DIRECTORY, CORP_LDAP)
    assert first == second


def test_defaults_always_hold_every_field():
    defaults = AttributeDefaults({"user_class": None})
    assert set(defaults) == set(ATTRIBUTE_FIELDS)
    assert defaults.user_class == ""
    merged = defaults.merge({"base_dn": "dc=example,dc=com"})
    assert merged.base_dn == "dc=example,dc=com"
    assert defaults.base_dn == ""


def test_flavor_from_type():
    assert DirectoryFlavor.from_type("LDAP") is DirectoryFlavor.OPEN_LDAP
    assert DirectoryFlavor.from_type("msldap") is DirectoryFlavor.ACTIVE_DIRECTORY
    with pytest.raises(ValueError):
        DirectoryFlavor.from_type("db")


# Filter validation

@pytest.mark.parametrize("value, valid", [
    ("(&(foo=bar)(bar=foo))", False),
    ("(foo=bar", False),
    (" (foo=bar)", False),
    ("&(foo=bar)(bar=foo)", True),
    ("foo=bar", True),
    ("", True),
    (None, True),
])
def test_filter_validation(value, valid):
    assert is_valid_filter(value) is valid


# Full resolution pass

def test_resolve_end_to_end(registry, authentication):
    resolution = resolve(DirectoryFlavor.OPEN_LDAP, registry, authentication, resource="dc1")
    assert resolution.resource.name == "dc1"
    assert resolution.resource_names == ["dc1", "dc1-alias", "ad"]
    assert resolution.user_backend_names == ["users1", "users-alias"]
    assert resolution.user_backend == "none"
    assert resolution.policy is FieldDisablePolicy.UNSET

    linked = resolve(
        DirectoryFlavor.OPEN_LDAP, registry, authentication,
        resource="dc1", user_backend="users1"
    )
    assert linked.user_backend == "users1"
    assert linked.defaults.user_base_dn == "ou=people,dc=example,dc=com"
    assert linked.policy is FieldDisablePolicy.LINKED_DISABLED
    assert len(linked.fields) == 8
    assert all(options.disabled for options in linked.fields)


def test_resolve_falls_back_to_first_resource(registry, authentication):
    resolution = resolve(DirectoryFlavor.OPEN_LDAP, registry, authentication, resource="icingadb")
    assert resolution.resource.name == "dc1"


def test_resolve_ignores_incompatible_user_backend(registry, authentication):
    resolution = resolve(
        DirectoryFlavor.ACTIVE_DIRECTORY, registry, authentication,
        resource="dc1", user_backend="ad-users"
    )
    assert resolution.user_backend == "none"
    assert resolution.policy is FieldDisablePolicy.FORCE_DISABLED


def test_resolve_is_idempotent(registry, authentication):
    args = (DirectoryFlavor.OPEN_LDAP, registry, authentication)
    first = resolve(*args, resource="ad", user_backend="ad-users")
    second = resolve(*args, resource="ad", user_backend="ad-users")
    assert first == second
    assert first.user_backend_names == ["ad-users"]
    assert first.defaults.user_class == "user"


def test_resolution_as_dict(registry, authentication):
    data = resolve(DirectoryFlavor.OPEN_LDAP, registry, authentication).as_dict()
    assert data["resource"] == "dc1"
    assert data["user_backends"] == ["none", "users1", "users-alias"]
    assert data["policy"] == "unset"
    assert data["fields"]["user_class"] == {"value": "inetOrgPerson", "disabled": False}


def test_field_options_carry_filter_validation(registry, authentication):
    resolution = resolve(DirectoryFlavor.OPEN_LDAP, registry, authentication)
    options = {o.name: o for o in resolution.fields}
    assert options["group_filter"].validators == (is_valid_filter,)
    assert options["user_filter"].requirement
    assert options["group_class"].validators == ()
    assert options["base_dn"].label == "LDAP Group Base DN"
