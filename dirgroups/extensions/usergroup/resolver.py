"""
Resolve the defaults and field states of a user group backend form.

A resolution pass picks the LDAP resource to use, lists the user backends
talking to the same directory server and computes the attribute defaults
for the chosen directory flavor. When a user backend is linked, its user
attribute mapping replaces the flavor's and every field becomes read-only.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..authentication import AuthenticationConfig, LdapUserBackend
from ..ezldap import LdapResource, NoLdapResourcesError, ResourceRegistry, is_ldap_type
from .defaults import (
    GROUP_FIELDS,
    USER_FIELDS,
    AttributeDefaults,
    DirectoryFlavor,
    defaults_for,
)

NONE_USER_BACKEND = 'none'
FILTER_REQUIREMENT = (
    'The filter needs to be expressed as standard LDAP expression, without'
    ' outer parentheses. (e.g. &(foo=bar)(bar=foo) or foo=bar)'
)
FILTER_MESSAGE = 'The filter must not be wrapped in parantheses.'

logger = logging.getLogger(__name__)


class FieldDisablePolicy(Enum):
    # Editable, the widget gets no disabled attribute at all
    UNSET = 'unset'
    # Read-only because the directory schema is fixed
    FORCE_DISABLED = 'force_disabled'
    # Read-only because the values come from a linked user backend
    LINKED_DISABLED = 'linked_disabled'

    @property
    def disabled(self) -> bool:
        return self is not FieldDisablePolicy.UNSET


def is_valid_filter(value) -> bool:
    """A filter is valid when empty or not wrapped in an outer parenthesis"""
    if not value:
        return True
    return not str(value).strip().startswith('(')


FIELD_TEXT = {
    'group_class': (
        'LDAP Group Object Class',
        'The object class used for storing groups on the LDAP server.',
    ),
    'group_filter': (
        'LDAP Group Filter',
        'An additional filter to use when looking up groups using the specified connection. '
        'Leave empty to not to use any additional filter rules.',
    ),
    'group_name_attribute': (
        'LDAP Group Name Attribute',
        "The attribute name used for storing a group's name on the LDAP server.",
    ),
    'base_dn': (
        'LDAP Group Base DN',
        'The path where groups can be found on the LDAP server. Leave '
        'empty to select all users available using the specified connection.',
    ),
    'user_class': (
        'LDAP User Object Class',
        'The object class used for storing users on the LDAP server.',
    ),
    'user_filter': (
        'LDAP User Filter',
        'An additional filter to use when looking up users using the specified connection. '
        'Leave empty to not to use any additional filter rules.',
    ),
    'user_name_attribute': (
        'LDAP User Name Attribute',
        "The attribute name used for storing a user's name on the LDAP server.",
    ),
    'user_base_dn': (
        'LDAP User Base DN',
        'The path where users can be found on the LDAP server. Leave '
        'empty to select all users available using the specified connection.',
    ),
}

FILTER_FIELDS = ('group_filter', 'user_filter')


@dataclass(frozen=True)
class FieldOptions:
    name: str
    default: str
    policy: FieldDisablePolicy
    label: str
    description: str
    requirement: str = ''
    validators: tuple = ()

    @property
    def disabled(self) -> bool:
        return self.policy.disabled


def build_field_options(defaults:AttributeDefaults, policy:FieldDisablePolicy) -> list[FieldOptions]:
    """Options for every group and user field, in display order"""
    options = []
    for name in GROUP_FIELDS + USER_FIELDS:
        label, description = FIELD_TEXT[name]
        is_filter = name in FILTER_FIELDS
        options.append(FieldOptions(
            name=name,
            default=defaults[name],
            policy=policy,
            label=label,
            description=description,
            requirement=FILTER_REQUIREMENT if is_filter else '',
            validators=(is_valid_filter,) if is_filter else (),
        ))
    return options


def ldap_resource_names(resource_configs:dict[str, dict]) -> list[str]:
    """Names of all LDAP capable resources, in configuration order"""
    names = [
        name for name, config in resource_configs.items()
        if is_ldap_type(config.get('type'))
    ]
    if not names:
        raise NoLdapResourcesError(
            'No LDAP resources available. Please configure an LDAP resource first.'
        )
    return names


def compatible_user_backend_names(
    resource:LdapResource,
    backend_configs:dict[str, dict],
    create_resource:Callable[[str], LdapResource]
) -> list[str]:
    """
    Names of the LDAP user backends that talk to the same server as resource.
    Backends are matched by hostname and port, not by resource name.
    """
    resolved = {}
    names = []
    for name, config in backend_configs.items():
        if not is_ldap_type(config.get('backend')):
            continue
        resource_name = config.get('resource')
        if resource_name not in resolved:
            resolved[resource_name] = create_resource(resource_name)
        if resolved[resource_name].address == resource.address:
            names.append(name)
    return names


def resolve_defaults(
    flavor:DirectoryFlavor,
    user_backend:LdapUserBackend|None=None,
    resource:LdapResource|None=None
) -> tuple[AttributeDefaults, FieldDisablePolicy]:
    defaults = defaults_for(flavor, resource)
    if flavor is DirectoryFlavor.ACTIVE_DIRECTORY:
        policy = FieldDisablePolicy.FORCE_DISABLED
    else:
        policy = FieldDisablePolicy.UNSET

    if user_backend is not None:
        defaults = defaults.merge({
            'user_base_dn': user_backend.base_dn,
            'user_class': user_backend.user_class,
            'user_name_attribute': user_backend.user_name_attribute,
            'user_filter': user_backend.filter,
        })
        # A linked backend always wins over the flavor
        policy = FieldDisablePolicy.LINKED_DISABLED

    return defaults, policy


@dataclass(frozen=True)
class Resolution:
    flavor: DirectoryFlavor
    resource: LdapResource
    resource_names: list[str]
    user_backend_names: list[str]
    user_backend: str
    defaults: AttributeDefaults
    policy: FieldDisablePolicy
    fields: list[FieldOptions] = field(default_factory=list)

    @property
    def user_backend_choices(self) -> list[tuple[str, str]]:
        return [(NONE_USER_BACKEND, 'None')] + [(n, n) for n in self.user_backend_names]

    @property
    def linked(self) -> bool:
        return self.user_backend != NONE_USER_BACKEND

    def as_dict(self) -> dict:
        return {
            'type': self.flavor.value,
            'resource': self.resource.name,
            'resources': list(self.resource_names),
            'user_backend': self.user_backend,
            'user_backends': [name for name, _ in self.user_backend_choices],
            'policy': self.policy.value,
            'fields': {
                options.name: {
                    'value': options.default,
                    'disabled': options.disabled,
                }
                for options in self.fields
            },
        }


def resolve(
    flavor:DirectoryFlavor,
    resources:ResourceRegistry,
    authentication:AuthenticationConfig,
    resource:str|None=None,
    user_backend:str|None=None
) -> Resolution:
    """
    Run one resolution pass for the submitted resource and user backend.
    Raises NoLdapResourcesError when there is no resource to choose from.
    """
    resource_names = ldap_resource_names(resources.list_resource_configs())
    resource_name = resource if resource in resource_names else resource_names[0]
    chosen = resources.create_resource(resource_name)

    user_backend_names = compatible_user_backend_names(
        chosen,
        authentication.list_backend_configs(),
        resources.create_resource
    )

    linked = None
    if user_backend and user_backend != NONE_USER_BACKEND:
        if user_backend in user_backend_names:
            linked = authentication.create_user_backend(user_backend)
        else:
            logger.info(
                f"User backend {user_backend} does not use resource {resource_name}, ignoring it"
            )

    defaults, policy = resolve_defaults(flavor, linked, chosen)
    return Resolution(
        flavor=flavor,
        resource=chosen,
        resource_names=resource_names,
        user_backend_names=user_backend_names,
        user_backend=linked.name if linked else NONE_USER_BACKEND,
        defaults=defaults,
        policy=policy,
        fields=build_field_options(defaults, policy),
    )
