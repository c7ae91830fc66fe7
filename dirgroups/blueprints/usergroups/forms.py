import re

from flask import current_app
from flask_wtf import FlaskForm
from wtforms import HiddenField, SelectField, StringField, SubmitField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from dirgroups.extensions.usergroup import (
    ATTRIBUTE_FIELDS,
    FILTER_MESSAGE,
    DirectoryFlavor,
    Resolution,
)

BACKEND_NAME_REGEX = r'^[a-zA-Z0-9._-]+$'
BACKEND_TYPES = [
    (DirectoryFlavor.OPEN_LDAP.value, 'LDAP'),
    (DirectoryFlavor.ACTIVE_DIRECTORY.value, 'Active Directory'),
]
AUTOSUBMIT_JS = "this.form.autosubmit.value='1'; this.form.submit();"


class PredicateValidator:
    """Wraps a plain value predicate as a WTForms validator"""
    def __init__(self, predicate, message):
        self.predicate = predicate
        self.message = message

    def __call__(self, form, field):
        if not self.predicate(field.data):
            raise ValidationError(self.message)


def attribute_field(label):
    return StringField(label, render_kw={"class": "form-control"})


class UserGroupBackendForm(FlaskForm):
    """Form for creating/editing LDAP user group backends"""
    autosubmit = HiddenField(default='')

    name = StringField(
        'Backend Name',
        validators=[
            DataRequired(message="Backend name is required"),
            Length(min=2, max=64, message="Backend name must be between 2-64 characters")
        ],
        render_kw={'placeholder': 'ldap-groups', "class": "form-control"},
        description="The name of this user group backend that is used to differentiate it from others."
    )

    type = SelectField(
        'Backend Type',
        choices=BACKEND_TYPES,
        default=DirectoryFlavor.OPEN_LDAP.value,
        render_kw={"class": "form-select", "onchange": AUTOSUBMIT_JS},
        description="The type of this user group backend."
    )

    resource = SelectField(
        'LDAP Connection',
        choices=[],  # Populated from the resolution
        validators=[DataRequired()],
        render_kw={"class": "form-select", "onchange": AUTOSUBMIT_JS},
        description="The LDAP connection to use for this backend."
    )

    user_backend = SelectField(
        'User Backend',
        choices=[],  # Populated from the resolution
        validators=[DataRequired()],
        render_kw={"class": "form-select", "onchange": AUTOSUBMIT_JS},
        description="The user backend to link with this user group backend."
    )

    # Labels, descriptions and defaults come from the resolution
    group_class = attribute_field('LDAP Group Object Class')
    group_filter = attribute_field('LDAP Group Filter')
    group_name_attribute = attribute_field('LDAP Group Name Attribute')
    base_dn = attribute_field('LDAP Group Base DN')
    user_class = attribute_field('LDAP User Object Class')
    user_filter = attribute_field('LDAP User Filter')
    user_name_attribute = attribute_field('LDAP User Name Attribute')
    user_base_dn = attribute_field('LDAP User Base DN')

    submit = SubmitField(
        'Save Changes',
        render_kw={"class": "btn btn-primary"}
    )

    # Name of the backend being edited, None when creating
    original_name = None

    @property
    def is_autosubmit(self) -> bool:
        return self.autosubmit.data == '1'

    @property
    def flavor(self) -> DirectoryFlavor:
        """Selected directory flavor, unknown types fall back to LDAP"""
        try:
            return DirectoryFlavor.from_type(self.type.data)
        except ValueError:
            return DirectoryFlavor.OPEN_LDAP

    def attribute_fields(self):
        return [self[name] for name in ATTRIBUTE_FIELDS]

    def validate_name(self, field):
        if not re.match(BACKEND_NAME_REGEX, field.data or ''):
            raise ValidationError(
                'Backend name can only contain letters, numbers, dots, hyphens, and underscores'
            )
        if field.data == self.original_name:
            return
        if current_app.usergroups.get_backend(field.data) is not None:
            raise ValidationError(f'A user group backend with the name {field.data} does already exist')

    def to_config(self) -> dict:
        values = {
            'backend': self.flavor.value,
            'resource': self.resource.data,
            'user_backend': self.user_backend.data,
        }
        for field in self.attribute_fields():
            values[field.name] = (field.data or '').strip()
        return values


def apply_resolution(form:UserGroupBackendForm, resolution:Resolution, values=None) -> UserGroupBackendForm:
    """
    Push a resolution into the form.
    Disabled fields always show their default because browsers
    do not submit them, enabled fields keep a value given in values.
    """
    values = values or {}
    form.type.data = resolution.flavor.value
    form.resource.choices = [(name, name) for name in resolution.resource_names]
    form.resource.data = resolution.resource.name
    form.user_backend.choices = resolution.user_backend_choices
    form.user_backend.data = resolution.user_backend

    for options in resolution.fields:
        field = form[options.name]
        field.label.text = options.label
        field.description = options.description
        field.requirement = options.requirement
        field.validators = [Optional()] + [
            PredicateValidator(predicate, FILTER_MESSAGE)
            for predicate in options.validators
        ]

        render_kw = {"class": "form-control"}
        if options.disabled:
            render_kw["disabled"] = True
        field.render_kw = render_kw

        if options.disabled or options.name not in values:
            field.data = options.default
        else:
            field.data = values[options.name]
    return form
