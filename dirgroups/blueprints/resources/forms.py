import re

from flask import current_app
from flask_wtf import FlaskForm
from wtforms import PasswordField, SelectField, StringField, SubmitField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

RESOURCE_NAME_REGEX = r'^[a-zA-Z0-9._-]+$'
HOSTNAME_REGEX = r'^[a-zA-Z0-9.-]+$'


class LdapResourceForm(FlaskForm):
    """Form for creating LDAP resources"""
    name = StringField(
        'Resource Name',
        validators=[
            DataRequired(message="Resource name is required"),
            Length(min=2, max=64, message="Resource name must be between 2-64 characters")
        ],
        render_kw={'placeholder': 'dc1', "class": "form-control"},
        description="The unique name of this resource"
    )

    type = SelectField(
        'Resource Type',
        choices=[('ldap', 'LDAP'), ('msldap', 'Active Directory')],
        default='ldap',
        render_kw={"class": "form-select"}
    )

    hostname = StringField(
        'Host',
        validators=[DataRequired(message="Host is required")],
        render_kw={'placeholder': 'localhost', "class": "form-control"},
        description="The hostname or address of the LDAP server to use for authentication."
    )

    port = StringField(
        'Port',
        validators=[Optional()],
        render_kw={'placeholder': '389', "class": "form-control"},
        description="The port of the LDAP server. Leave empty for the encryption's default port."
    )

    encryption = SelectField(
        'Encryption',
        choices=[('none', 'None'), ('starttls', 'STARTTLS'), ('ldaps', 'LDAPS')],
        default='none',
        render_kw={"class": "form-select"}
    )

    root_dn = StringField(
        'Root DN',
        validators=[Optional()],
        render_kw={'placeholder': 'dc=example,dc=com', "class": "form-control"},
        description="Only the root and its child nodes will be accessible on this resource."
    )

    bind_dn = StringField(
        'Bind DN',
        validators=[Optional()],
        render_kw={'placeholder': 'cn=admin,dc=example,dc=com', "class": "form-control"},
        description="The user dn to use for querying the ldap server. Leave empty to bind anonymously."
    )

    bind_pw = PasswordField(
        'Bind Password',
        validators=[Optional()],
        render_kw={"class": "form-control"},
        description="The password to use for querying the ldap server."
    )

    submit = SubmitField(
        'Save Resource',
        render_kw={"class": "btn btn-primary"}
    )

    def validate_name(self, field):
        if not re.match(RESOURCE_NAME_REGEX, field.data or ''):
            raise ValidationError(
                'Resource name can only contain letters, numbers, dots, hyphens, and underscores'
            )
        if field.data in current_app.resources.list_resource_configs():
            raise ValidationError(f'A resource with the name {field.data} does already exist')

    def validate_hostname(self, field):
        if not re.match(HOSTNAME_REGEX, field.data or ''):
            raise ValidationError('Please enter a valid hostname or IP address')

    def validate_port(self, field):
        try:
            port_num = int(field.data)
        except ValueError:
            raise ValidationError("Port must be a valid number")
        if not (1 <= port_num <= 65535):
            raise ValidationError("Port must be between 1 and 65535")

    def to_config(self) -> dict:
        return {
            'type': self.type.data,
            'hostname': self.hostname.data.strip(),
            'port': self.port.data or None,
            'encryption': self.encryption.data,
            'root_dn': self.root_dn.data or '',
            'bind_dn': self.bind_dn.data or '',
            'bind_pw': self.bind_pw.data or '',
        }
