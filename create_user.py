"""
Script for creating a new user, e.g. the first administrator.

The user is created in the database configured for the user service, so set
``SQLALCHEMY_DATABASE_URI`` (and ``JWT_SECRET``) as when running the service.
The details are held to the same rules as a registration through the API,
including the password policy.
"""

import click

from freshbonds.auth import roles
from freshbonds.forms import to_formdata, errors
from user_service.controllers.forms import RegistrationForm
from user_service.factory import create_web_app
from user_service.services import users


@click.command()
@click.option('--email', prompt='Email address')
@click.option('--name', prompt='Name')
@click.option('--password', prompt='Password', hide_input=True,
              confirmation_prompt=True)
@click.option('--role', prompt='Role', default=roles.ADMIN,
              type=click.Choice(roles.ALL))
@click.option('--location', prompt='Location', default='')
@click.option('--farm-name', prompt='Farm name', default='')
@click.option('--mobile', prompt='Mobile number', default='')
def create_user(email: str, name: str, password: str,
                role: str = roles.ADMIN, location: str = '',
                farm_name: str = '', mobile: str = '') -> None:
    """Create a new user."""
    form = RegistrationForm(to_formdata({
        'email': email, 'name': name, 'password': password, 'role': role,
        'location': location, 'farm_name': farm_name, 'mobile': mobile
    }))
    if not form.validate():
        raise click.ClickException('; '.join(errors(form)))

    app = create_web_app()
    with app.app_context():
        users.create_all()
        try:
            user = users.register(form.to_domain(), form.password.data)
        except users.UserExists as e:
            raise click.ClickException(str(e)) from e
    click.echo(f'Created {user.role} {user.email} with ID {user.user_id}')


if __name__ == '__main__':
    create_user()
