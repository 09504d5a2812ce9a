"""
Helper script for generating a session token.

Be sure that you are using the same secret when running this script as when you
run the services. Set ``JWT_SECRET=somesecret`` in your environment to ensure
that the same secret is always used.


.. code-block:: bash

   $ JWT_SECRET=foosecretthatisatleast32characters python generate_token.py
   User ID [random]:
   Email address: kamal@example.lk
   Role (farmer, admin) [farmer]:
   Valid for (seconds) [28800]:

   eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...


Use the token in your requests to authenticated endpoints. Set the header
``Authorization: Bearer [token]``.

"""

import os
from datetime import timedelta

import click

from freshbonds import domain
from freshbonds.auth import roles, tokens


@click.command()
@click.option('--user_id', prompt='User ID', default=domain.new_id)
@click.option('--email', prompt='Email address')
@click.option('--role', prompt='Role', default=roles.FARMER,
              type=click.Choice(roles.ALL))
@click.option('--duration', prompt='Valid for (seconds)', default=28800)
def generate_token(user_id: str, email: str, role: str = roles.FARMER,
                   duration: int = 28800) -> None:
    """Generate a session token for dev/testing purposes."""
    if not domain.is_valid_id(user_id):
        raise click.BadParameter('Not a valid user ID', param_hint='user_id')
    token = tokens.issue(user_id, email, role, os.environ['JWT_SECRET'],
                         duration=timedelta(seconds=int(duration)))
    click.echo(token)


if __name__ == '__main__':
    generate_token()
