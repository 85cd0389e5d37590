"""
Resolves the caller of the current request to an :class:`.Actor`.

Authentication happens upstream; by the time a request reaches us, it carries
an HS256 JWT in its ``Authorization`` header. :class:`.AuthMiddleware` decodes
that token before the request is handled and attaches the result to the WSGI
environ, where :func:`current_actor` picks it up. The token payload looks
like:

.. code-block:: json

   {"user": {"identifier": "1234", "is_admin": false,
             "email": "jane@example.org", "name": "Jane"},
    "exp": 1700000000}

The ``is_admin`` capability is taken from the token, never from data.
"""

import logging
import os
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

import jwt
from flask import Flask, has_request_context, request
from pytz import UTC

from ..domain.agent import Actor, actor_factory
from ..util import get_application_config

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


class AuthMiddleware:
    """
    Middleware to handle auth information on requests.

    Before the request is handled by the application, the ``Authorization``
    header is parsed for an encrypted JWT. If successfully decrypted,
    information about the user is attached to the request.

    This can be accessed in the application via
    ``flask.request.environ['auth']``.  If Authorization header was not
    included, or if the JWT could not be decrypted, then that value will be
    ``None``.
    """

    def __init__(self, wsgi_app: Callable, secret: Optional[str] = None) \
            -> None:
        """Wrap ``wsgi_app``; ``secret`` defaults to ``$JWT_SECRET``."""
        self.wsgi_app = wsgi_app
        self.secret = secret or os.environ.get('JWT_SECRET')

    def __call__(self, environ: dict, start_response: Callable) -> Iterable:
        """Decode the token, then pass the request along."""
        environ['auth'] = self.decode(environ.get('HTTP_AUTHORIZATION'))
        return self.wsgi_app(environ, start_response)

    def decode(self, header: Optional[str]) -> Optional[dict]:
        """Get auth data from an ``Authorization`` header value."""
        if not header or not self.secret:
            return None
        token = header.split(' ', 1)[1] if header.startswith('Bearer ') \
            else header
        try:
            decoded = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except jwt.exceptions.InvalidTokenError as e:
            logger.debug('Rejected auth token: %s', e)
            return None
        return {'user': decoded.get('user'), 'token': token}


def current_actor() -> Optional[Actor]:
    """
    Get the actor responsible for the current request.

    Returns ``None`` outside of a request, for anonymous requests, and for
    requests whose token is missing a usable user.
    """
    if not has_request_context():
        return None
    auth = request.environ.get('auth')
    if not auth or not auth.get('user'):
        return None
    try:
        return actor_factory(**dict(auth['user']))
    except (ValueError, TypeError) as e:
        logger.debug('Token carries no usable user: %s', e)
        return None


def encode_token(actor: Actor, secret: Optional[str] = None,
                 expires_in: int = 36000) -> str:
    """Issue a token for ``actor``, e.g. for tests and system clients."""
    if secret is None:
        secret = get_application_config().get('JWT_SECRET')
    payload: dict = {
        'user': {'identifier': actor.identifier, 'is_admin': actor.is_admin,
                 'email': actor.email, 'name': actor.name},
        'exp': datetime.now(UTC) + timedelta(seconds=expires_in)
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def init_app(app: Flask) -> None:
    """Decode auth tokens on every request to ``app``."""
    app.config.setdefault('JWT_SECRET', os.environ.get('JWT_SECRET'))
    app.wsgi_app = AuthMiddleware(app.wsgi_app,    # type: ignore
                                  app.config['JWT_SECRET'])
