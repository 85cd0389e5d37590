"""Create the submission tables in the configured database."""

from flask import Flask

import moderation
from moderation import config, store

app = Flask('moderation')
app.config.from_object(config)
moderation.init_app(app)

with app.app_context():
    store.create_all()
