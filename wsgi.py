"""WSGI entrypoint for Gunicorn.

The draw controller lives in process memory, so run exactly one worker:
  gunicorn -w 1 --threads 100 -b 0.0.0.0:3000 wsgi:app
"""

from drawroom import create_app

app = create_app()
