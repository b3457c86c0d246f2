from planview import create_app

app = create_app()

# Production entry point: gunicorn -w 2 wsgi:app
