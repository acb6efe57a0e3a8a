"""
WSGI / development entry point.

    flask --app clima_backend run
    gunicorn clima_backend:app
"""
import os

from clima import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=int(os.environ.get('PORT', 3001)))
