# backend/wsgi.py
from barbershop import create_app

app = create_app()
