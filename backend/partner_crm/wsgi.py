"""WSGI config for the Partner CRM lead service."""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'partner_crm.settings')
application = get_wsgi_application()
