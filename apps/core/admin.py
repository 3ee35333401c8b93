"""
Django admin configuration for core app.
"""
from django.contrib import admin


# Customize admin site header and title
admin.site.site_header = "RRHH Administración"
admin.site.site_title = "RRHH Admin"
admin.site.index_title = "Administración de Recursos Humanos"
