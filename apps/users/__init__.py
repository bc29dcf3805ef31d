"""Users app package.

Defines the organization member model and its role. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout
the project.
"""
