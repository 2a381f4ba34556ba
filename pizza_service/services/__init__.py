"""
Service layer.

Data services (users, franchises, orders) take an ``AsyncSession``;
integrations (factory, denylist) are strategy packages chosen by settings.
"""
