"""auth/ -- Authentication and authorization package for the movie list service.

Credential verification, token issuance, the Session Guard and Role Gate
dependencies, and the users repository.

Layer rule: auth/ imports stdlib, third-party libraries, core/ and sessions/.
It does NOT import from api/ or movies/.
api/ imports from auth/, not the other way around.
"""
