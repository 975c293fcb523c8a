"""auth/ -- Authentication package: tokens, the auth gate, and tenancy records.

Layer rule: auth/ imports from core/ and third-party libraries only.
It does NOT import from api/ or inventory/.
api/ imports from auth/, not the other way around.
"""
