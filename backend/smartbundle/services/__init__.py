"""
Services package for business logic layer.

Modules are imported directly (smartbundle.services.bundle_service, ...) so
that schemas can depend on the pricing helpers without import cycles.
"""
